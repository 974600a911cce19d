from app.utils.rounding import round_half_up


def test_whole_numbers():
    assert round_half_up(2.5) == 3
    assert round_half_up(34.5) == 35
    assert round_half_up(37.108) == 37
    assert round_half_up(0) == 0
    assert isinstance(round_half_up(2.5), int)


def test_two_decimals():
    assert round_half_up(3.125, 2) == 3.13
    assert round_half_up(87.5, 2) == 87.5
    assert round_half_up(66.66666, 2) == 66.67
    assert round_half_up(2 / 3 * 100, 2) == 66.67
