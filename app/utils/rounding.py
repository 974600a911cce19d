"""
Half-up rounding for stored accuracies, times and scores
"""
from decimal import Decimal, ROUND_HALF_UP


def round_half_up(value, ndigits: int = 0):
    """
    Round halves away from zero (2.5 -> 3, 3.125 -> 3.13)

    Returns an int when ndigits is 0, else a float.
    """
    quantum = Decimal(1).scaleb(-ndigits)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return int(rounded) if ndigits == 0 else float(rounded)
