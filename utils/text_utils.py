import math


def round_half_up(value: float, digits: int = 0) -> float:
    """Округление с половиной вверх (2.5 -> 3), в отличие от банковского round()"""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def percent(part: float, whole: float) -> int:
    if not whole:
        return 0
    return int(round_half_up(part / whole * 100))
