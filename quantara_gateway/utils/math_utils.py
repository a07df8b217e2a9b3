"""Numeric helpers shared by the scoring and lifecycle modules"""

import math


def clamp(value: float, lower: float, upper: float) -> float:
    return min(max(value, lower), upper)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round .5 upwards (2.5 -> 3), unlike the banker's rounding of round()"""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor
