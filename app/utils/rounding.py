import math


def round_half_up(value: float) -> int:
    """Rundet .5 immer nach oben (Python round() rundet .5 auf die gerade Zahl)."""
    return math.floor(value + 0.5)
