"""Half-up rounding shared by the engine (Python's round() is banker's rounding)."""

from decimal import Decimal, ROUND_HALF_UP


def round_half_up(value: float, places: int = 0) -> float:
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, ROUND_HALF_UP))


def round_half_up_int(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), ROUND_HALF_UP))
