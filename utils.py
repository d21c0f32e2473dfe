"""
Utility functions for SplitMate ledger
"""
from __future__ import annotations
import os
from datetime import date, datetime
from typing import Dict
from decimal import Decimal, ROUND_HALF_UP


def round_currency(value: float, precision: int) -> float:
    """Round half-up to `precision` decimal places, normalizing -0.0 to 0.0"""
    quantum = Decimal(1).scaleb(-precision)
    out = float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))
    return out + 0.0


def round_preserving_total(values: Dict[str, float], precision: int) -> Dict[str, float]:
    """
    Round every value to `precision` places so that the rounded values add up
    to the rounded total. Rounding each value on its own drifts by up to half a
    unit per entry; the difference is handed out one unit at a time to the
    entries whose rounding moved them furthest the other way (largest remainder).
    Ties go to the earlier key.
    """
    quantum = Decimal(1).scaleb(-precision)
    exact = {k: Decimal(str(v)) for k, v in values.items()}
    rounded = {k: v.quantize(quantum, rounding=ROUND_HALF_UP) for k, v in exact.items()}
    target = sum(exact.values(), Decimal(0)).quantize(quantum, rounding=ROUND_HALF_UP)
    steps = int((target - sum(rounded.values(), Decimal(0))) / quantum)
    if steps:
        sign = 1 if steps > 0 else -1
        order = sorted(exact, key=lambda k: (exact[k] - rounded[k]) * sign, reverse=True)
        for k in order[:abs(steps)]:
            rounded[k] += quantum * sign
    return {k: float(v) + 0.0 for k, v in rounded.items()}


def is_settled(value: float, tolerance: float) -> bool:
    """True when value is within tolerance of zero"""
    return abs(value) <= tolerance


def parse_date(s: str) -> date:
    """Parse YYYY-MM-DD date string; a trailing time part is ignored"""
    return datetime.strptime(s.strip()[:10], "%Y-%m-%d").date()


def app_dir() -> str:
    """
    Get application data directory: $SPLITMATE_HOME or ~/.splitmate
    Creates directory if it doesn't exist.
    """
    path = os.environ.get("SPLITMATE_HOME") or os.path.join(os.path.expanduser("~"), ".splitmate")
    os.makedirs(path, exist_ok=True)
    return path
