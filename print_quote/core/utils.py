# core/utils.py

import math
import re
import logging
from typing import Any

logger = logging.getLogger(__name__)

_NUMBER_RE = re.compile(r"-?\d+(?:\.\d+)?")


def safe_float(value: Any, default: float = 0.0) -> float:
    """Coerces value to a finite float, returning default for None/NaN/inf/garbage."""
    try:
        f = float(value)
    except (TypeError, ValueError):
        return default
    return f if math.isfinite(f) else default


def non_negative(value: Any) -> float:
    """Like safe_float but also clamps negatives to 0."""
    return max(0.0, safe_float(value))


def round2(value: float) -> float:
    return round(value, 2)


def round_up_to_step(value: float, step: float) -> float:
    """
    Rounds value up to the next multiple of step.

    The quotient is rounded to 9 places first so that binary noise
    (e.g. 12.35 / 0.05 == 246.99999999999997) does not push an exact
    multiple up a full step.
    """
    if step <= 0:
        return value
    return math.ceil(round(value / step, 9)) * step


def format_time(seconds: float) -> str:
    """
    Formats a duration in seconds into a human-readable string (e.g., "1h 30m").

    Seconds are only shown for durations under an hour. Returns "N/A" for
    negative or non-numeric input.
    """
    if seconds is None or not isinstance(seconds, (int, float)) or not math.isfinite(seconds) or seconds < 0:
        return "N/A"

    minutes, sec = divmod(int(math.ceil(seconds)), 60)
    hours, minutes = divmod(minutes, 60)

    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if not hours and sec:
        parts.append(f"{sec}s")
    return " ".join(parts) or "0s"


def parse_price_to_pence(value: Any, bare_as_pence: bool = False) -> int:
    """
    Normalises a loosely formatted price into integer minor units (pence).

    Numbers are taken as already being pence. Strings are inspected for a
    unit: "£12.50", "12.50 gbp" or "12 pounds" are major units; "250p",
    "250 pence", "250c" or "250 cents" are minor units. Bare numeric strings
    up to 10000 are treated as major units, larger ones as minor units,
    unless bare_as_pence is set (for columns that already hold pence).
    Anything that does not contain a number yields 0.
    """
    if value is None:
        return 0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return int(round(value)) if math.isfinite(value) else 0

    text = str(value).strip().lower()
    match = _NUMBER_RE.search(text.replace(",", ""))
    if not match:
        return 0
    num = float(match.group(0))

    if "pound" in text or "£" in text or "gbp" in text:
        return int(round(num * 100))
    if re.search(r"\bp(?:ence)?\b", text) or text.endswith("p"):
        return int(round(num))
    if re.search(r"\bc(?:ents?)?\b", text) or text.endswith("c"):
        return int(round(num))
    if bare_as_pence or num > 10000:
        return int(round(num))
    return int(round(num * 100))


def format_pounds_from_pence(pence: Any) -> str:
    return f"£{safe_float(pence) / 100:.2f}"
