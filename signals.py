"""
Free-text signal extractors used by the scoring kernel.

Each extractor looks at one field of a normalized KPI record and returns a
Signal(value, points): `value` is what was parsed out of the text (or None)
and `points` is the contribution that signal makes to the growth score.
Keeping one function per heuristic lets any of them be swapped out without
touching the aggregation in scoring.py.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Optional, Tuple

_DIGIT_RE = re.compile(r"\d")
_AMOUNT_RE = re.compile(r"(\d+(?:\.\d+)?)")
_INT_RE = re.compile(r"\d+")
_THOUSANDS_RE = re.compile(r"(?<=\d),(?=\d{3}\b)")

TRACTION_KEYWORDS: Tuple[str, ...] = (
    "growth",
    "million",
    "users",
    "customers",
    "revenue",
    "expansion",
    "partnerships",
)
TRACTION_POINTS_PER_KEYWORD = 3
TRACTION_CAP = 20

# Stage buckets, most mature first; the first bucket with a matching
# keyword wins.
STAGE_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("late", ("series c", "series d", "ipo")),
    ("series_b", ("series b",)),
    ("series_a", ("series a",)),
    ("seed", ("seed",)),
)
STAGE_GROWTH_POINTS = {"late": 15, "series_b": 12, "series_a": 8, "seed": 5}


@dataclass(frozen=True)
class Signal:
    value: Any
    points: int


def _lower(text: Optional[str]) -> str:
    return (text or "").lower()


def has_digit(text: Optional[str]) -> bool:
    return bool(text) and _DIGIT_RE.search(text) is not None


def parse_leading_amount(text: Optional[str]) -> Optional[float]:
    """First decimal number in the text, thousands separators ignored."""
    if not text:
        return None
    m = _AMOUNT_RE.search(_THOUSANDS_RE.sub("", text))
    return float(m.group(1)) if m else None


def parse_first_int(text: Optional[str]) -> Optional[int]:
    if not text:
        return None
    m = _INT_RE.search(_THOUSANDS_RE.sub("", text))
    return int(m.group(0)) if m else None


def count_competitors(text: Optional[str]) -> int:
    if not text:
        return 0
    return len([c for c in text.split(",") if c.strip()])


def classify_stage(text: Optional[str]) -> Optional[str]:
    low = _lower(text)
    if not low:
        return None
    for bucket, keywords in STAGE_KEYWORDS:
        if any(k in low for k in keywords):
            return bucket
    return None


def revenue_signal(revenue: Optional[str]) -> Signal:
    low = _lower(revenue)
    if "billion" in low:
        return Signal("billion", 30)
    if "million" in low:
        amount = parse_leading_amount(revenue)
        if amount is None:
            return Signal(None, 15)
        if amount >= 100:
            pts = 30
        elif amount >= 50:
            pts = 25
        elif amount >= 10:
            pts = 20
        elif amount >= 1:
            pts = 15
        else:
            pts = 10
        return Signal(amount, pts)
    if has_digit(revenue):
        return Signal(parse_leading_amount(revenue), 10)
    return Signal(None, 0)


def market_size_signal(market_size: Optional[str]) -> Signal:
    low = _lower(market_size)
    if "trillion" in low or "billion" in low:
        return Signal("billion", 25)
    if "million" in low:
        return Signal("million", 15)
    if has_digit(market_size):
        return Signal("numeric", 10)
    return Signal(None, 0)


def traction_signal(traction: Optional[str]) -> Signal:
    low = _lower(traction)
    matched = tuple(k for k in TRACTION_KEYWORDS if k in low)
    return Signal(matched, min(len(matched) * TRACTION_POINTS_PER_KEYWORD, TRACTION_CAP))


def team_size_signal(team_size: Optional[str]) -> Signal:
    size = parse_first_int(team_size)
    if size is None:
        return Signal(None, 0)
    if size >= 50:
        pts = 10
    elif size >= 20:
        pts = 8
    elif size >= 10:
        pts = 6
    elif size >= 3:
        pts = 4
    else:
        pts = 0
    return Signal(size, pts)


def funding_stage_signal(funding_stage: Optional[str]) -> Signal:
    bucket = classify_stage(funding_stage)
    return Signal(bucket, STAGE_GROWTH_POINTS.get(bucket, 0) if bucket else 0)
