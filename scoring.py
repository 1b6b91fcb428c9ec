"""
Deterministic scoring kernel.

Public API
- growth_potential_score(record) -> int in [0,100]
- risk_score(record) -> int in [0,100]          (higher = riskier)
- investment_score(record) -> int in [0,100]
- combine_investment_score(growth, risk) -> int in [0,100]
- confidence_score(record) -> int in [0,100]
- growth_projections(record) -> GrowthProjections
- score_breakdown(record) -> Dict[str, Any]

Every function takes a normalized KPI record (see kpi_normalizer.py) and
nothing else. Scores start from a fixed base, add integer adjustments and are
clamped at the end. Rounding is done in integer arithmetic (half up) so
results do not depend on float rounding mode.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from signals import (
    classify_stage,
    count_competitors,
    funding_stage_signal,
    market_size_signal,
    parse_first_int,
    revenue_signal,
    team_size_signal,
    traction_signal,
)

GROWTH_BASE = 50
RISK_BASE = 50
PROJECTION_BASE = 25

GROWTH_WEIGHT = 60
SAFETY_WEIGHT = 40

# Fields that feed the confidence score, in display order.
CONFIDENCE_FIELDS: List[str] = [
    "companyName",
    "sector",
    "fundingStage",
    "teamSize",
    "revenue",
    "customers",
    "marketSize",
    "competition",
    "geographicMarket",
    "fundingRequest",
    "useOfFunds",
    "technology",
]
DETAILED_FIELD_MIN_LEN = 10
DETAILED_FIELD_POINTS = 100
TERSE_FIELD_POINTS = 60

RISK_STAGE_POINTS = {"seed": 20, "series_a": 10, "series_b": -5, "late": -15}


@dataclass(frozen=True)
class GrowthProjections:
    year1: int
    year3: int
    year5: int

    def to_dict(self) -> Dict[str, int]:
        return {"year1": self.year1, "year3": self.year3, "year5": self.year5}


def clamp(value: int, lo: int = 0, hi: int = 100) -> int:
    return max(lo, min(hi, value))


def round_half_up(numerator: int, denominator: int) -> int:
    """round(numerator / denominator) for non-negative ints, ties away from zero."""
    return (2 * numerator + denominator) // (2 * denominator)


def _field(record: Mapping[str, str], name: str) -> Optional[str]:
    return record.get(name) or None


def _growth_components(record: Mapping[str, str]) -> Dict[str, int]:
    return {
        "revenue": revenue_signal(_field(record, "revenue")).points,
        "marketSize": market_size_signal(_field(record, "marketSize")).points,
        "traction": traction_signal(_field(record, "traction")).points,
        "teamSize": team_size_signal(_field(record, "teamSize")).points,
        "fundingStage": funding_stage_signal(_field(record, "fundingStage")).points,
    }


def _risk_components(record: Mapping[str, str]) -> Dict[str, int]:
    parts: Dict[str, int] = {}

    stage = classify_stage(_field(record, "fundingStage"))
    parts["fundingStage"] = RISK_STAGE_POINTS.get(stage, 0) if stage else 0

    revenue = (_field(record, "revenue") or "").lower()
    if not revenue or "projected" in revenue or "estimated" in revenue:
        parts["revenue"] = 15
    elif "million" in revenue or "billion" in revenue:
        parts["revenue"] = -10
    else:
        parts["revenue"] = 0

    competition = _field(record, "competition")
    if competition:
        n = count_competitors(competition)
        if n > 5:
            parts["competition"] = 15
        elif n > 3:
            parts["competition"] = 10
        elif n <= 2:
            parts["competition"] = -5
        else:
            parts["competition"] = 0
    else:
        parts["competition"] = 0

    size = parse_first_int(_field(record, "teamSize"))
    if size is None:
        parts["teamSize"] = 0
    elif size < 3:
        parts["teamSize"] = 15
    elif size >= 10:
        parts["teamSize"] = -5
    else:
        parts["teamSize"] = 0

    market = (_field(record, "marketSize") or "").lower()
    if not market or ("billion" not in market and "million" not in market):
        parts["marketSize"] = 10
    else:
        parts["marketSize"] = 0

    return parts


def growth_potential_score(record: Mapping[str, str]) -> int:
    return clamp(GROWTH_BASE + sum(_growth_components(record).values()))


def risk_score(record: Mapping[str, str]) -> int:
    return clamp(RISK_BASE + sum(_risk_components(record).values()))


def combine_investment_score(growth: int, risk: int) -> int:
    growth = clamp(int(growth))
    risk = clamp(int(risk))
    return clamp(round_half_up(growth * GROWTH_WEIGHT + (100 - risk) * SAFETY_WEIGHT, 100))


def investment_score(record: Mapping[str, str]) -> int:
    return combine_investment_score(growth_potential_score(record), risk_score(record))


def confidence_score(record: Mapping[str, str]) -> int:
    total = 0
    for name in CONFIDENCE_FIELDS:
        value = _field(record, name)
        if value is None:
            continue
        total += DETAILED_FIELD_POINTS if len(value) > DETAILED_FIELD_MIN_LEN else TERSE_FIELD_POINTS
    return clamp(round_half_up(total, len(CONFIDENCE_FIELDS)))


def growth_projections(record: Mapping[str, str]) -> GrowthProjections:
    base = PROJECTION_BASE

    market = (_field(record, "marketSize") or "").lower()
    if "billion" in market or "trillion" in market:
        base += 25
    elif "million" in market:
        base += 15

    traction = (_field(record, "traction") or "").lower()
    if "million" in traction:
        base += 20
    elif "growth" in traction:
        base += 10

    stage = (_field(record, "fundingStage") or "").lower()
    if "seed" in stage:
        base += 15
    elif "series a" in stage:
        base += 10

    # base * 2.5 rounded half up, kept in integers
    return GrowthProjections(
        year1=min(base, 80),
        year3=min(round_half_up(base * 5, 2), 200),
        year5=min(base * 4, 400),
    )


def score_breakdown(record: Mapping[str, str]) -> Dict[str, Any]:
    """Per-signal contributions behind the growth and risk scores."""
    growth = _growth_components(record)
    risk = _risk_components(record)
    return {
        "growth": {"base": GROWTH_BASE, "components": growth, "score": growth_potential_score(record)},
        "risk": {"base": RISK_BASE, "components": risk, "score": risk_score(record)},
        "confidence": {
            "fields": {n: (len(record[n]) if _field(record, n) else 0) for n in CONFIDENCE_FIELDS},
            "score": confidence_score(record),
        },
    }
