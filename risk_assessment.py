"""
Risk label and four-axis risk factor breakdown.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping

from scoring import clamp
from signals import count_competitors, parse_first_int

RISK_LEVELS = ("Low", "Medium", "High")
LOW_RISK_MAX = 35
MEDIUM_RISK_MAX = 65


@dataclass(frozen=True)
class RiskFactors:
    market: int
    team: int
    financial: int
    competitive: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "market": self.market,
            "team": self.team,
            "financial": self.financial,
            "competitive": self.competitive,
        }


@dataclass(frozen=True)
class RiskAssessment:
    overall_risk: str
    risk_score: int
    risk_factors: RiskFactors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overallRisk": self.overall_risk,
            "riskScore": self.risk_score,
            "riskFactors": self.risk_factors.to_dict(),
        }


def overall_risk_label(risk_score: int) -> str:
    low, medium, high = RISK_LEVELS
    if risk_score <= LOW_RISK_MAX:
        return low
    if risk_score <= MEDIUM_RISK_MAX:
        return medium
    return high


def risk_factors(record: Mapping[str, str]) -> RiskFactors:
    market = 40 + (-10 if record.get("marketSize") else 10)

    team_text = record.get("teamSize")
    if not team_text:
        team = 30 + 15
    else:
        size = parse_first_int(team_text)
        team = 30 + (-10 if size is not None and size > 5 else 10)

    financial = 50 + (-15 if record.get("revenue") else 20)

    competition = record.get("competition")
    competitive = 45 + (count_competitors(competition) * 5 if competition else 10)

    return RiskFactors(
        market=clamp(market),
        team=clamp(team),
        financial=clamp(financial),
        competitive=clamp(competitive),
    )


def build_risk_assessment(record: Mapping[str, str], risk_score: int) -> RiskAssessment:
    risk_score = clamp(int(risk_score))
    return RiskAssessment(
        overall_risk=overall_risk_label(risk_score),
        risk_score=risk_score,
        risk_factors=risk_factors(record),
    )
