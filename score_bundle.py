"""
score_company(): raw KPI payload -> ScoreBundle.

Normalizes the payload, runs the scoring kernel and builds the risk
assessment. No I/O, no clock, no randomness.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping

from kpi_normalizer import normalize_kpis
from risk_assessment import RiskAssessment, build_risk_assessment
from scoring import (
    GrowthProjections,
    combine_investment_score,
    confidence_score,
    growth_potential_score,
    growth_projections,
    risk_score,
)


@dataclass(frozen=True)
class ScoreBundle:
    growth_score: int
    risk_score: int
    investment_score: int
    confidence_score: int
    growth_projections: GrowthProjections
    risk_assessment: RiskAssessment

    def to_dict(self) -> Dict[str, Any]:
        return {
            "growthScore": self.growth_score,
            "riskScore": self.risk_score,
            "investmentScore": self.investment_score,
            "confidenceScore": self.confidence_score,
            "growthProjections": self.growth_projections.to_dict(),
            "riskAssessment": self.risk_assessment.to_dict(),
        }


def score_normalized(record: Mapping[str, str]) -> ScoreBundle:
    growth = growth_potential_score(record)
    risk = risk_score(record)
    return ScoreBundle(
        growth_score=growth,
        risk_score=risk,
        investment_score=combine_investment_score(growth, risk),
        confidence_score=confidence_score(record),
        growth_projections=growth_projections(record),
        risk_assessment=build_risk_assessment(record, risk),
    )


def score_company(raw_kpis: Any) -> ScoreBundle:
    return score_normalized(normalize_kpis(raw_kpis))
