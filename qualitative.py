"""
Qualitative enrichment: sanitize untrusted narrative payloads and merge them
with the deterministic score bundle.

Public API
- sanitize_qualitative(raw) -> Dict[str, Any]   (never raises)
- fallback_qualitative() -> Dict[str, Any]
- merge_with_qualitative(bundle, raw) -> Dict[str, Any]

The narrative payload comes from a generative text service and may be
missing, truncated or wrong-typed. It is accepted either flat
({"factors": [...], "redFlags": [...], ...}) or in the nested layout the
analysis prompt asks for ({"growthPotential": {...}, "riskAssessment":
{...}, "marketAnalysis": {...}}). Flat keys win when both are present.
"""
from __future__ import annotations

import math
import random
import string
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple

from risk_assessment import RISK_LEVELS
from score_bundle import ScoreBundle

RECOMMENDATION_TYPES = ("investment", "growth", "risk-mitigation", "market-strategy")
PRIORITIES = ("High", "Medium", "Low")

DEFAULT_RECOMMENDATION_TYPE = "growth"
DEFAULT_PRIORITY = "Medium"
DEFAULT_RISK_LEVEL = "Medium"

PENDING_POSITION = "Position analysis pending"
PENDING_TITLE = "Recommendation"
PENDING_DESCRIPTION = "Description pending"
PENDING_IMPACT = "Impact analysis pending"
PENDING_TIMELINE = "Timeline to be determined"

MAX_GROWTH_RATE = 1000.0
MAX_LIST_ITEMS = 20
MAX_RECOMMENDATIONS = 10

# field -> nested section it may also be found under
LIST_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("factors", "growthPotential"),
    ("keyDrivers", "growthPotential"),
    ("redFlags", "riskAssessment"),
    ("mitigationStrategies", "riskAssessment"),
    ("marketTrends", "marketAnalysis"),
    ("opportunities", "marketAnalysis"),
    ("threats", "marketAnalysis"),
)

_SCALARS = (str, int, float)


def _lookup(raw: Mapping[str, Any], key: str, section: str) -> Any:
    if key in raw:
        return raw.get(key)
    nested = raw.get(section)
    if isinstance(nested, Mapping):
        return nested.get(key)
    return None


def _scalar_str(value: Any) -> str:
    if isinstance(value, bool) or not isinstance(value, _SCALARS):
        return ""
    try:
        return str(value).strip()
    except ValueError:
        # int too large to render
        return ""


def _str_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    out: List[str] = []
    for item in value:
        s = _scalar_str(item)
        if s:
            out.append(s)
        if len(out) >= MAX_LIST_ITEMS:
            break
    return out


def _text(value: Any, default: str) -> str:
    return _scalar_str(value) or default


def _enum(value: Any, allowed: Tuple[str, ...], default: str) -> str:
    return value if isinstance(value, str) and value in allowed else default


def _number(value: Any, default: float, hi: Optional[float] = None) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, str):
        value = value.replace(",", "").replace("%", "").replace("$", "").strip()
    elif not isinstance(value, (int, float)):
        return default
    try:
        value = float(value)
    except (ValueError, OverflowError):
        return default
    if not math.isfinite(value):
        return default
    value = max(0.0, value)
    if hi is not None:
        value = min(hi, value)
    return int(value) if value.is_integer() else value


def _recommendation(item: Mapping[str, Any]) -> Dict[str, str]:
    return {
        "type": _enum(item.get("type"), RECOMMENDATION_TYPES, DEFAULT_RECOMMENDATION_TYPE),
        "priority": _enum(item.get("priority"), PRIORITIES, DEFAULT_PRIORITY),
        "title": _text(item.get("title"), PENDING_TITLE),
        "description": _text(item.get("description"), PENDING_DESCRIPTION),
        "expectedImpact": _text(item.get("expectedImpact"), PENDING_IMPACT),
        "timeline": _text(item.get("timeline"), PENDING_TIMELINE),
    }


def sanitize_qualitative(raw: Any) -> Dict[str, Any]:
    """
    Map any payload to a structurally complete qualitative analysis.
    Unknown keys are dropped.
    """
    try:
        raw = dict(raw) if isinstance(raw, Mapping) else {}
    except Exception:
        raw = {}

    out: Dict[str, Any] = {}
    for key, section in LIST_FIELDS:
        out[key] = _str_list(_lookup(raw, key, section))

    out["competitivePosition"] = _text(_lookup(raw, "competitivePosition", "marketAnalysis"), PENDING_POSITION)
    out["marketSize"] = _number(_lookup(raw, "marketSize", "marketAnalysis"), 0)
    out["growthRate"] = _number(_lookup(raw, "growthRate", "marketAnalysis"), 0, hi=MAX_GROWTH_RATE)
    out["overallRisk"] = _enum(_lookup(raw, "overallRisk", "riskAssessment"), RISK_LEVELS, DEFAULT_RISK_LEVEL)

    recs = raw.get("recommendations")
    out["recommendations"] = (
        [_recommendation(r) for r in recs if isinstance(r, Mapping)][:MAX_RECOMMENDATIONS]
        if isinstance(recs, list)
        else []
    )
    return out


def fallback_qualitative() -> Dict[str, Any]:
    """Generic narrative used when the generative service is unavailable."""
    return {
        "factors": ["Market opportunity", "Team experience"],
        "keyDrivers": ["Product innovation", "Market expansion"],
        "redFlags": ["Competition risk", "Market timing"],
        "mitigationStrategies": ["Strengthen competitive moat", "Accelerate go-to-market"],
        "marketTrends": ["Digital transformation", "Remote work adoption"],
        "competitivePosition": "Emerging player with differentiated approach",
        "marketSize": 0,
        "growthRate": 0,
        "opportunities": ["Market expansion", "Product diversification"],
        "threats": ["Increased competition", "Economic uncertainty"],
        "overallRisk": DEFAULT_RISK_LEVEL,
        "recommendations": [
            {
                "type": "growth",
                "priority": "High",
                "title": "Accelerate Product Development",
                "description": "Focus on core product features to establish market position",
                "expectedImpact": "Improved market competitiveness",
                "timeline": "6-12 months",
            }
        ],
    }


def generate_analysis_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"analysis_{int(time.time() * 1000)}_{suffix}"


def merge_with_qualitative(bundle: ScoreBundle, raw_qualitative: Any = None) -> Dict[str, Any]:
    """
    Final analysis record. Scores, projections and risk factors come from
    the bundle only; the narrative fills the descriptive fields around them.
    """
    q = sanitize_qualitative(raw_qualitative)
    risk = bundle.risk_assessment
    return {
        "id": generate_analysis_id(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "growthPotential": {
            "score": bundle.growth_score,
            "factors": q["factors"],
            "projectedGrowth": bundle.growth_projections.to_dict(),
            "keyDrivers": q["keyDrivers"],
        },
        "riskAssessment": {
            "overallRisk": risk.overall_risk,
            "riskScore": risk.risk_score,
            "redFlags": q["redFlags"],
            "mitigationStrategies": q["mitigationStrategies"],
            "riskFactors": risk.risk_factors.to_dict(),
            "narrativeRisk": q["overallRisk"],
        },
        "marketAnalysis": {
            "marketTrends": q["marketTrends"],
            "competitivePosition": q["competitivePosition"],
            "marketSize": q["marketSize"],
            "growthRate": q["growthRate"],
            "opportunities": q["opportunities"],
            "threats": q["threats"],
        },
        "recommendations": q["recommendations"],
        "overallScore": bundle.investment_score,
        "confidence": bundle.confidence_score,
        "scores": bundle.to_dict(),
    }
