"""
KPI normalization: any KPI-shaped payload -> canonical string record.

Public API
- normalize_kpis(raw) -> Dict[str, str]
- display_value(record, field) -> str

The canonical record only ever holds trimmed, non-empty strings. Fields that
are missing, empty or unparseable are left out; the "N/A" sentinel is applied
by display_value() for presentation and never stored. The same rule applies
inside values: when a nested object is flattened to "key: value" pairs, pairs
whose value is empty or null are dropped, as are empty list items.
"""
from __future__ import annotations

import math
from typing import Any, Dict, List, Mapping, Tuple

# Canonical field -> source aliases, highest priority first.
FIELD_ALIASES: List[Tuple[str, Tuple[str, ...]]] = [
    ("companyName", ("companyName", "company_name", "company", "name")),
    ("sector", ("sector", "industry")),
    ("fundingStage", ("fundingStage", "funding_stage", "stage", "fundingRound", "funding_round")),
    ("revenue", ("revenue", "arr", "annualRevenue", "annual_revenue")),
    ("teamSize", ("teamSize", "team_size", "employees")),
    ("marketSize", ("marketSize", "market_size", "tam")),
    ("customers", ("customers", "customerCount", "customer_count")),
    ("competition", ("competition", "competitors")),
    ("businessModel", ("businessModel", "business_model")),
    ("traction", ("traction", "growthRate", "growth_rate")),
    ("technology", ("technology", "tech")),
    ("geographicMarket", ("geographicMarket", "geographic_market", "geography")),
    ("keyMetrics", ("keyMetrics", "key_metrics", "metrics")),
    ("fundingRequest", ("fundingRequest", "funding_request", "askAmount", "ask_amount")),
    ("useOfFunds", ("useOfFunds", "use_of_funds")),
]

CANONICAL_FIELDS: List[str] = [name for name, _ in FIELD_ALIASES]

NOT_AVAILABLE = "N/A"

_MAX_DEPTH = 4


def _stringify(value: Any, depth: int = 0) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return ""
        return str(int(value)) if value.is_integer() else repr(value)
    if depth >= _MAX_DEPTH:
        return str(value).strip()
    if isinstance(value, Mapping):
        parts = []
        for k, v in value.items():
            s = _stringify(v, depth + 1)
            if s:
                parts.append(f"{_stringify(k, depth + 1)}: {s}")
        return "; ".join(parts)
    if isinstance(value, (list, tuple)):
        items = [_stringify(v, depth + 1) for v in value]
        return ", ".join(i for i in items if i)
    return str(value).strip()


def _coerce(value: Any) -> str:
    try:
        return _stringify(value)
    except Exception:
        # Objects with a broken __str__ are treated as absent.
        return ""


def normalize_kpis(raw: Any) -> Dict[str, str]:
    """
    Coerce a raw KPI payload (AI extraction output, manual input) into the
    canonical record. Pure and total: never raises, never mutates `raw`.
    """
    if not isinstance(raw, Mapping):
        return {}
    out: Dict[str, str] = {}
    for field, aliases in FIELD_ALIASES:
        for alias in aliases:
            try:
                value = raw.get(alias)
            except Exception:
                value = None
            s = _coerce(value)
            if s:
                out[field] = s
                break
    return out


def display_value(record: Mapping[str, str], field: str) -> str:
    return record.get(field) or NOT_AVAILABLE
