"""
Consistency verifier: re-run normalize + score on the same input and check
that every numeric output is identical across runs.

Used as a regression guard in tests and by `evaluator.py --verify`.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List

import pandas as pd

from score_bundle import score_company

logger = logging.getLogger(__name__)

MIN_RUNS = 2


def _flatten(bundle: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    flat: Dict[str, Any] = {}
    for k, v in bundle.items():
        key = f"{prefix}{k}"
        if isinstance(v, dict):
            flat.update(_flatten(v, prefix=f"{key}."))
        else:
            flat[key] = v
    return flat


def consistency_frame(results: List[Dict[str, Any]]) -> pd.DataFrame:
    """One row per run, one column per (flattened) output field."""
    rows = [_flatten(r) for r in results]
    df = pd.DataFrame(rows)
    df.index = pd.RangeIndex(start=1, stop=len(rows) + 1, name="run")
    return df


def verify_consistency(raw_kpis: Any, runs: int = 5) -> Dict[str, Any]:
    runs = max(MIN_RUNS, int(runs))
    results = [score_company(raw_kpis).to_dict() for _ in range(runs)]

    df = consistency_frame(results)
    varying = [col for col in df.columns if df[col].nunique(dropna=False) > 1]
    consistent = not varying
    if not consistent:
        logger.warning(f"Scoring is not deterministic; fields varying across {runs} runs: {varying}")
    return {"results": results, "consistent": consistent, "varyingFields": varying}
