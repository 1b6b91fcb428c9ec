"""
CLI for batch KPI scoring.

Usage:
  python evaluator.py --data samples/kpis.jsonl --out scores.jsonl --csv scores.csv
  python evaluator.py --data samples/kpis.jsonl --out scores.jsonl --verify --runs 5

Input JSONL rows are KPI records, either bare or under a "kpis" key:
  {"companyName": "...", "revenue": "$2M ARR", "fundingStage": "Seed", ...}
  {"id": "deck-17", "kpis": {...}}
"""
from __future__ import annotations

import argparse
import csv
import json
import logging
import sys
from typing import Any, Dict, List

from config import config
from consistency import verify_consistency
from kpi_normalizer import display_value, normalize_kpis
from score_bundle import score_normalized
from scoring import score_breakdown

logger = logging.getLogger(__name__)

CSV_FIELDS = [
    "companyName",
    "growthScore",
    "riskScore",
    "investmentScore",
    "confidenceScore",
    "year1",
    "year3",
    "year5",
    "overallRisk",
    "marketRisk",
    "teamRisk",
    "financialRisk",
    "competitiveRisk",
]


def _read_jsonl(path: str) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    with open(path, "r", encoding="utf-8") as f:
        for n, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                row = json.loads(line)
            except json.JSONDecodeError as e:
                logger.warning(f"Skipping line {n}: invalid JSON ({e})")
                continue
            if isinstance(row, dict):
                rows.append(row)
            else:
                logger.warning(f"Skipping line {n}: not a JSON object")
    return rows


def _write_jsonl(path: str, rows: List[Dict[str, Any]]) -> None:
    with open(path, "w", encoding="utf-8") as f:
        for r in rows:
            f.write(json.dumps(r, ensure_ascii=False) + "\n")


def _csv_row(row: Dict[str, Any]) -> Dict[str, Any]:
    s = row["scores"]
    p = s["growthProjections"]
    ra = s["riskAssessment"]
    rf = ra["riskFactors"]
    return {
        "companyName": display_value(row["kpis"], "companyName"),
        "growthScore": s["growthScore"],
        "riskScore": s["riskScore"],
        "investmentScore": s["investmentScore"],
        "confidenceScore": s["confidenceScore"],
        "year1": p["year1"],
        "year3": p["year3"],
        "year5": p["year5"],
        "overallRisk": ra["overallRisk"],
        "marketRisk": rf["market"],
        "teamRisk": rf["team"],
        "financialRisk": rf["financial"],
        "competitiveRisk": rf["competitive"],
    }


def _write_csv(path: str, rows: List[Dict[str, Any]]) -> None:
    if not rows:
        return
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        w.writeheader()
        for r in rows:
            w.writerow(_csv_row(r))


def score_rows(rows: List[Dict[str, Any]], explain: bool = False, verify: bool = False,
               runs: int = 5) -> List[Dict[str, Any]]:
    out = []
    for row in rows:
        raw = row["kpis"] if isinstance(row.get("kpis"), dict) else row
        kpis = normalize_kpis(raw)
        scored: Dict[str, Any] = {"kpis": kpis, "scores": score_normalized(kpis).to_dict()}
        if "id" in row:
            scored["id"] = row["id"]
        if explain:
            scored["breakdown"] = score_breakdown(kpis)
        if verify:
            scored["consistent"] = verify_consistency(raw, runs=runs)["consistent"]
        out.append(scored)
    return out


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Deterministic investment-readiness scoring for KPI records.")
    ap.add_argument("--data", required=True, help="Input JSONL with one KPI record per line.")
    ap.add_argument("--out", required=True, help="Output JSONL path.")
    ap.add_argument("--csv", default="", help="Optional CSV path.")
    ap.add_argument("--explain", action="store_true", help="Include per-signal score contributions.")
    ap.add_argument("--verify", action="store_true", help="Re-score each record and check results are identical.")
    ap.add_argument("--runs", type=int, default=config.CONSISTENCY_RUNS, help="Runs per record for --verify (min 2).")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

    rows = _read_jsonl(args.data)
    out = score_rows(rows, explain=args.explain, verify=args.verify, runs=args.runs)

    _write_jsonl(args.out, out)
    if args.csv:
        _write_csv(args.csv, out)
    print(f"Wrote {len(out)} scores to {args.out}" + (f" and {args.csv}" if args.csv else ""))

    if args.verify:
        bad = [i for i, r in enumerate(out, start=1) if not r["consistent"]]
        if bad:
            print(f"Inconsistent scoring for records: {bad}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
