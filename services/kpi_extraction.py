"""
KPI extraction from pitch-deck text.

Asks the generative service for the canonical KPI fields as JSON; when it is
unavailable or returns nothing usable, falls back to labelled-line regexes
("Revenue: ...", "Team Size: ..."). Output is a raw KPI dict meant to be
passed through kpi_normalizer.normalize_kpis().
"""
from __future__ import annotations
import logging
import re
from typing import Any, Dict, List, Optional

from services.gemini_client import GeminiClient

logger = logging.getLogger(__name__)

MAX_PROMPT_CHARS = 18000

_FIELD_LABELS: Dict[str, List[str]] = {
    "companyName": [r"\b(?:Company(?: Name)?|Startup)\s*[:\-]\s*([^\n]+)"],
    "sector": [r"\b(?:Sector|Industry|Market Segment)\s*[:\-]\s*([^\n]+)"],
    "fundingStage": [
        r"\b(?:Funding )?Stage\s*[:\-]\s*([^\n]+)",
        r"\b(Pre-Seed|Seed|Series [A-D]|IPO)\b",
    ],
    "revenue": [r"\b(?:Revenue|ARR|Annual Recurring Revenue)\s*[:\-]\s*([^\n]+)"],
    "teamSize": [r"\b(?:Team Size|Team|Employees|Headcount)\s*[:\-]\s*([^\n]+)"],
    "marketSize": [r"\b(?:Market Size|TAM|Total Addressable Market)\s*[:\-]\s*([^\n]+)"],
    "customers": [r"\b(?:Customers|Users|Customer Count)\s*[:\-]\s*([^\n]+)"],
    "competition": [r"\b(?:Competition|Competitors)\s*[:\-]\s*([^\n]+)"],
    "businessModel": [r"\bBusiness Model\s*[:\-]\s*([^\n]+)"],
    "traction": [r"\b(?:Traction|Growth)\s*[:\-]\s*([^\n]+)"],
    "technology": [r"\b(?:Technology|Tech Stack)\s*[:\-]\s*([^\n]+)"],
    "geographicMarket": [r"\b(?:Geographic Market|Geography|Markets|Location)\s*[:\-]\s*([^\n]+)"],
    "keyMetrics": [r"\bKey Metrics\s*[:\-]\s*([^\n]+)"],
    "fundingRequest": [r"\b(?:Funding Request|Ask|Raising)\s*[:\-]\s*([^\n]+)"],
    "useOfFunds": [r"\bUse of (?:Funds|Proceeds)\s*[:\-]\s*([^\n]+)"],
}

KPI_FIELDS = list(_FIELD_LABELS.keys())


def _first_match(text: str, labels: List[str]) -> Optional[str]:
    for label in labels:
        m = re.search(label, text, flags=re.I)
        if m:
            return m.group(1).strip()
    return None


def build_kpi_prompt(text: str) -> str:
    fields = ",\n".join(f'  "{f}": "string or null"' for f in KPI_FIELDS)
    return (
        "Analyze the following pitch deck content and extract key performance indicators "
        "and company information. Return ONLY a JSON object with these keys; use null when "
        "a value is not stated.\n\n"
        "{\n"
        f"{fields}\n"
        "}\n\n"
        "Notes:\n"
        "- fundingStage is one of pre-seed, seed, series A, series B, series C, series D, IPO.\n"
        "- competition is a comma-separated list of competitor names.\n"
        "- Keep units with amounts (e.g. \"$2.5 million ARR\", \"$40 billion TAM\").\n\n"
        "<DECK>\n"
        f"{text[:MAX_PROMPT_CHARS]}\n"
        "</DECK>"
    )


class KPIExtractor:
    def __init__(self, gemini: Optional[GeminiClient] = None):
        self.gemini = gemini

    def fallback_extract(self, text: str) -> Dict[str, Any]:
        kpis: Dict[str, Any] = {}
        for field, labels in _FIELD_LABELS.items():
            value = _first_match(text, labels)
            if value:
                kpis[field] = value
        if "companyName" not in kpis:
            m = re.search(r"^([A-Z][a-zA-Z&]+(?: [A-Z][a-zA-Z&]+)*)(?:\s(?:Inc|LLC|Corp|Ltd)\.?)?\s*$", text, flags=re.M)
            if m:
                kpis["companyName"] = m.group(1).strip()
        return kpis

    def extract(self, text: str) -> Dict[str, Any]:
        text = text or ""
        data: Optional[Dict[str, Any]] = None
        if self.gemini is not None and self.gemini.enabled:
            data = self.gemini.generate_json(build_kpi_prompt(text))
        if data:
            logger.info(f"Extracted {sum(1 for v in data.values() if v)} KPI fields with the generative service")
            return data
        logger.info("Falling back to labelled-line KPI extraction")
        return self.fallback_extract(text)
