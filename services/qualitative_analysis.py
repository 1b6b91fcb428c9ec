"""
Qualitative Analysis Service
Asks the generative service for the narrative half of an analysis (factors,
red flags, market commentary, recommendations). Its output is untrusted and
always goes through qualitative.sanitize_qualitative() before use.
"""
import json
import logging
from typing import Dict, Any, Optional

from services.gemini_client import GeminiClient

logger = logging.getLogger(__name__)

MAX_DECK_CHARS = 18000
MAX_MARKET_ARTICLES = 5


def _market_context(market_data: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    if not market_data:
        return {}
    return {
        "sector": market_data.get("sector"),
        "marketSentiment": market_data.get("marketSentiment"),
        "marketTrends": market_data.get("marketTrends", []),
        "headlines": [
            {"title": a.get("title"), "source": a.get("source"), "publishedAt": a.get("publishedAt")}
            for a in (market_data.get("articles") or [])[:MAX_MARKET_ARTICLES]
        ],
    }


def build_analysis_prompt(kpis: Dict[str, str], market_data: Optional[Dict[str, Any]], deck_text: str) -> str:
    return f"""
As an expert venture capital analyst, review this startup pitch deck and provide the qualitative part of an investment analysis.
Numeric scores are computed separately; do not return scores.

COMPANY DATA:
{json.dumps(kpis, indent=2, sort_keys=True)}

MARKET CONTEXT:
{json.dumps(_market_context(market_data), indent=2)}

PITCH DECK CONTENT:
{(deck_text or "")[:MAX_DECK_CHARS]}

Return ONLY a JSON object in this format:
{{
  "factors": [<key growth factors>],
  "keyDrivers": [<growth drivers>],
  "redFlags": [<concerning issues>],
  "mitigationStrategies": [<risk mitigation suggestions>],
  "overallRisk": "<Low|Medium|High>",
  "marketTrends": [<relevant trends>],
  "competitivePosition": "<description>",
  "marketSize": <estimated market size in USD, number>,
  "growthRate": <annual market growth percentage, number>,
  "opportunities": [<opportunities>],
  "threats": [<threats>],
  "recommendations": [
    {{
      "type": "<investment|growth|risk-mitigation|market-strategy>",
      "priority": "<High|Medium|Low>",
      "title": "<title>",
      "description": "<description>",
      "expectedImpact": "<impact>",
      "timeline": "<timeline>"
    }}
  ]
}}
""".strip()


class QualitativeAnalysisService:
    def __init__(self, gemini: Optional[GeminiClient]):
        self.gemini = gemini

    @property
    def enabled(self) -> bool:
        return self.gemini is not None and self.gemini.enabled

    def analyze(self, kpis: Dict[str, str], market_data: Optional[Dict[str, Any]],
                deck_text: str) -> Optional[Dict[str, Any]]:
        """Raw narrative payload, or None when the service is unavailable or unparseable."""
        if not self.enabled:
            return None
        data = self.gemini.generate_json(build_analysis_prompt(kpis, market_data, deck_text))
        if data is None:
            logger.warning("Qualitative analysis unavailable; using fallback narrative")
        return data
