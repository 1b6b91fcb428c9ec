"""
Pitch deck analyzer: the orchestration layer around the scoring core.
- Text extraction (PDF via pdfplumber, URL via Firecrawl) feeds KPI extraction.
- KPIs are normalized and scored deterministically (score_bundle.score_company).
- Market news and the generative narrative are optional enrichments; when
  either fails the deterministic scores are returned with fallback narrative.
"""

import logging
from typing import Dict, Any, Optional

from config import Config, load_config
from kpi_normalizer import normalize_kpis
from qualitative import fallback_qualitative, merge_with_qualitative
from score_bundle import score_normalized
from adapters.firecrawl_client import FirecrawlClient
from adapters.news_adapter import NewsAdapter
from adapters.news_client import NewsAPIClient
from services.document_ingest import DocumentIngestor
from services.gemini_client import GeminiClient
from services.kpi_extraction import KPIExtractor
from services.market_data import MarketDataService
from services.qualitative_analysis import QualitativeAnalysisService

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


class MissingSourceTextError(ValueError):
    """Raised when there is no extracted document text to analyze."""


class PitchDeckAnalyzer:
    def __init__(
        self,
        config: Optional[Config] = None,
        ingestor: Optional[DocumentIngestor] = None,
        kpi_extractor: Optional[KPIExtractor] = None,
        market_data: Optional[MarketDataService] = None,
        qualitative: Optional[QualitativeAnalysisService] = None,
    ):
        self.config = config or load_config()
        cfg = self.config

        gemini = None
        if kpi_extractor is None or qualitative is None:
            gemini = GeminiClient(cfg.GEMINI_API_KEY, model=cfg.GEMINI_MODEL, max_retries=cfg.LLM_MAX_RETRIES)

        self.ingestor = ingestor or DocumentIngestor(
            FirecrawlClient(cfg.FIRECRAWL_API_KEY, timeout=cfg.HTTP_TIMEOUT_SECONDS)
        )
        self.kpi_extractor = kpi_extractor or KPIExtractor(gemini)
        self.qualitative = qualitative or QualitativeAnalysisService(gemini)

        self.market_data = market_data
        if self.market_data is None:
            if cfg.NEWS_API_KEY:
                client = NewsAPIClient(cfg.NEWS_API_KEY, timeout=cfg.HTTP_TIMEOUT_SECONDS)
                self.market_data = MarketDataService(
                    NewsAdapter(client), lookback_days=cfg.NEWS_LOOKBACK_DAYS, page_size=cfg.NEWS_PAGE_SIZE
                )
            else:
                logger.info("[analyzer] News API key missing; market context disabled.")

    def _market_context(self, kpis: Dict[str, str]) -> Optional[Dict[str, Any]]:
        if self.market_data is None:
            return None
        keywords = [kpis["companyName"]] if kpis.get("companyName") else None
        try:
            return self.market_data.get_market_data(kpis.get("sector"), keywords)
        except Exception as e:
            logger.warning(f"[analyzer] Market data failed: {e}")
            return None

    def _narrative(self, kpis: Dict[str, str], market: Optional[Dict[str, Any]], text: str) -> Dict[str, Any]:
        try:
            raw = self.qualitative.analyze(kpis, market, text)
        except Exception as e:
            logger.warning(f"[analyzer] Qualitative analysis failed: {e}")
            raw = None
        return raw if raw is not None else fallback_qualitative()

    def analyze(
        self,
        extracted_text: str,
        raw_kpis: Optional[Dict[str, Any]] = None,
        market_data: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Full analysis of one deck. `raw_kpis` skips KPI extraction when the
        caller already has them; `market_data` skips the news lookup.
        """
        if not isinstance(extracted_text, str) or not extracted_text.strip():
            raise MissingSourceTextError("Extracted text is required for analysis")

        if raw_kpis is None:
            raw_kpis = self.kpi_extractor.extract(extracted_text)
        kpis = normalize_kpis(raw_kpis)
        bundle = score_normalized(kpis)
        logger.info(
            f"[analyzer] {kpis.get('companyName', 'unknown company')}: growth={bundle.growth_score} "
            f"risk={bundle.risk_score} investment={bundle.investment_score} confidence={bundle.confidence_score}"
        )

        market = market_data if market_data is not None else self._market_context(kpis)
        record = merge_with_qualitative(bundle, self._narrative(kpis, market, extracted_text))
        record["kpis"] = kpis
        if market is not None:
            record["marketData"] = market
        return record

    def analyze_pdf(self, file_bytes: bytes) -> Dict[str, Any]:
        extraction = self.ingestor.extract_pdf(file_bytes)
        if not extraction.get("success"):
            raise MissingSourceTextError(extraction.get("error") or "Failed to extract text")
        return self.analyze(extraction["text"])

    def analyze_url(self, url: str) -> Dict[str, Any]:
        extraction = self.ingestor.extract_url(url)
        if not extraction.get("success"):
            raise MissingSourceTextError(extraction.get("error") or "Failed to extract text")
        return self.analyze(extraction["text"])
