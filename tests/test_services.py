import unittest
from types import SimpleNamespace
from unittest import mock

from adapters.news_adapter import DEFAULT_QUERY, NewsAdapter, build_query
from services.document_ingest import DocumentIngestor
from services.gemini_client import GeminiClient, first_json_object
from services.kpi_extraction import KPIExtractor, build_kpi_prompt
from services.market_data import MarketDataService, market_sentiment, market_trends, relevance_score
from services.qualitative_analysis import QualitativeAnalysisService, build_analysis_prompt

DECK_TEXT = """Lumen Health
Company: Lumen Health Inc
Sector: Digital Health
Stage: Series A
Revenue: $12 million ARR
Team Size: 34 employees
Market Size: $40 billion
Competitors: Teladoc, Amwell, MDLive
Use of Funds: Hiring and clinical trials
"""


class FakeGemini:
    def __init__(self, payload=None, enabled=True):
        self.payload = payload
        self.enabled = enabled
        self.prompts = []

    def generate_json(self, prompt):
        self.prompts.append(prompt)
        return self.payload


class TestFirstJsonObject(unittest.TestCase):
    def test_prose_wrapped(self):
        self.assertEqual(first_json_object('Sure! Here it is: {"a": 1} Hope this helps.'), {"a": 1})

    def test_fenced(self):
        self.assertEqual(first_json_object('```json\n{"a": {"b": [1, 2]}}\n```'), {"a": {"b": [1, 2]}})

    def test_braces_inside_strings(self):
        text = 'x {"title": "use {curly} and \\"quotes\\"", "n": 2} trailing {"other": 1}'
        self.assertEqual(first_json_object(text), {"title": 'use {curly} and "quotes"', "n": 2})

    def test_only_first_span(self):
        self.assertEqual(first_json_object('{"a": 1} and {"b": 2}'), {"a": 1})

    def test_failures(self):
        for text in ("no json here", '{"a": 1', "{not: json}", "[1, 2]", None, 42):
            with self.subTest(text=text):
                self.assertIsNone(first_json_object(text))


class TestGeminiClient(unittest.TestCase):
    def test_disabled_without_key(self):
        with mock.patch("services.gemini_client.genai") as genai:
            client = GeminiClient(None)
            self.assertFalse(client.enabled)
            self.assertIsNone(client.generate("prompt"))
            genai.configure.assert_not_called()

    def test_retries_then_parses(self):
        with mock.patch("services.gemini_client.genai") as genai, \
                mock.patch("services.gemini_client._sleep_backoff") as sleep:
            model = genai.GenerativeModel.return_value
            model.generate_content.side_effect = [
                RuntimeError("503"),
                SimpleNamespace(text='Result:\n{"factors": ["AI"]}'),
            ]
            client = GeminiClient("key", model="gemini-test", max_retries=2)
            self.assertTrue(client.enabled)
            self.assertEqual(client.generate_json("prompt"), {"factors": ["AI"]})
            genai.configure.assert_called_once_with(api_key="key")
            genai.GenerativeModel.assert_called_once_with("gemini-test")
            self.assertEqual(sleep.call_count, 1)

    def test_gives_up_after_retries(self):
        with mock.patch("services.gemini_client.genai") as genai, \
                mock.patch("services.gemini_client._sleep_backoff"):
            genai.GenerativeModel.return_value.generate_content.side_effect = RuntimeError("down")
            client = GeminiClient("key", max_retries=3)
            self.assertIsNone(client.generate_json("prompt"))
            self.assertEqual(genai.GenerativeModel.return_value.generate_content.call_count, 3)


class TestKPIExtractor(unittest.TestCase):
    def test_fallback_labels(self):
        kpis = KPIExtractor(None).extract(DECK_TEXT)
        self.assertEqual(kpis["companyName"], "Lumen Health Inc")
        self.assertEqual(kpis["sector"], "Digital Health")
        self.assertEqual(kpis["fundingStage"], "Series A")
        self.assertEqual(kpis["revenue"], "$12 million ARR")
        self.assertEqual(kpis["teamSize"], "34 employees")
        self.assertEqual(kpis["marketSize"], "$40 billion")
        self.assertEqual(kpis["competition"], "Teladoc, Amwell, MDLive")
        self.assertEqual(kpis["useOfFunds"], "Hiring and clinical trials")

    def test_fallback_company_from_title_line(self):
        kpis = KPIExtractor(None).extract("Orbit Labs\nWe build satellites.\n")
        self.assertEqual(kpis["companyName"], "Orbit Labs")

    def test_uses_generative_service(self):
        gem = FakeGemini({"companyName": "Lumen", "revenue": None})
        kpis = KPIExtractor(gem).extract(DECK_TEXT)
        self.assertEqual(kpis, {"companyName": "Lumen", "revenue": None})
        self.assertIn("Revenue: $12 million ARR", gem.prompts[0])

    def test_falls_back_when_service_returns_nothing(self):
        kpis = KPIExtractor(FakeGemini(None)).extract(DECK_TEXT)
        self.assertEqual(kpis["sector"], "Digital Health")

    def test_disabled_service_is_not_called(self):
        gem = FakeGemini({"companyName": "x"}, enabled=False)
        KPIExtractor(gem).extract(DECK_TEXT)
        self.assertEqual(gem.prompts, [])

    def test_prompt_lists_fields(self):
        prompt = build_kpi_prompt("deck")
        for field in ("companyName", "fundingRequest", "geographicMarket"):
            self.assertIn(f'"{field}"', prompt)


class TestQualitativeAnalysisService(unittest.TestCase):
    def test_prompt_contains_context(self):
        prompt = build_analysis_prompt({"sector": "Fintech"}, {"marketSentiment": "Positive", "articles": []}, "deck body")
        self.assertIn('"sector": "Fintech"', prompt)
        self.assertIn('"marketSentiment": "Positive"', prompt)
        self.assertIn("deck body", prompt)

    def test_disabled(self):
        self.assertIsNone(QualitativeAnalysisService(None).analyze({}, None, "text"))
        self.assertIsNone(QualitativeAnalysisService(FakeGemini({"a": 1}, enabled=False)).analyze({}, None, "t"))

    def test_passes_through_payload(self):
        svc = QualitativeAnalysisService(FakeGemini({"factors": ["x"]}))
        self.assertEqual(svc.analyze({}, None, "text"), {"factors": ["x"]})


ARTICLES = [
    {"title": "Fintech startup raises funding", "description": "Strong growth in payments"},
    {"title": "Markets fall", "description": "Recession fears and crash talk"},
    {"title": "AI boom", "description": "artificial intelligence investment surge"},
]


class TestMarketSignals(unittest.TestCase):
    def test_relevance(self):
        a = {"title": "Fintech startup raises funding", "description": "Acme leads growth round"}
        # sector 30 + keyword 20 + funding, startup, growth 30
        self.assertEqual(relevance_score(a, "fintech", ["Acme"]), 80)
        self.assertEqual(relevance_score({"title": None, "description": None}), 0)

    def test_relevance_is_capped(self):
        a = {"title": "fintech funding investment startup venture ipo acquisition growth", "description": "a b c"}
        self.assertEqual(relevance_score(a, "fintech", ["a", "b", "c"]), 100)

    def test_sentiment(self):
        self.assertEqual(market_sentiment([{"title": "growth surge", "description": "profit"}]), "Positive")
        self.assertEqual(market_sentiment([{"title": "decline", "description": "crisis loss"}]), "Negative")
        self.assertEqual(market_sentiment([{"title": "growth", "description": "decline"}]), "Neutral")
        self.assertEqual(market_sentiment([]), "Neutral")

    def test_trends_ranked(self):
        # plain substring match: "ai" also hits "raises" and "again"
        trends = market_trends(ARTICLES + [{"title": "fintech again", "description": ""}])
        self.assertEqual(trends, ["ai", "fintech", "artificial intelligence"])


class FakeNewsClient:
    def __init__(self, articles=None, error=None):
        self.articles = articles or []
        self.error = error
        self.queries = []

    def search(self, query, lookback_days=7, page_size=10):
        self.queries.append(query)
        res = {"articles": self.articles, "totalResults": len(self.articles)}
        if self.error:
            res["error"] = self.error
        return res

    def top_headlines(self, country="us", category="business", page_size=5):
        return [{"title": "Economy shows growth", "description": "gain"}]


class TestNewsAdapter(unittest.TestCase):
    def test_build_query(self):
        self.assertEqual(build_query("Fintech", ["Acme", "payments"]), "Fintech AND Acme OR payments")
        self.assertEqual(build_query(None, ["Acme"]), "Acme")
        self.assertEqual(build_query(None, None), DEFAULT_QUERY)

    def test_articles_are_reshaped(self):
        client = FakeNewsClient([{"title": "T", "description": None, "url": "u", "publishedAt": "2025-01-01",
                                  "source": {"name": "Reuters"}}, "junk"])
        out = NewsAdapter(client).get_market_news("Fintech")
        self.assertEqual(out["articles"], [{"title": "T", "description": "", "url": "u",
                                            "publishedAt": "2025-01-01", "source": "Reuters"}])
        self.assertEqual(out["query"], "Fintech")


class TestMarketDataService(unittest.TestCase):
    def test_market_data(self):
        svc = MarketDataService(NewsAdapter(FakeNewsClient([dict(a) for a in ARTICLES])))
        data = svc.get_market_data("fintech")
        self.assertEqual(data["sector"], "fintech")
        self.assertEqual(data["articles"][0]["title"], "Fintech startup raises funding")
        scores = [a["relevanceScore"] for a in data["articles"]]
        self.assertEqual(scores, sorted(scores, reverse=True))
        self.assertIn(data["marketSentiment"], ("Positive", "Neutral", "Negative"))
        self.assertAlmostEqual(data["averageRelevance"], sum(scores) / len(scores))

    def test_degrades_on_error(self):
        svc = MarketDataService(NewsAdapter(FakeNewsClient(error="Missing News API key")))
        data = svc.get_market_data("fintech")
        self.assertEqual(data["articles"], [])
        self.assertEqual(data["averageRelevance"], 0.0)

    def test_adapter_exception_is_contained(self):
        adapter = mock.Mock()
        adapter.get_market_news.side_effect = RuntimeError("network")
        data = MarketDataService(adapter).get_market_data(None)
        self.assertEqual(data["sector"], "General")
        self.assertEqual(data["marketSentiment"], "Neutral")


class TestDocumentIngestor(unittest.TestCase):
    def test_invalid_pdf(self):
        out = DocumentIngestor().extract_pdf(b"definitely not a pdf")
        self.assertFalse(out["success"])
        self.assertIn("error", out)

    def test_pdf_text(self):
        page = mock.Mock()
        page.extract_text.return_value = "Company:   Acme\n\n\n\nRevenue: $1M"
        pdf = mock.MagicMock()
        pdf.pages = [page, page]
        pdf.__enter__.return_value = pdf
        with mock.patch("services.document_ingest.pdfplumber.open", return_value=pdf):
            out = DocumentIngestor().extract_pdf(b"%PDF-1.4")
        self.assertTrue(out["success"])
        self.assertEqual(out["metadata"]["pages"], 2)
        self.assertTrue(out["text"].startswith("Company: Acme\n\nRevenue: $1M"))

    def test_empty_pdf_text(self):
        page = mock.Mock()
        page.extract_text.return_value = ""
        pdf = mock.MagicMock()
        pdf.pages = [page]
        pdf.__enter__.return_value = pdf
        with mock.patch("services.document_ingest.pdfplumber.open", return_value=pdf):
            out = DocumentIngestor().extract_pdf(b"%PDF-1.4")
        self.assertFalse(out["success"])

    def test_url_without_client(self):
        self.assertFalse(DocumentIngestor().extract_url("https://example.com")["success"])

    def test_url(self):
        fc = mock.Mock()
        fc.scrape.return_value = {"success": True, "markdown": "# Acme\n\nRevenue: $1M", "metadata": {"title": "Acme"}}
        out = DocumentIngestor(fc).extract_url("https://example.com")
        self.assertEqual(out, {"success": True, "text": "# Acme\n\nRevenue: $1M", "metadata": {"title": "Acme"}})

        fc.scrape.return_value = {"success": False, "error": "402"}
        self.assertFalse(DocumentIngestor(fc).extract_url("https://example.com")["success"])


if __name__ == "__main__":
    unittest.main()
