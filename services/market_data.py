"""
Market Data Service
Fetches sector news and turns it into market context (relevance-ranked
articles, headline sentiment, trending themes) for the qualitative prompt.
Scores never depend on this.
"""
import logging
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional

import numpy as np

from adapters.news_adapter import NewsAdapter

logger = logging.getLogger(__name__)

BUSINESS_TERMS = ["funding", "investment", "startup", "venture", "ipo", "acquisition", "growth"]
POSITIVE_WORDS = ["growth", "increase", "rise", "surge", "success", "profit", "gain", "boom"]
NEGATIVE_WORDS = ["decline", "fall", "drop", "loss", "recession", "crisis", "crash", "downturn"]
TREND_KEYWORDS = [
    "artificial intelligence", "ai", "machine learning", "blockchain", "cryptocurrency",
    "sustainability", "green energy", "electric vehicles", "remote work", "digital transformation",
    "fintech", "healthtech", "edtech", "proptech", "climate tech", "web3", "metaverse",
]
SENTIMENT_RATIO = 1.2


def _article_text(article: Dict[str, Any]) -> str:
    return f"{article.get('title') or ''} {article.get('description') or ''}".lower()


def relevance_score(article: Dict[str, Any], sector: Optional[str] = None,
                    keywords: Optional[List[str]] = None) -> int:
    content = _article_text(article)
    score = 0
    if sector and sector.lower() in content:
        score += 30
    for kw in keywords or []:
        if kw and kw.lower() in content:
            score += 20
    score += sum(10 for term in BUSINESS_TERMS if term in content)
    return min(score, 100)


def market_sentiment(articles: List[Dict[str, Any]]) -> str:
    positive = 0
    negative = 0
    for a in articles:
        content = _article_text(a)
        positive += sum(1 for w in POSITIVE_WORDS if w in content)
        negative += sum(1 for w in NEGATIVE_WORDS if w in content)
    if positive > negative * SENTIMENT_RATIO:
        return "Positive"
    if negative > positive * SENTIMENT_RATIO:
        return "Negative"
    return "Neutral"


def market_trends(articles: List[Dict[str, Any]], top_n: int = 5) -> List[str]:
    counts: Dict[str, int] = {}
    for a in articles[:20]:
        content = _article_text(a)
        for kw in TREND_KEYWORDS:
            if kw in content:
                counts[kw] = counts.get(kw, 0) + 1
    # Ties keep TREND_KEYWORDS order
    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], TREND_KEYWORDS.index(kv[0])))
    return [kw for kw, _ in ranked[:top_n]]


class MarketDataService:
    """Orchestrates news retrieval and market context summarisation."""

    def __init__(self, news_adapter: NewsAdapter, lookback_days: int = 7, page_size: int = 10):
        self.news = news_adapter
        self.lookback_days = lookback_days
        self.page_size = page_size

    def get_market_data(self, sector: Optional[str], keywords: Optional[List[str]] = None,
                        country: str = "us") -> Dict[str, Any]:
        """
        Returns:
            Dictionary with:
            - articles: relevance-sorted articles
            - marketSentiment: Positive | Neutral | Negative
            - marketTrends: up to five trend keywords
            - averageRelevance: mean article relevance (0-100)
        """
        market = {
            "sector": sector or "General",
            "articles": [],
            "marketSentiment": "Neutral",
            "marketTrends": [],
            "averageRelevance": 0.0,
            "totalResults": 0,
            "fetchedAt": datetime.now(timezone.utc).isoformat(),
        }
        try:
            res = self.news.get_market_news(sector, keywords, lookback_days=self.lookback_days,
                                            max_items=self.page_size)
        except Exception as e:
            logger.error(f"Failed to get market news: {e}")
            return market
        if res.get("error"):
            logger.warning(f"News lookup degraded: {res['error']}")

        articles = res.get("articles", [])
        for a in articles:
            a["relevanceScore"] = relevance_score(a, sector, keywords)
        articles.sort(key=lambda a: a["relevanceScore"], reverse=True)

        try:
            headlines = self.news.get_headlines(country=country)
        except Exception as e:
            logger.error(f"Failed to get headlines: {e}")
            headlines = []

        market["articles"] = articles
        market["totalResults"] = res.get("totalResults", 0)
        market["marketSentiment"] = market_sentiment(headlines + articles[:10])
        market["marketTrends"] = market_trends(articles)
        if articles:
            market["averageRelevance"] = float(np.mean([a["relevanceScore"] for a in articles]))
        logger.info(f"Market context for {market['sector']}: {len(articles)} articles, "
                    f"sentiment={market['marketSentiment']}")
        return market
