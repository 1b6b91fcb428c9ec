from typing import Dict, Any, List, Optional
from adapters.news_client import NewsAPIClient

DEFAULT_QUERY = "startup OR investment OR funding OR venture capital"


def build_query(sector: Optional[str], keywords: Optional[List[str]] = None) -> str:
    q = sector or ""
    kws = [k for k in (keywords or []) if k]
    if kws:
        q = f"{q} AND " if q else ""
        q += " OR ".join(kws)
    return q or DEFAULT_QUERY


class NewsAdapter:
    def __init__(self, client: NewsAPIClient):
        self.client = client

    def get_market_news(self, sector: Optional[str], keywords: Optional[List[str]] = None,
                        lookback_days: int = 7, max_items: int = 10) -> Dict[str, Any]:
        q = build_query(sector, keywords)
        res = self.client.search(q, lookback_days=lookback_days, page_size=max_items)
        articles = []
        for a in res.get("articles", []):
            if not isinstance(a, dict):
                continue
            source = a.get("source")
            articles.append({
                "title": a.get("title") or "",
                "description": a.get("description") or "",
                "url": a.get("url") or "",
                "publishedAt": a.get("publishedAt") or "",
                "source": (source.get("name") if isinstance(source, dict) else source) or "",
            })
        out: Dict[str, Any] = {"articles": articles, "query": q, "totalResults": res.get("totalResults", 0)}
        if res.get("error"):
            out["error"] = res["error"]
        return out

    def get_headlines(self, country: str = "us") -> List[Dict[str, Any]]:
        return [a for a in self.client.top_headlines(country=country) if isinstance(a, dict)]
