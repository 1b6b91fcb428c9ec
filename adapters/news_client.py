import requests
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, List, Optional


class NewsAPIClient:
    def __init__(self, api_key: Optional[str] = None, timeout: int = 25):
        self.api_key = api_key or ""
        self.timeout = timeout
        self.everything_endpoint = "https://newsapi.org/v2/everything"
        self.headlines_endpoint = "https://newsapi.org/v2/top-headlines"

    def _get(self, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        if not self.api_key:
            return {"articles": [], "error": "Missing News API key"}
        try:
            resp = requests.get(url, params=params, headers={"X-Api-Key": self.api_key}, timeout=self.timeout)
            data = resp.json()
            if not resp.ok or data.get("status") == "error":
                return {"articles": [], "error": data.get("message") or f"HTTP {resp.status_code}"}
            return {"articles": data.get("articles") or [], "totalResults": data.get("totalResults", 0)}
        except Exception as e:
            return {"articles": [], "error": str(e)}

    def search(self, query: str, lookback_days: int = 7, page_size: int = 10) -> Dict[str, Any]:
        since = datetime.now(timezone.utc) - timedelta(days=lookback_days)
        params = {
            "q": query,
            "language": "en",
            "sortBy": "publishedAt",
            "pageSize": page_size,
            "from": since.strftime("%Y-%m-%dT%H:%M:%S"),
        }
        res = self._get(self.everything_endpoint, params)
        res["query"] = query
        return res

    def top_headlines(self, country: str = "us", category: str = "business", page_size: int = 5) -> List[Dict[str, Any]]:
        res = self._get(self.headlines_endpoint, {"country": country, "category": category, "pageSize": page_size})
        return res.get("articles", [])
