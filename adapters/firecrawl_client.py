import requests
from typing import Dict, Any, Optional


class FirecrawlClient:
    def __init__(self, api_key: Optional[str] = None, timeout: int = 60):
        self.api_key = api_key or ""
        self.timeout = timeout
        self.endpoint = "https://api.firecrawl.dev/v1/scrape"

    def scrape(self, url: str) -> Dict[str, Any]:
        if not self.api_key:
            return {"success": False, "error": "Missing Firecrawl API key"}
        payload = {"url": url, "formats": ["markdown"], "onlyMainContent": True}
        headers = {"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"}
        try:
            resp = requests.post(self.endpoint, json=payload, headers=headers, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
            if not data.get("success"):
                return {"success": False, "error": data.get("error") or "Scrape failed"}
            body = data.get("data") or {}
            return {
                "success": True,
                "markdown": body.get("markdown") or body.get("html") or "",
                "metadata": body.get("metadata") or {},
            }
        except Exception as e:
            return {"success": False, "error": str(e)}
