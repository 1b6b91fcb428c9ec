from __future__ import annotations
import io
import logging
import re
from typing import Any, Dict, List, Optional

import pdfplumber

from adapters.firecrawl_client import FirecrawlClient

logger = logging.getLogger(__name__)


def _clean(text: str) -> str:
    text = re.sub(r"[ \t]+", " ", text)
    return re.sub(r"\n{2,}", "\n\n", text).strip()


class DocumentIngestor:
    """
    Document -> raw text. Every method returns
    {"success": True, "text": str, "metadata": {...}} or
    {"success": False, "error": str}; nothing is raised to the caller.
    """

    def __init__(self, firecrawl: Optional[FirecrawlClient] = None, max_pages: int = 40):
        self.firecrawl = firecrawl
        self.max_pages = max_pages

    def extract_pdf(self, file_bytes: bytes) -> Dict[str, Any]:
        chunks: List[str] = []
        try:
            with pdfplumber.open(io.BytesIO(file_bytes)) as pdf:
                pages = len(pdf.pages)
                for i, page in enumerate(pdf.pages):
                    if i >= self.max_pages:
                        break
                    try:
                        txt = page.extract_text() or ""
                    except Exception as e:
                        logger.warning(f"Page {i + 1} text extraction failed: {e}")
                        txt = ""
                    if txt:
                        chunks.append(txt)
        except Exception as e:
            logger.error(f"PDF processing error: {e}")
            return {"success": False, "error": f"Failed to process PDF file: {e}"}

        text = _clean("\n".join(chunks))
        if not text:
            return {
                "success": False,
                "error": "No text content found in PDF. The PDF might be image-based or encrypted.",
            }
        return {
            "success": True,
            "text": text,
            "metadata": {
                "pages": pages,
                "fileSize": len(file_bytes),
                "extractionMethod": "pdfplumber",
            },
        }

    def extract_url(self, url: str) -> Dict[str, Any]:
        if self.firecrawl is None:
            return {"success": False, "error": "URL extraction is not configured"}
        res = self.firecrawl.scrape(url)
        if not res.get("success"):
            logger.warning(f"URL extraction failed for {url}: {res.get('error')}")
            return {"success": False, "error": f"Failed to extract from URL: {res.get('error')}"}
        text = _clean(res.get("markdown") or "")
        if not text:
            return {"success": False, "error": "No text content found at URL"}
        return {"success": True, "text": text, "metadata": res.get("metadata") or {}}
