from __future__ import annotations
import json
import logging
import time
from typing import Any, Dict, Optional

import google.generativeai as genai

logger = logging.getLogger(__name__)


def first_json_object(text: str) -> Optional[Dict[str, Any]]:
    """
    Parse the first balanced {...} span in `text` (model output often wraps
    JSON in prose or ``` fences). Braces inside JSON strings are ignored.
    Returns None if there is no span or it does not parse to an object.
    """
    if not isinstance(text, str):
        return None
    start = text.find("{")
    if start < 0:
        return None
    depth = 0
    in_str = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_str:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_str = False
            continue
        if ch == '"':
            in_str = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                try:
                    data = json.loads(text[start : i + 1])
                except ValueError:
                    return None
                return data if isinstance(data, dict) else None
    return None


def _sleep_backoff(attempt: int) -> None:
    time.sleep(min(1.5 * (attempt + 1), 6.0))


class GeminiClient:
    """
    Thin wrapper over google-generativeai.

    generate() returns the model's text or None; callers treat None as
    "no narrative available" and fall back to defaults.
    """

    def __init__(self, api_key: Optional[str], model: str = "gemini-2.5-flash", max_retries: int = 2):
        self.model_name = model
        self.max_retries = max(1, int(max_retries))
        self.model = None
        self.enabled = False
        if api_key:
            try:
                genai.configure(api_key=api_key)
                self.model = genai.GenerativeModel(model)
                self.enabled = True
            except Exception as e:
                logger.warning(f"[gemini] Client init failed: {e}")
        else:
            logger.info("[gemini] API key missing; generative analysis disabled.")

    def generate(self, prompt: str) -> Optional[str]:
        if not self.enabled or self.model is None:
            return None
        for attempt in range(self.max_retries):
            try:
                r = self.model.generate_content(prompt)
                text = getattr(r, "text", "") or ""
                if text.strip():
                    return text
                logger.warning(f"[gemini] Empty response (attempt {attempt + 1})")
            except Exception as e:
                logger.warning(f"[gemini] generate_content failed (attempt {attempt + 1}): {e}")
            if attempt + 1 < self.max_retries:
                _sleep_backoff(attempt)
        return None

    def generate_json(self, prompt: str) -> Optional[Dict[str, Any]]:
        text = self.generate(prompt)
        if text is None:
            return None
        data = first_json_object(text)
        if data is None:
            logger.warning("[gemini] No parseable JSON object in response")
        return data
