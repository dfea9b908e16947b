"""
Aether Intel - Analysis Service Client

Thin wrapper over Google Gemini (google-genai SDK). Treated as an opaque
text-in / text-out service: prompt construction and response parsing live in
analysis_adapter.py.

The SDK call is synchronous, so it runs in a worker thread and is bounded by
ANALYSIS_TIMEOUT_SECONDS. Timeouts and transport errors surface as
AnalysisFailed; a missing key surfaces as AnalysisNotConfigured.
"""

import os
import time
import asyncio
import logging
from typing import Optional

from errors import AnalysisFailed, AnalysisNotConfigured
from metrics import track_analysis_call

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.0-flash"


class AnalysisClient:
    """
    Usage:
        client = get_analysis_client()
        text = await client.generate("Analyze ...")
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        temperature: float = 0.4,
        max_output_tokens: int = 8192,
    ):
        self.api_key = api_key if api_key is not None else os.getenv("GEMINI_API_KEY", "")
        self.model = model or os.getenv("GEMINI_MODEL", DEFAULT_MODEL)
        self.timeout = timeout or float(os.getenv("ANALYSIS_TIMEOUT_SECONDS", "60"))
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self._client = None

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _get_client(self):
        if self._client is None:
            from google import genai
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def _generate_sync(self, prompt: str) -> str:
        from google.genai import types as genai_types

        response = self._get_client().models.generate_content(
            model=self.model,
            contents=prompt,
            config=genai_types.GenerateContentConfig(
                max_output_tokens=self.max_output_tokens,
                temperature=self.temperature,
            ),
        )
        return response.text or ""

    async def generate(self, prompt: str) -> str:
        """Send *prompt*, return the raw response text."""
        if not self.is_configured:
            raise AnalysisNotConfigured("GEMINI_API_KEY is not configured")

        start = time.time()
        try:
            text = await asyncio.wait_for(
                asyncio.to_thread(self._generate_sync, prompt),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            track_analysis_call(self.model, time.time() - start, outcome="timeout")
            logger.error(f"Analysis call to {self.model} timed out after {self.timeout}s")
            raise AnalysisFailed("Analysis service timed out")
        except Exception as e:
            track_analysis_call(self.model, time.time() - start, outcome="error")
            logger.error(f"Analysis call to {self.model} failed: {e}")
            raise AnalysisFailed("Analysis service request failed") from e

        duration = time.time() - start
        track_analysis_call(self.model, duration, outcome="ok")
        logger.info(f"Analysis call to {self.model} returned {len(text)} chars in {duration:.1f}s")
        return text


# =============================================================================
# SINGLETON INSTANCE
# =============================================================================

_client: Optional[AnalysisClient] = None


def get_analysis_client() -> AnalysisClient:
    """Get or create the process-wide analysis client."""
    global _client

    if _client is None:
        _client = AnalysisClient()

    return _client
