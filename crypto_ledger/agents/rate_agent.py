"""
AI Rate Lookup Agent

DESIGN DECISION: The exchange rate comes from Gemini with Google Search
grounding. The model searches for the current market price and the
grounding metadata gives us the pages it used, which we show to the
user as sources.

CRITICAL BOUNDARIES:
- The LLM ONLY reports a number it found; we parse and validate it
- Anything that is not a positive number is treated as "no rate"
- The agent never touches the ledger; the RateUpdater decides what
  to do with the result

The LLM is a LOOKUP TOOL, not an ORACLE. An answer we cannot parse is
discarded, never guessed at.
"""

import json
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import google.generativeai as genai

from crypto_ledger.config import AppSettings, GeminiSettings, get_settings
from crypto_ledger.ledger.rate_updater import RateLookupInterface
from crypto_ledger.models.transaction import RateLookupResult, RateSource


class RateLookupAgent(RateLookupInterface):
    """
    Looks up the fiat value of one crypto unit using Gemini.

    RESPONSIBILITIES:
    - Ask for the current rate in a strict JSON format
    - Parse the rate out of the reply
    - Collect the cited web sources

    BOUNDARIES:
    - NEVER retries (one best-effort call per refresh)
    - NEVER invents a rate when the reply is unusable
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        app_settings: Optional[AppSettings] = None,
        model: Any = None,
    ):
        self._settings = settings or get_settings().gemini
        self._app_settings = app_settings or get_settings().app
        self._model = model if model is not None else self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        tools = "google_search_retrieval" if self._settings.use_search_grounding else None
        return genai.GenerativeModel(
            model_name=self._settings.model_name,
            tools=tools,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )

    def build_prompt(self) -> str:
        crypto = self._app_settings.crypto_symbol
        fiat = self._app_settings.fiat_currency
        return f"""Find the current market price of 1 {crypto} in {fiat}.

Search for the most recent quoted price from an exchange or price tracker.

Respond with ONLY a JSON object in this exact format:
{{"rate": 123.45}}

where rate is the value of 1 {crypto} expressed in {fiat}, as a plain number
with no currency symbol or thousands separators.

If you cannot find a current price, respond with:
{{"rate": null}}"""

    async def lookup(self) -> RateLookupResult:
        """
        Ask Gemini for the current rate.

        API errors propagate to the caller. An unusable reply gives a
        result with no rate (sources are still reported).
        """
        response = await self._model.generate_content_async(self.build_prompt())

        try:
            text = response.text
        except ValueError:
            # Blocked or empty candidates: no text parts to read
            text = ""

        return RateLookupResult(
            rate=parse_rate(text),
            sources=extract_sources(response),
        )


def parse_rate(text: str) -> Optional[Decimal]:
    """
    Pull a positive rate out of a model reply.

    Decodes the first JSON object in the text, so surrounding prose or
    code fences are tolerated.
    """
    if not text:
        return None

    start = text.find("{")
    if start < 0:
        return None

    try:
        data, _ = json.JSONDecoder().raw_decode(text, start)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None

    raw = data.get("rate")
    if raw is None or isinstance(raw, bool):
        return None

    try:
        rate = Decimal(str(raw).replace(",", "").strip())
    except InvalidOperation:
        return None

    if not rate.is_finite() or rate <= 0:
        return None
    return rate


def extract_sources(response: Any) -> list[RateSource]:
    """
    Collect web citations from the grounding metadata of a response.

    Sources are returned in citation order with duplicate links removed.
    """
    sources: list[RateSource] = []
    seen: set[str] = set()

    for candidate in getattr(response, "candidates", None) or []:
        metadata = getattr(candidate, "grounding_metadata", None)
        for chunk in getattr(metadata, "grounding_chunks", None) or []:
            web = getattr(chunk, "web", None)
            uri = getattr(web, "uri", None)
            if not uri or uri in seen:
                continue
            seen.add(uri)
            title = getattr(web, "title", None) or uri
            sources.append(RateSource(title=title, uri=uri))

    return sources
