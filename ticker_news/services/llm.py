"""
LLM Service Module.

This module provides the LLMService class, which interfaces with the Google
Gemini API to classify the sentiment of stock news and to write short
investor-facing summaries. Every call degrades to a local heuristic or a
template when the model is unavailable, so callers never see an error.
"""

import logging
from typing import Optional

from google import genai
from google.genai import errors as genai_errors

from ticker_news.models import SENTIMENTS, Sentiment

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"

BULLISH_WORDS = (
    "surge", "gain", "rise", "jump", "beat", "exceed", "growth",
    "profit", "high", "strong", "positive", "upgrade", "buy",
)
BEARISH_WORDS = (
    "fall", "drop", "decline", "loss", "weak", "concern", "worry",
    "downgrade", "sell", "miss", "low", "negative",
)


def keyword_sentiment(text: str) -> Sentiment:
    """Scores text against fixed bullish/bearish keyword lists."""
    lower_text = (text or "").lower()
    bullish_score = sum(1 for word in BULLISH_WORDS if word in lower_text)
    bearish_score = sum(1 for word in BEARISH_WORDS if word in lower_text)

    if bullish_score > bearish_score:
        return "bullish"
    if bearish_score > bullish_score:
        return "bearish"
    return "neutral"


def coerce_sentiment(value: Optional[str]) -> Optional[Sentiment]:
    """Maps a model reply onto a sentiment label, or None if it is not one."""
    if not value:
        return None
    label = value.strip().rstrip(".").strip().lower()
    if label in SENTIMENTS:
        return label  # type: ignore[return-value]
    return None


class LLMService:
    """
    Service for interacting with the Google Gemini API.

    Without an API key the client is never created and every call goes
    straight to its fallback.
    """

    _SENTIMENT_PROMPT = (
        "You are a financial sentiment analyzer. Analyze the sentiment of stock "
        "news and respond with ONLY one word: bullish, bearish, or neutral."
    )

    _SUMMARY_PROMPT = (
        "You are a financial news writer. Write a direct, informative 2-3 sentence "
        "summary of what the article covers based on the headline. Write as if you "
        "are describing the article's content directly to an investor. Do not use "
        'phrases like "this article discusses" or "the news suggests" - just state '
        "the information directly."
    )

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        timeout_ms: int = 30000,
    ):
        self.model = model
        self.client: Optional[genai.Client] = None
        if not api_key:
            logger.warning("GEMINI_KEY not set. Using local sentiment and summaries.")
            return

        try:
            self.client = genai.Client(
                api_key=api_key, http_options={"timeout": timeout_ms}
            )
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Failed to initialize Gemini client: %s", e)
            self.client = None

    def _generate(self, system_prompt: str, prompt: str, temperature: float) -> str:
        """Runs a single generation call and returns the stripped reply text."""
        if self.client is None:
            raise RuntimeError("Gemini client not initialized.")
        response = self.client.models.generate_content(
            model=self.model,
            contents=prompt,
            config={"system_instruction": system_prompt, "temperature": temperature},
        )
        return (response.text if response.text else "").strip()

    def analyze_sentiment(self, headline: str, summary: str) -> Sentiment:
        """Classifies news as bullish, bearish or neutral."""
        text = f"{headline} {summary}"
        if not self.client:
            return keyword_sentiment(text)

        prompt = (
            "Analyze the sentiment of this stock news:\n\n"
            f"Headline: {headline}\n\nSummary: {summary}\n\n"
            "Respond with only: bullish, bearish, or neutral"
        )
        try:
            reply = self._generate(self._SENTIMENT_PROMPT, prompt, temperature=0.3)
        except genai_errors.APIError as e:
            logger.error("Gemini API error during sentiment analysis: %s", e)
            return keyword_sentiment(text)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Sentiment analysis error: %s", e)
            return keyword_sentiment(text)

        sentiment = coerce_sentiment(reply)
        if sentiment is None:
            logger.warning("Unexpected sentiment label %r, using keywords.", reply)
            return keyword_sentiment(text)
        return sentiment

    def generate_summary(self, headline: str, ticker: str) -> str:
        """Writes a short investor-facing summary for a headline."""
        if not self.client:
            return f"Analysis of {ticker} stock news: {headline}"

        prompt = f'Write a 2-3 sentence summary for this {ticker} news headline: "{headline}"'
        try:
            summary = self._generate(self._SUMMARY_PROMPT, prompt, temperature=0.7)
        except genai_errors.APIError as e:
            logger.error("Gemini API error during summary generation: %s", e)
            return f"{ticker} stock update: {headline}"
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Summary generation error: %s", e)
            return f"Latest news about {ticker}: {headline}"

        if not summary:
            return f"Latest news about {ticker}: {headline}"
        return summary
