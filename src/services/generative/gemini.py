"""Gemini client for generative recommendations."""

import logging

import google.generativeai as genai

from src.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


class GeminiClient:
    """Thin async wrapper around ``google.generativeai``.

    An empty API key means generation is disabled; callers check
    ``is_configured`` before attempting a call.
    """

    def __init__(self, api_key: str | None = None, model_name: str | None = None) -> None:
        self.api_key = settings.gemini_api_key if api_key is None else api_key
        self.model_name = model_name or settings.gemini_model
        self._model: genai.GenerativeModel | None = None

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _get_model(self) -> genai.GenerativeModel:
        """Lazy load the model so unconfigured deployments never touch the SDK."""
        if self._model is None:
            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(self.model_name)
            logger.info(f"Gemini model {self.model_name} initialized")
        return self._model

    async def generate(self, prompt: str) -> str:
        """Send ``prompt`` and return the response text ("" when blocked or empty)."""
        if not self.is_configured:
            raise RuntimeError("Gemini API key is not configured")

        response = await self._get_model().generate_content_async(prompt)

        feedback = getattr(response, "prompt_feedback", None)
        if feedback and getattr(feedback, "block_reason", None):
            logger.warning(f"Gemini blocked the prompt: {feedback.block_reason}")
            return ""

        try:
            return response.text or ""
        except ValueError:
            # Raised by the SDK when the candidate has no text part
            return ""
