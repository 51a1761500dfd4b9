# letteros/ai/gemini.py
import asyncio
import logging
from typing import Optional
from google import genai
from google.genai import types
from letteros.config import settings
from letteros.ai.errors import AIServiceError

logger = logging.getLogger(__name__)

class GeminiClient:
    """Thin async wrapper around the Gemini text generation API"""

    def __init__(
        self,
        api_key: str,
        model: str,
        temperature: float,
        max_output_tokens: int,
        timeout: float
    ):
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.timeout = timeout
        self._client: Optional[genai.Client] = None

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self.api_key:
                raise AIServiceError("GEMINI_API_KEY is not set")
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def generate(
        self,
        prompt: str,
        temperature: Optional[float] = None,
        max_output_tokens: Optional[int] = None
    ) -> str:
        """Send a single prompt and return the raw response text"""
        client = self._get_client()
        config = types.GenerateContentConfig(
            temperature=self.temperature if temperature is None else temperature,
            max_output_tokens=max_output_tokens or self.max_output_tokens,
        )

        logger.info(f"Gemini request: model={self.model} prompt_chars={len(prompt)}")
        try:
            response = await asyncio.wait_for(
                client.aio.models.generate_content(
                    model=self.model,
                    contents=prompt,
                    config=config,
                ),
                timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.error(f"Gemini request timed out after {self.timeout}s")
            raise AIServiceError("AI request timed out")
        except Exception as e:
            logger.error(f"Gemini request failed: {e}")
            raise AIServiceError(f"AI request failed: {e}")

        text = response.text or ""
        logger.info(f"Gemini response: {len(text)} chars")
        return text

# Global client instance
gemini_client = GeminiClient(
    api_key=settings.gemini_api_key,
    model=settings.gemini_model,
    temperature=settings.ai_temperature,
    max_output_tokens=settings.ai_max_output_tokens,
    timeout=settings.ai_timeout_seconds
)

def get_llm() -> GeminiClient:
    """Dependency hook so routes can be tested with a fake model"""
    return gemini_client
