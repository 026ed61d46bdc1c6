"""
Generative language (Gemini) API client used for every analysis flavour
"""
import json
import re
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel

from app.core.config import get_settings
from app.core.errors import ConfigurationError, LLMError
from app.core.logging_config import LoggingConfig

logger = LoggingConfig.get_logger(__name__)

_FENCE_RE = re.compile(r"^\s*```[a-zA-Z]*\s*\n?(.*?)\n?\s*```\s*$", re.DOTALL)


class LLMResponse(BaseModel):
    """Generated text returned by the model"""
    model: str
    text: str
    finish_reason: Optional[str] = None


def strip_code_fence(text: str) -> str:
    """Remove a surrounding ```json / ```html fence if the model added one"""
    match = _FENCE_RE.match(text)
    return match.group(1).strip() if match else text.strip()


class GeminiClient:
    """
    Client for the generateContent endpoint.
    One request per call, no retries and no caching.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._settings = None
        self._transport = transport

    @property
    def settings(self):
        """Lazy load settings"""
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    @property
    def model(self) -> str:
        return self.settings.gemini_model

    def _endpoint(self) -> str:
        base_url = self.settings.gemini_api_url.rstrip("/")
        return f"{base_url}/models/{self.model}:generateContent"

    def build_payload(
        self,
        prompt: str,
        response_schema: Optional[Dict[str, Any]] = None,
        response_mime_type: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Build the generateContent request body"""
        generation_config: Dict[str, Any] = {}
        if response_mime_type:
            generation_config["responseMimeType"] = response_mime_type
        if response_schema:
            generation_config["responseSchema"] = response_schema
        if temperature is None:
            temperature = self.settings.llm_temperature
        if temperature is not None:
            generation_config["temperature"] = temperature

        payload: Dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        }
        if generation_config:
            payload["generationConfig"] = generation_config
        return payload

    async def generate(
        self,
        prompt: str,
        response_schema: Optional[Dict[str, Any]] = None,
        response_mime_type: Optional[str] = None,
        temperature: Optional[float] = None,
    ) -> LLMResponse:
        """
        Send a prompt and return the first candidate's text

        Args:
            prompt: Fully assembled prompt
            response_schema: Optional structured output schema
            response_mime_type: e.g. "application/json"
            temperature: Overrides the configured temperature

        Returns:
            LLMResponse with the raw generated text
        """
        api_key = self.settings.gemini_api_key
        if not api_key:
            raise ConfigurationError("GEMINI_API_KEY is not configured.")

        payload = self.build_payload(prompt, response_schema, response_mime_type, temperature)

        logger.info(
            "Sending prompt to LLM",
            extra={"model": self.model, "prompt_chars": len(prompt)}
        )

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.llm_timeout_seconds,
                transport=self._transport,
            ) as client:
                response = await client.post(
                    self._endpoint(),
                    params={"key": api_key},
                    json=payload,
                )
        except httpx.TimeoutException:
            raise LLMError(f"AI API call timed out after {self.settings.llm_timeout_seconds}s")
        except httpx.HTTPError as e:
            raise LLMError(f"AI API call failed: {e}")

        if response.status_code >= 400:
            raise LLMError(f"AI API call failed with status {response.status_code}: {response.text}")

        try:
            result = response.json()
        except ValueError:
            raise LLMError("AI API returned a non-JSON body.")

        candidates = result.get("candidates") if isinstance(result, dict) else None
        if not candidates:
            logger.error("Invalid response from LLM", extra={"llm_result": result})
            raise LLMError("Invalid or empty response structure from the AI model.")

        candidate = candidates[0]
        try:
            text = candidate["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            logger.error("Invalid response from LLM", extra={"llm_result": result})
            raise LLMError("Invalid or empty response structure from the AI model.")

        return LLMResponse(
            model=self.model,
            text=text,
            finish_reason=candidate.get("finishReason"),
        )

    async def generate_json(
        self,
        prompt: str,
        response_schema: Optional[Dict[str, Any]] = None,
        temperature: Optional[float] = None,
    ) -> Any:
        """Request structured JSON output and parse it"""
        response = await self.generate(
            prompt,
            response_schema=response_schema,
            response_mime_type="application/json",
            temperature=temperature,
        )
        try:
            return json.loads(strip_code_fence(response.text))
        except json.JSONDecodeError as e:
            raise LLMError(f"AI model returned invalid JSON: {e.msg}")

    async def generate_html(self, prompt: str, temperature: Optional[float] = None) -> str:
        """Request an HTML fragment and return it without code fences"""
        response = await self.generate(prompt, temperature=temperature)
        return strip_code_fence(response.text)


# Global client instance
_gemini_client: Optional[GeminiClient] = None


def get_gemini_client() -> GeminiClient:
    """Get global Gemini client instance"""
    global _gemini_client
    if _gemini_client is None:
        _gemini_client = GeminiClient()
    return _gemini_client
