"""
Gemini provider (Google AI generateContent with IMAGE response modality).
Uses generativelanguage.googleapis.com with api_key.
Replies follow the candidates schema: candidates[0].content.parts[*].inlineData.
"""
import json
import logging
from typing import Any

from app.services.image_generation.base import (
    GenerationRequest,
    ImageGenerationProvider,
    MissingCredentialError,
    UpstreamReply,
    sanitize_for_log,
)
from app.services.image_generation.providers.transport import post_json

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "https://generativelanguage.googleapis.com"
DEFAULT_MODEL = "gemini-2.5-flash-image"
DEFAULT_TEMPERATURE = 0.7


def _parse_safety_settings(value: Any) -> list[dict[str, Any]]:
    """Parse safety_settings from config (list of {category, threshold} or JSON string)."""
    if not value:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
            return parsed if isinstance(parsed, list) else []
        except json.JSONDecodeError:
            logger.warning("gemini_safety_settings is not valid JSON, ignored")
            return []
    return []


class GeminiProvider(ImageGenerationProvider):
    """Gemini image generation via Google AI generateContent API."""

    name = "gemini"

    def __init__(self, config: dict) -> None:
        super().__init__(config)
        self.api_key = (config.get("api_key") or "").strip()
        endpoint = (config.get("api_endpoint") or DEFAULT_ENDPOINT).rstrip("/")
        self.base_url = f"{endpoint}/v1beta/models"
        self.model_name = self.model_name or DEFAULT_MODEL
        temperature = config.get("temperature")
        temperature = DEFAULT_TEMPERATURE if temperature is None else float(temperature)
        self.temperature = max(0.0, min(2.0, temperature))
        self.timeout = config.get("timeout")
        self.safety_settings = _parse_safety_settings(config.get("safety_settings"))

    def is_available(self) -> bool:
        return bool(self.api_key)

    def build_payload(self, request: GenerationRequest) -> dict[str, Any]:
        parts: list[dict[str, Any]] = [{"text": request.instruction_text}]
        if request.has_attachment:
            parts.append({
                "inlineData": {"mimeType": request.source_mime_type, "data": request.source_image},
            })
        payload: dict[str, Any] = {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {
                "responseModalities": ["IMAGE", "TEXT"],
                "temperature": self.temperature,
            },
        }
        if self.safety_settings:
            payload["safetySettings"] = self.safety_settings
        return payload

    def send(self, request: GenerationRequest) -> UpstreamReply:
        if not self.is_available():
            raise MissingCredentialError(
                "Gemini APIキーが設定されていません",
                details="GEMINI_API_KEY is empty",
                solution=".envファイルにGEMINI_API_KEYを設定してサーバーを再起動してください",
            )
        payload = self.build_payload(request)
        logger.debug("gemini request: %s", sanitize_for_log(payload))
        return post_json(
            f"{self.base_url}/{self.model_name}:generateContent",
            payload,
            params={"key": self.api_key},
            timeout=self.timeout,
            provider=self.name,
        )
