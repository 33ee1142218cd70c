"""
OpenRouter provider (chat/completions with image output modality).
Replies follow the chat/completions schema: choices[0].message.images[*].image_url.url.
"""
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

DEFAULT_API_URL = "https://openrouter.ai/api/v1/chat/completions"
DEFAULT_MODEL = "google/gemini-2.5-flash-image-preview"
DEFAULT_TEMPERATURE = 0.7


class OpenRouterProvider(ImageGenerationProvider):
    """Gemini image model through OpenRouter's OpenAI-compatible API."""

    name = "openrouter"

    def __init__(self, config: dict) -> None:
        super().__init__(config)
        self.api_key = (config.get("api_key") or "").strip()
        self.api_url = config.get("api_url") or DEFAULT_API_URL
        self.model_name = self.model_name or DEFAULT_MODEL
        temperature = config.get("temperature")
        self.temperature = DEFAULT_TEMPERATURE if temperature is None else float(temperature)
        self.timeout = config.get("timeout")
        self.site_url = config.get("site_url") or "http://localhost:3000"
        self.app_title = config.get("app_title") or "Gemini Image Editor"

    def is_available(self) -> bool:
        return bool(self.api_key)

    def build_payload(self, request: GenerationRequest) -> dict[str, Any]:
        content: list[dict[str, Any]] = [{"type": "text", "text": request.instruction_text}]
        if request.has_attachment:
            content.append({"type": "image_url", "image_url": {"url": request.source_data_url}})
        return {
            "model": self.model_name,
            "modalities": ["image", "text"],
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": content}],
        }

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self.site_url,
            "X-Title": self.app_title,
        }

    def send(self, request: GenerationRequest) -> UpstreamReply:
        if not self.is_available():
            raise MissingCredentialError(
                "OpenRouter APIキーが設定されていません",
                details="OPENROUTER_API_KEY is empty",
                solution=".envファイルにOPENROUTER_API_KEYを設定してサーバーを再起動してください",
            )
        payload = self.build_payload(request)
        logger.debug("openrouter request: %s", sanitize_for_log(payload))
        return post_json(
            self.api_url,
            payload,
            headers=self._headers(),
            timeout=self.timeout,
            provider=self.name,
        )
