"""
Response normalizer: raw provider reply -> ordered ImageVariation list or ClassifiedError.

Known reply shapes are tried in RESPONSE_SCHEMAS order; the first one that yields at
least one image wins. A 2xx reply with no image is never silent success: it raises
EmptyResultError.
"""
import json
import logging
import re
from typing import Any, Iterator

from app.services.image_generation.base import (
    DEFAULT_MIME_TYPE,
    EmptyResultError,
    ImageVariation,
    NormalizedResult,
)
from app.services.image_generation.failure_types import classify_failure

logger = logging.getLogger(__name__)

_DATA_URI_PREFIX_RE = re.compile(r"^data:[^,]*?;base64,")


def strip_data_uri(value: str) -> str:
    return _DATA_URI_PREFIX_RE.sub("", value, count=1)


def _dict(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _list(value: Any) -> list:
    return value if isinstance(value, list) else []


def _first(items: Any) -> dict:
    items = _list(items)
    return _dict(items[0]) if items else {}


class ChatCompletionsSchema:
    """choices[0].message.images[*].image_url.url holding data URIs (OpenRouter)."""

    name = "chat_completions"

    def extract(self, reply: dict) -> Iterator[tuple[str, str]]:
        message = _dict(_first(reply.get("choices")).get("message"))
        for image in _list(message.get("images")):
            url = _dict(_dict(image).get("image_url")).get("url")
            if isinstance(url, str) and url:
                yield strip_data_uri(url), DEFAULT_MIME_TYPE


class CandidatesSchema:
    """candidates[0].content.parts[*].inlineData with explicit mime (Gemini)."""

    name = "candidates"

    def extract(self, reply: dict) -> Iterator[tuple[str, str]]:
        content = _dict(_first(reply.get("candidates")).get("content"))
        for part in _list(content.get("parts")):
            part = _dict(part)
            inline = _dict(part.get("inlineData") or part.get("inline_data"))
            data = inline.get("data")
            if isinstance(data, str) and data:
                mime = inline.get("mimeType") or inline.get("mime_type")
                yield data, (mime if isinstance(mime, str) and mime else DEFAULT_MIME_TYPE)


RESPONSE_SCHEMAS = (ChatCompletionsSchema(), CandidatesSchema())


def unwrap_envelope(raw_reply: Any) -> Any:
    """Accept the /api/edit-image success envelope {success, response} as well as a bare reply."""
    if isinstance(raw_reply, dict) and "success" in raw_reply and "response" in raw_reply:
        return raw_reply["response"]
    return raw_reply


def extract_variations(raw_reply: Any, kind: str | None = None) -> list[ImageVariation]:
    """Variations from the first schema with any image; indices are 1-based in discovery order."""
    reply = unwrap_envelope(raw_reply)
    if not isinstance(reply, dict):
        return []
    for schema in RESPONSE_SCHEMAS:
        found = list(schema.extract(reply))
        if found:
            logger.debug("reply matched schema %s (%d images)", schema.name, len(found))
            return [
                ImageVariation(data=data, mime_type=mime, index=position, kind=kind)
                for position, (data, mime) in enumerate(found, start=1)
            ]
    return []


def normalize(raw_reply: Any, http_status: int, kind: str | None = None) -> NormalizedResult:
    """
    Normalize one provider reply.

    Non-2xx: classified by status only, body kept as raw_details.
    2xx: variations from the first matching schema; none found -> EmptyResultError.
    """
    if not 200 <= http_status < 300:
        if isinstance(raw_reply, str):
            body_text = raw_reply
        elif raw_reply is None:
            body_text = ""
        elif isinstance(raw_reply, (dict, list)):
            body_text = json.dumps(raw_reply, ensure_ascii=False)
        else:
            body_text = str(raw_reply)
        return NormalizedResult(error=classify_failure(http_status, body_text))

    variations = extract_variations(raw_reply, kind=kind)
    if not variations:
        raise EmptyResultError(
            "画像生成に失敗しました。レスポンス構造を確認してください。",
            details=_describe_shape(unwrap_envelope(raw_reply)),
        )
    return NormalizedResult(variations=variations)


def _describe_shape(reply: Any) -> str:
    """Top-level keys only; replies can carry megabytes of base64."""
    if isinstance(reply, dict):
        return "reply keys: " + ", ".join(sorted(str(k) for k in reply.keys()))
    return f"reply type: {type(reply).__name__}"
