"""
Base classes and types for image variation generation.
Used by composer, normalizer, providers (openrouter, gemini) and the service boundary.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


DEFAULT_MIME_TYPE = "image/png"
DEFAULT_SOURCE_MIME_TYPE = "image/jpeg"
DEFAULT_VARIATION_COUNT = 3
MIN_VARIATION_COUNT = 1
MAX_VARIATION_COUNT = 3


class GenerationMode(str, Enum):
    """Wire tags accepted from the editor UI."""

    EDIT = "edit"
    TEXT_ONLY = "text-only"
    GENERATE = "generate"
    COMBINED = "combined"

    @classmethod
    def parse(cls, value: "str | GenerationMode | None") -> "GenerationMode":
        """Resolve a tag or one of its long aliases; unknown tags raise InvalidInputError."""
        if isinstance(value, GenerationMode):
            return value
        tag = (value or "").strip().lower()
        tag = MODE_ALIASES.get(tag, tag)
        try:
            return cls(tag)
        except ValueError:
            raise InvalidInputError("無効なモードです", details=f"mode={value!r}") from None


MODE_ALIASES = {
    "text-only-extract": "text-only",
    "generate-from-text": "generate",
    "combined-product-cleanup": "combined",
}


@dataclass
class GenerationInputs:
    """Mode-specific inputs as received from the caller."""
    source_image: str | None = None
    instruction: str | None = None
    description: str | None = None
    variation_count: int | None = None


@dataclass
class GenerationRequest:
    """Composed outbound request: synthesized text, optional image, variation count."""
    mode: GenerationMode
    instruction_text: str
    variation_count: int
    source_image: str | None = None
    source_mime_type: str = DEFAULT_SOURCE_MIME_TYPE
    kind: str | None = None

    @property
    def has_attachment(self) -> bool:
        return self.source_image is not None

    @property
    def source_data_url(self) -> str | None:
        if self.source_image is None:
            return None
        return f"data:{self.source_mime_type};base64,{self.source_image}"


@dataclass
class UpstreamReply:
    """Raw reply from a provider: status code, parsed JSON (if any) and body text."""
    http_status: int
    body: Any = None
    text: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.http_status < 300


@dataclass
class ImageVariation:
    """One normalized generated image."""
    data: str
    index: int
    mime_type: str = DEFAULT_MIME_TYPE
    kind: str | None = None

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"

    @property
    def filename(self) -> str:
        if self.kind == "combined":
            return f"overlay-removed-product-{self.index}.png"
        if self.kind == "text-only":
            return f"text-only-{self.index}.png"
        if self.kind == "edit":
            return f"edited-image-{self.index}.png"
        return f"generated-image-{self.index}.png"


@dataclass
class ClassifiedError:
    """Error as shown to the caller; raw_details is diagnostics only."""
    http_status: int
    user_message: str
    raw_details: str = ""
    failure_type: str | None = None
    solution: str | None = None


@dataclass
class NormalizedResult:
    """Exactly one of variations (non-empty) or error."""
    variations: list[ImageVariation] = field(default_factory=list)
    error: ClassifiedError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ImageGenerationError(Exception):
    """Base error for the generation boundary; carries status, user message and raw details."""

    http_status = 500
    failure_type = "unexpected"

    def __init__(
        self,
        message: str,
        details: str = "",
        http_status: int | None = None,
        solution: str | None = None,
    ):
        super().__init__(message)
        self.user_message = message
        self.details = details
        if http_status is not None:
            self.http_status = http_status
        self.solution = solution

    def to_classified(self) -> ClassifiedError:
        return ClassifiedError(
            http_status=self.http_status,
            user_message=self.user_message,
            raw_details=self.details,
            failure_type=self.failure_type,
            solution=self.solution,
        )


class InvalidInputError(ImageGenerationError):
    """Required field for the selected mode is missing; no network call is made."""
    http_status = 400
    failure_type = "invalid_input"


class MissingCredentialError(ImageGenerationError):
    """Provider credential is not configured."""
    http_status = 500
    failure_type = "missing_credential"


class UpstreamHttpError(ImageGenerationError):
    """Non-2xx reply from the provider, already classified by status."""

    def __init__(self, classified: ClassifiedError):
        super().__init__(
            classified.user_message,
            details=classified.raw_details,
            http_status=classified.http_status,
        )
        self.failure_type = classified.failure_type or "upstream_error"


class EmptyResultError(ImageGenerationError):
    """Success status but no variation could be extracted from the reply."""
    http_status = 502
    failure_type = "empty_result"


class UnexpectedError(ImageGenerationError):
    """Any other exception during composition, transport or normalization."""
    http_status = 500
    failure_type = "unexpected"


class ImageGenerationProvider(ABC):
    """Base class for upstream image generation providers."""

    name = ""

    def __init__(self, config: dict) -> None:
        self.config = config
        self.model_name = (config.get("model") or "").strip()

    @abstractmethod
    def is_available(self) -> bool:
        """Check if provider is configured (credential present)."""
        pass

    @abstractmethod
    def build_payload(self, request: GenerationRequest) -> dict[str, Any]:
        """Build the provider JSON body for a composed request."""
        pass

    @abstractmethod
    def send(self, request: GenerationRequest) -> UpstreamReply:
        """Send request once. Raises MissingCredentialError before any network call."""
        pass


def _sanitize_value(value: Any) -> Any:
    """Recursively replace base64 image data with a placeholder."""
    if value is None:
        return None
    if isinstance(value, dict):
        if "data" in value and ("mimeType" in value or "mime_type" in value):
            return {k: ("[REDACTED]" if k == "data" else v) for k, v in value.items()}
        return {k: _sanitize_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_sanitize_value(v) for v in value]
    if isinstance(value, str) and value.startswith("data:") and ";base64," in value:
        return value.split(";base64,", 1)[0] + ";base64,[REDACTED]"
    return value


def sanitize_for_log(payload: Any) -> Any:
    """Copy of a request/reply safe for logging (no base64 image data)."""
    return _sanitize_value(payload)
