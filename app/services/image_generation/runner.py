"""
Generation boundary: compose -> send -> (normalize), once, no retry.
Every failure becomes a ClassifiedError here; nothing is raised past this module.
One structured log line and metrics per request.
"""
import logging
import time
from dataclasses import dataclass
from typing import Any

from app.services.image_generation.base import (
    ClassifiedError,
    GenerationInputs,
    GenerationMode,
    GenerationRequest,
    ImageGenerationError,
    ImageGenerationProvider,
    NormalizedResult,
    UnexpectedError,
    UpstreamHttpError,
    UpstreamReply,
)
from app.services.image_generation.composer import compose
from app.services.image_generation.failure_types import classify_failure
from app.services.image_generation.normalizer import normalize
from app.utils.metrics import (
    generation_duration_seconds,
    generation_requests_total,
    variations_returned_total,
)

logger = logging.getLogger(__name__)

SERVER_ERROR_MESSAGE = "サーバーエラー"

# Keys for structured logging
LOG_KEYS = (
    "mode",
    "provider",
    "model_version",
    "status_code",
    "variation_count",
    "failure_type",
    "latency_ms",
)


@dataclass
class SubmitResult:
    """Raw upstream reply for a composed request, or the classified error."""
    request: GenerationRequest | None = None
    reply: UpstreamReply | None = None
    error: ClassifiedError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _mode_label(mode: Any) -> str:
    if isinstance(mode, GenerationMode):
        return mode.value
    try:
        return GenerationMode.parse(mode).value
    except ImageGenerationError:
        return "invalid"


def _unexpected(exc: Exception) -> ClassifiedError:
    return UnexpectedError(SERVER_ERROR_MESSAGE, details=str(exc) or type(exc).__name__).to_classified()


def _send(provider: ImageGenerationProvider, mode: Any, inputs: GenerationInputs) -> SubmitResult:
    request: GenerationRequest | None = None
    try:
        request = compose(mode, inputs)
        reply = provider.send(request)
        if not reply.ok:
            raise UpstreamHttpError(classify_failure(reply.http_status, reply.text))
        return SubmitResult(request=request, reply=reply)
    except ImageGenerationError as e:
        return SubmitResult(request=request, error=e.to_classified())
    except Exception as e:
        logger.exception("image_generation_unexpected_error")
        return SubmitResult(request=request, error=_unexpected(e))


def submit_generation(
    provider: ImageGenerationProvider,
    mode: str | GenerationMode,
    inputs: GenerationInputs,
) -> SubmitResult:
    """Compose and send one request; the raw reply is passed through unnormalized."""
    started = time.monotonic()
    result = _send(provider, mode, inputs)
    _record(provider, mode, result.request, result.error, started, variations=None)
    return result


def generate_variations(
    provider: ImageGenerationProvider,
    mode: str | GenerationMode,
    inputs: GenerationInputs,
) -> NormalizedResult:
    """Compose, send and normalize; variations are tagged with the mode's kind."""
    started = time.monotonic()
    submitted = _send(provider, mode, inputs)
    if not submitted.ok:
        result = NormalizedResult(error=submitted.error)
    else:
        try:
            result = normalize(
                submitted.reply.body,
                submitted.reply.http_status,
                kind=submitted.request.kind,
            )
        except ImageGenerationError as e:
            result = NormalizedResult(error=e.to_classified())
        except Exception as e:
            logger.exception("image_generation_normalize_failed")
            result = NormalizedResult(error=_unexpected(e))
    _record(provider, mode, submitted.request, result.error, started, variations=len(result.variations))
    return result


def _record(
    provider: ImageGenerationProvider,
    mode: Any,
    request: GenerationRequest | None,
    error: ClassifiedError | None,
    started: float,
    variations: int | None,
) -> None:
    mode_label = _mode_label(mode)
    elapsed = time.monotonic() - started
    outcome = "ok" if error is None else (error.failure_type or "unexpected")
    generation_requests_total.labels(mode=mode_label, outcome=outcome).inc()
    generation_duration_seconds.labels(mode=mode_label).observe(elapsed)
    if variations:
        variations_returned_total.labels(mode=mode_label).inc(variations)

    _log_structured(
        mode=mode_label,
        provider=provider.name,
        model_version=provider.model_name,
        status_code=error.http_status if error else 200,
        variation_count=request.variation_count if request else None,
        failure_type=error.failure_type if error else None,
        latency_ms=int(elapsed * 1000),
    )
    if error is not None:
        # raw_details can hold the full upstream body; keep it out of INFO
        logger.debug("image_generation_error_details: %s", error.raw_details)


def _log_structured(**kwargs: Any) -> None:
    """Emit one structured log line for observability."""
    extra = {k: v for k, v in kwargs.items() if k in LOG_KEYS and v is not None}
    logger.info("image_generation_result", extra=extra)
