"""
Image variation generation: mode-driven request composer, provider clients and
multi-schema response normalizer.
"""
from .base import (
    ClassifiedError,
    EmptyResultError,
    GenerationInputs,
    GenerationMode,
    GenerationRequest,
    ImageGenerationError,
    ImageGenerationProvider,
    ImageVariation,
    InvalidInputError,
    MissingCredentialError,
    NormalizedResult,
    UnexpectedError,
    UpstreamHttpError,
    UpstreamReply,
    sanitize_for_log,
)
from .composer import compose
from .factory import ImageProviderFactory
from .failure_types import FailureType, classify_failure
from .normalizer import normalize
from .runner import SubmitResult, generate_variations, submit_generation

__all__ = [
    "ClassifiedError",
    "EmptyResultError",
    "GenerationInputs",
    "GenerationMode",
    "GenerationRequest",
    "ImageGenerationError",
    "ImageGenerationProvider",
    "ImageVariation",
    "InvalidInputError",
    "MissingCredentialError",
    "NormalizedResult",
    "UnexpectedError",
    "UpstreamHttpError",
    "UpstreamReply",
    "sanitize_for_log",
    "compose",
    "ImageProviderFactory",
    "FailureType",
    "classify_failure",
    "normalize",
    "SubmitResult",
    "generate_variations",
    "submit_generation",
]
