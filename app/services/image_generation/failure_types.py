"""
Failure classification for upstream replies.
Status code alone decides the user-facing message; the body is kept for diagnostics.
"""
from enum import Enum

from app.services.image_generation.base import ClassifiedError


class FailureType(str, Enum):
    """Upstream failure types by HTTP status."""

    CREDENTIAL_INVALID = "credential_invalid"  # 401
    INSUFFICIENT_CREDIT = "insufficient_credit"  # 402
    QUOTA_EXHAUSTED = "quota_exhausted"  # 429
    UPSTREAM_ERROR = "upstream_error"  # anything else


STATUS_FAILURE_TYPES: dict[int, FailureType] = {
    401: FailureType.CREDENTIAL_INVALID,
    402: FailureType.INSUFFICIENT_CREDIT,
    429: FailureType.QUOTA_EXHAUSTED,
}

USER_MESSAGES: dict[FailureType, str] = {
    FailureType.CREDENTIAL_INVALID: "APIキーが無効です。OpenRouter.aiで新しいキーを生成してください",
    FailureType.INSUFFICIENT_CREDIT: "アカウントクレジット不足です",
    FailureType.QUOTA_EXHAUSTED: "無料枠上限(50回/日)に達しました。$10購入で1000回/日に拡張できます",
    FailureType.UPSTREAM_ERROR: "API呼び出しエラー",
}


def classify_status(http_status: int) -> FailureType:
    return STATUS_FAILURE_TYPES.get(http_status, FailureType.UPSTREAM_ERROR)


def classify_failure(http_status: int, body_text: str = "") -> ClassifiedError:
    """
    Classify a non-2xx upstream reply.
    The response body never influences the message; it is retained as raw_details.
    """
    failure_type = classify_status(http_status)
    return ClassifiedError(
        http_status=http_status,
        user_message=USER_MESSAGES[failure_type],
        raw_details=body_text or "",
        failure_type=failure_type.value,
    )
