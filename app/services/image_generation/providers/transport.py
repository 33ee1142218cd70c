"""
Single JSON POST to an upstream provider. No retry; status is returned, not raised.
"""
import logging
import time
from typing import Any

import httpx

from app.services.image_generation.base import UpstreamReply
from app.utils.metrics import upstream_requests_total

logger = logging.getLogger(__name__)


def post_json(
    url: str,
    payload: dict[str, Any],
    *,
    headers: dict[str, str] | None = None,
    params: dict[str, str] | None = None,
    timeout: float | None = None,
    provider: str = "",
) -> UpstreamReply:
    """
    POST payload and wrap the reply. timeout=None means no local deadline.
    Transport errors (httpx.RequestError) propagate to the caller.
    """
    started = time.monotonic()
    with httpx.Client(timeout=timeout) as client:
        resp = client.post(url, json=payload, headers=headers, params=params)
    latency_ms = int((time.monotonic() - started) * 1000)
    upstream_requests_total.labels(provider=provider or "unknown", status=str(resp.status_code)).inc()
    logger.info(
        "upstream_reply",
        extra={"provider": provider, "status_code": resp.status_code, "latency_ms": latency_ms},
    )

    text = resp.text
    body: Any = None
    if 200 <= resp.status_code < 300:
        # a 2xx body that is not JSON is an unexpected error, let it raise
        body = resp.json()
    else:
        try:
            body = resp.json()
        except ValueError:
            body = None
    return UpstreamReply(http_status=resp.status_code, body=body, text=text)
