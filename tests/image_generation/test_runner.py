"""
Tests for the generation boundary: every failure comes back as a ClassifiedError.
"""
import unittest

import httpx

from app.services.image_generation.base import (
    GenerationInputs,
    ImageGenerationProvider,
    MissingCredentialError,
    UpstreamReply,
)
from app.services.image_generation.runner import generate_variations, submit_generation


class FakeProvider(ImageGenerationProvider):
    name = "fake"

    def __init__(self, reply: UpstreamReply | None = None, exc: Exception | None = None, api_key: str = "k"):
        super().__init__({"model": "fake-image-model"})
        self.reply = reply
        self.exc = exc
        self.api_key = api_key
        self.sent = []

    def is_available(self) -> bool:
        return bool(self.api_key)

    def build_payload(self, request):
        return {"text": request.instruction_text}

    def send(self, request):
        if not self.is_available():
            raise MissingCredentialError("キー未設定", solution="set FAKE_API_KEY")
        self.sent.append(request)
        if self.exc is not None:
            raise self.exc
        return self.reply


IMAGES_REPLY = {
    "choices": [{"message": {"images": [
        {"image_url": {"url": "data:image/png;base64,AAA"}},
        {"image_url": {"url": "data:image/png;base64,BBB"}},
    ]}}]
}

EDIT_INPUTS = GenerationInputs(source_image="QUJD", instruction="明るく")


class TestSubmitGeneration(unittest.TestCase):
    def test_raw_reply_passed_through(self):
        provider = FakeProvider(UpstreamReply(200, IMAGES_REPLY, "{}"))
        result = submit_generation(provider, "edit", EDIT_INPUTS)
        self.assertTrue(result.ok)
        self.assertIs(result.reply.body, IMAGES_REPLY)
        self.assertEqual(len(provider.sent), 1)

    def test_invalid_input_makes_no_call(self):
        provider = FakeProvider(UpstreamReply(200, IMAGES_REPLY))
        result = submit_generation(provider, "edit", GenerationInputs(source_image="QUJD"))
        self.assertEqual(result.error.http_status, 400)
        self.assertEqual(result.error.failure_type, "invalid_input")
        self.assertEqual(provider.sent, [])

    def test_invalid_mode(self):
        result = submit_generation(FakeProvider(), "upscale", EDIT_INPUTS)
        self.assertEqual(result.error.user_message, "無効なモードです")

    def test_missing_credential_has_solution(self):
        result = submit_generation(FakeProvider(api_key=""), "edit", EDIT_INPUTS)
        self.assertEqual(result.error.http_status, 500)
        self.assertEqual(result.error.solution, "set FAKE_API_KEY")

    def test_upstream_status_is_classified(self):
        provider = FakeProvider(UpstreamReply(402, None, "Payment Required"))
        result = submit_generation(provider, "edit", EDIT_INPUTS)
        self.assertEqual(result.error.http_status, 402)
        self.assertEqual(result.error.user_message, "アカウントクレジット不足です")
        self.assertEqual(result.error.raw_details, "Payment Required")
        self.assertEqual(len(provider.sent), 1)

    def test_transport_error_is_unexpected(self):
        provider = FakeProvider(exc=httpx.ConnectError("connection refused"))
        result = submit_generation(provider, "edit", EDIT_INPUTS)
        self.assertEqual(result.error.http_status, 500)
        self.assertEqual(result.error.user_message, "サーバーエラー")
        self.assertIn("connection refused", result.error.raw_details)


class TestGenerateVariations(unittest.TestCase):
    def test_variations_tagged_with_kind(self):
        provider = FakeProvider(UpstreamReply(200, IMAGES_REPLY))
        result = generate_variations(provider, "combined", GenerationInputs(source_image="QUJD"))
        self.assertTrue(result.ok)
        self.assertEqual([v.index for v in result.variations], [1, 2])
        self.assertEqual({v.kind for v in result.variations}, {"combined"})
        self.assertEqual(provider.sent[0].variation_count, 3)

    def test_empty_success_is_reported(self):
        provider = FakeProvider(UpstreamReply(200, {"choices": [{"message": {"content": "no image"}}]}))
        result = generate_variations(provider, "generate", GenerationInputs(description="D"))
        self.assertFalse(result.ok)
        self.assertEqual(result.error.failure_type, "empty_result")
        self.assertEqual(result.error.http_status, 502)

    def test_quota_error_is_not_retried(self):
        provider = FakeProvider(UpstreamReply(429, None, "rate limited"))
        result = generate_variations(provider, "edit", EDIT_INPUTS)
        self.assertEqual(result.error.failure_type, "quota_exhausted")
        self.assertEqual(len(provider.sent), 1)

    def test_unexpected_exception_is_contained(self):
        provider = FakeProvider(exc=RuntimeError("boom"))
        result = generate_variations(provider, "edit", EDIT_INPUTS)
        self.assertEqual(result.error.user_message, "サーバーエラー")
        self.assertEqual(result.error.raw_details, "boom")
