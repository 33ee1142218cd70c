"""
Unit tests for provider payloads and the single-POST transport (httpx mocked).
"""
import unittest
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from app.services.image_generation.base import GenerationInputs, MissingCredentialError
from app.services.image_generation.composer import compose
from app.services.image_generation.factory import ImageProviderFactory
from app.services.image_generation.providers.gemini import GeminiProvider
from app.services.image_generation.providers.openrouter import OpenRouterProvider

TRANSPORT_CLIENT = "app.services.image_generation.providers.transport.httpx.Client"


def _mock_response(status_code: int, json_body=None, text: str = ""):
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text
    if json_body is None:
        resp.json.side_effect = ValueError("not json")
    else:
        resp.json.return_value = json_body
    return resp


def _edit_request():
    return compose("edit", GenerationInputs(source_image="QUJD", instruction="明るく", variation_count=2))


class TestOpenRouterProvider(unittest.TestCase):
    def setUp(self):
        self.provider = OpenRouterProvider({"api_key": "sk-test", "site_url": "https://editor.example"})

    def test_payload_with_image(self):
        payload = self.provider.build_payload(_edit_request())
        self.assertEqual(payload["model"], "google/gemini-2.5-flash-image-preview")
        self.assertEqual(payload["modalities"], ["image", "text"])
        self.assertEqual(payload["temperature"], 0.7)
        content = payload["messages"][0]["content"]
        self.assertEqual(len(content), 2)
        self.assertEqual(content[0]["type"], "text")
        self.assertEqual(content[1]["image_url"]["url"], "data:image/jpeg;base64,QUJD")

    def test_payload_text_only_for_generate(self):
        request = compose("generate", GenerationInputs(description="D"))
        content = self.provider.build_payload(request)["messages"][0]["content"]
        self.assertEqual([part["type"] for part in content], ["text"])

    @patch(TRANSPORT_CLIENT)
    def test_send_posts_with_bearer(self, mock_client_cls):
        client = mock_client_cls.return_value.__enter__.return_value
        client.post.return_value = _mock_response(200, {"choices": []}, text='{"choices": []}')

        reply = self.provider.send(_edit_request())

        self.assertTrue(reply.ok)
        self.assertEqual(reply.body, {"choices": []})
        mock_client_cls.assert_called_once_with(timeout=None)
        _, kwargs = client.post.call_args
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer sk-test")
        self.assertEqual(kwargs["headers"]["HTTP-Referer"], "https://editor.example")
        self.assertEqual(kwargs["headers"]["X-Title"], "Gemini Image Editor")

    @patch(TRANSPORT_CLIENT)
    def test_send_returns_error_status_with_text(self, mock_client_cls):
        client = mock_client_cls.return_value.__enter__.return_value
        client.post.return_value = _mock_response(429, None, text="Too Many Requests")

        reply = self.provider.send(_edit_request())

        self.assertFalse(reply.ok)
        self.assertEqual(reply.http_status, 429)
        self.assertIsNone(reply.body)
        self.assertEqual(reply.text, "Too Many Requests")

    @patch(TRANSPORT_CLIENT)
    def test_missing_key_fails_before_network(self, mock_client_cls):
        provider = OpenRouterProvider({"api_key": ""})
        with self.assertRaises(MissingCredentialError) as ctx:
            provider.send(_edit_request())
        self.assertIn("OPENROUTER_API_KEY", ctx.exception.solution)
        mock_client_cls.assert_not_called()


class TestGeminiProvider(unittest.TestCase):
    def test_payload_inline_image(self):
        provider = GeminiProvider({"api_key": "g-key"})
        payload = provider.build_payload(_edit_request())
        parts = payload["contents"][0]["parts"]
        self.assertIn("text", parts[0])
        self.assertEqual(parts[1]["inlineData"], {"mimeType": "image/jpeg", "data": "QUJD"})
        self.assertEqual(payload["generationConfig"]["responseModalities"], ["IMAGE", "TEXT"])
        self.assertNotIn("safetySettings", payload)

    def test_safety_settings_from_json(self):
        provider = GeminiProvider({
            "api_key": "g-key",
            "safety_settings": '[{"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_NONE"}]',
        })
        payload = provider.build_payload(_edit_request())
        self.assertEqual(payload["safetySettings"][0]["threshold"], "BLOCK_NONE")

    @patch(TRANSPORT_CLIENT)
    def test_send_uses_model_url_and_key_param(self, mock_client_cls):
        client = mock_client_cls.return_value.__enter__.return_value
        client.post.return_value = _mock_response(200, {"candidates": []}, text="{}")
        provider = GeminiProvider({"api_key": "g-key", "model": "gemini-3-pro-image-preview"})

        provider.send(_edit_request())

        args, kwargs = client.post.call_args
        self.assertEqual(
            args[0],
            "https://generativelanguage.googleapis.com/v1beta/models/gemini-3-pro-image-preview:generateContent",
        )
        self.assertEqual(kwargs["params"], {"key": "g-key"})

    def test_missing_key(self):
        with self.assertRaises(MissingCredentialError):
            GeminiProvider({}).send(_edit_request())


class TestImageProviderFactory(unittest.TestCase):
    def _settings(self, provider: str):
        return SimpleNamespace(
            image_provider=provider,
            openrouter_api_key="sk-test",
            openrouter_api_url="https://openrouter.example/v1/chat/completions",
            openrouter_model="google/gemini-2.5-flash-image-preview",
            openrouter_temperature=0.5,
            openrouter_timeout=30.0,
            site_url="http://localhost:3000",
            app_title="Editor",
            gemini_api_key="",
            gemini_api_endpoint="https://generativelanguage.googleapis.com",
            gemini_image_model="gemini-2.5-flash-image",
            gemini_temperature=0.7,
            gemini_timeout=None,
            gemini_safety_settings="",
        )

    def test_openrouter_from_settings(self):
        provider = ImageProviderFactory.create_from_settings(self._settings("openrouter"))
        self.assertIsInstance(provider, OpenRouterProvider)
        self.assertEqual(provider.api_key, "sk-test")
        self.assertEqual(provider.temperature, 0.5)
        self.assertEqual(provider.timeout, 30.0)
        self.assertEqual(provider.api_url, "https://openrouter.example/v1/chat/completions")

    def test_override_to_gemini(self):
        provider = ImageProviderFactory.create_from_settings(self._settings("openrouter"), provider_override="gemini")
        self.assertIsInstance(provider, GeminiProvider)
        self.assertFalse(provider.is_available())

    def test_unknown_provider(self):
        with self.assertRaises(ValueError):
            ImageProviderFactory.create("dalle", {})
