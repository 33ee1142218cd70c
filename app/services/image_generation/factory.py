"""
Factory for creating the upstream provider based on configuration.
The credential is read from settings once, here, and injected into the provider.
"""
from typing import Optional
import logging

from app.services.image_generation.base import ImageGenerationProvider
from app.services.image_generation.providers.gemini import GeminiProvider
from app.services.image_generation.providers.openrouter import OpenRouterProvider

logger = logging.getLogger(__name__)


class ImageProviderFactory:
    """Factory for creating image generation providers."""

    PROVIDERS = {
        "openrouter": OpenRouterProvider,
        "gemini": GeminiProvider,
    }

    @classmethod
    def create(cls, provider_name: str, config: dict) -> ImageGenerationProvider:
        """
        Create provider instance by name.

        Raises:
            ValueError: If provider name is unknown
        """
        provider_class = cls.PROVIDERS.get(provider_name.strip().lower())

        if not provider_class:
            available = ", ".join(cls.PROVIDERS.keys())
            raise ValueError(
                f"Unknown provider: {provider_name}. "
                f"Available providers: {available}"
            )

        provider = provider_class(config)

        if not provider.is_available():
            logger.warning(f"Provider {provider_name} created but credential is not configured")

        return provider

    @classmethod
    def create_from_settings(cls, settings, provider_override: Optional[str] = None) -> ImageGenerationProvider:
        """
        Create provider from application settings.

        Args:
            settings: Application settings object
            provider_override: If set, use this provider name instead of settings.image_provider
        """
        provider_name = (provider_override or "").strip() or settings.image_provider
        config = cls.config_from_settings(provider_name, settings)
        return cls.create(provider_name, config)

    @classmethod
    def config_from_settings(cls, provider_name: str, settings) -> dict:
        provider_name = provider_name.strip().lower()
        if provider_name == "openrouter":
            return {
                "api_key": settings.openrouter_api_key,
                "api_url": settings.openrouter_api_url,
                "model": settings.openrouter_model,
                "temperature": settings.openrouter_temperature,
                "timeout": settings.openrouter_timeout,
                "site_url": settings.site_url,
                "app_title": settings.app_title,
            }
        if provider_name == "gemini":
            return {
                "api_key": settings.gemini_api_key,
                "api_endpoint": settings.gemini_api_endpoint,
                "model": settings.gemini_image_model,
                "temperature": settings.gemini_temperature,
                "timeout": settings.gemini_timeout,
                "safety_settings": settings.gemini_safety_settings,
            }
        raise ValueError(f"Provider {provider_name} not supported in settings")

    @classmethod
    def get_available_providers(cls) -> list[str]:
        """Get list of all provider names."""
        return list(cls.PROVIDERS.keys())
