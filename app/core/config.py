"""
Application configuration.
All settings are loaded from environment variables.
Use env.example as a reference for required variables.
"""
from pydantic import field_validator
from pydantic_settings import BaseSettings

IMAGE_PROVIDERS = ("openrouter", "gemini")


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Credentials default to empty: the app starts without them and reports a
    configuration error per request instead of calling the provider.
    """

    # ===========================================
    # APPLICATION
    # ===========================================
    app_env: str = "local"
    # Sent upstream as X-Title / HTTP-Referer (OpenRouter app attribution)
    app_title: str = "Gemini Image Editor"
    site_url: str = "http://localhost:3000"
    # CORS: comma-separated (e.g. http://localhost:3000,http://editor:80). Empty = default list in code.
    cors_origins: str = ""

    # ===========================================
    # IMAGE GENERATION - PROVIDER SELECTION
    # ===========================================
    image_provider: str = "openrouter"  # openrouter, gemini

    # ===========================================
    # OPENROUTER (Provider: openrouter)
    # ===========================================
    openrouter_api_key: str = ""  # Get from https://openrouter.ai/keys
    openrouter_api_url: str = "https://openrouter.ai/api/v1/chat/completions"
    openrouter_model: str = "google/gemini-2.5-flash-image-preview"
    openrouter_temperature: float = 0.7
    # None = no local deadline; the caller's transport deadline applies
    openrouter_timeout: float | None = None

    # ===========================================
    # GOOGLE GEMINI (Provider: gemini)
    # ===========================================
    gemini_api_key: str = ""  # Get from https://aistudio.google.com/apikey
    gemini_api_endpoint: str = "https://generativelanguage.googleapis.com"
    gemini_image_model: str = "gemini-2.5-flash-image"
    gemini_temperature: float = 0.7
    gemini_timeout: float | None = None
    # SafetySettings for generateContent (JSON array or empty)
    gemini_safety_settings: str = ""

    # ===========================================
    # LOGGING
    # ===========================================
    log_level: str = "INFO"
    log_file: str | None = None
    log_max_bytes: int = 10_000_000
    log_backup_count: int = 5

    @field_validator("image_provider")
    @classmethod
    def normalize_provider(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in IMAGE_PROVIDERS:
            raise ValueError(f"image_provider must be one of: {', '.join(IMAGE_PROVIDERS)}")
        return v

    @field_validator("openrouter_temperature", "gemini_temperature")
    @classmethod
    def validate_temperature(cls, v: float) -> float:
        if not 0.0 <= v <= 2.0:
            raise ValueError("temperature must be between 0 and 2")
        return v

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def active_api_key(self) -> str:
        """Credential of the selected provider (empty if not configured)."""
        if self.image_provider == "gemini":
            return self.gemini_api_key
        return self.openrouter_api_key

    def active_model(self) -> str:
        if self.image_provider == "gemini":
            return self.gemini_image_model
        return self.openrouter_model

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
