from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent  # autoformat repo root

DEFAULT_AUTOESCAPE_EXTENSIONS = [".html.jinja", ".xml.jinja", ".html", ".xml"]
DEFAULT_LANGUAGES = ["en", "de", "fr", "es", "nl", "pl", "pt", "ru", "zh"]


class Settings(BaseSettings):
    """Application settings with validation.

    Everything has a working default so the service starts without a .env
    file. Values can be overridden via environment variables or .env.

    Uses Pydantic v2 API:
    - model_config with SettingsConfigDict
    - @field_validator decorator
    """

    # API server settings
    api_host: str = Field(default="127.0.0.1", min_length=1, description="API server host")
    api_port: int = Field(ge=1, le=65535, default=8000, description="API server port")
    log_level: str = Field(default="INFO", description="Root log level")

    # Development build flag, exposed to templates as `dev`
    dev: bool = Field(default=False, description="Development mode (dev asset server, verbose pages)")

    # Template engine
    templates_dir: Path = Field(default=BASE_DIR / "templates", description="Template lookup root")
    template_glob: str = Field(default="**/*.jinja", description="Glob of templates compiled at startup")
    autoescape_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_AUTOESCAPE_EXTENSIONS),
        description="Template name suffixes rendered with autoescaping",
    )
    languages: list[str] = Field(
        default_factory=lambda: list(DEFAULT_LANGUAGES),
        description="Supported language codes returned by the languages() template function",
    )

    # Bundled assets (Vite)
    assets_manifest: Path = Field(
        default=BASE_DIR / "static" / "dist" / ".vite" / "manifest.json",
        description="Vite build manifest used to resolve modules() in production",
    )
    assets_base_url: str = Field(default="/static/dist/", description="URL prefix of built assets")
    vite_dev_server: str = Field(default="http://localhost:5173", pattern=r"^https?://")

    # Identity: bearer API key -> username
    api_accounts: dict[str, str] = Field(default_factory=dict, description="Bearer API keys mapped to usernames")

    # Security
    cors_origins: str = Field(default="http://localhost:8000,http://127.0.0.1:8000")
    trusted_hosts: str = Field(default="localhost,127.0.0.1,testserver")

    model_config = SettingsConfigDict(
        env_file=Path(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    @field_validator("template_glob", mode="after")
    @classmethod
    def validate_template_glob(cls, v: str) -> str:
        """Ensure template_glob is not empty or whitespace."""
        v = v.strip()
        if not v:
            raise ValueError("template_glob cannot be empty")
        return v

    @field_validator("autoescape_extensions", mode="after")
    @classmethod
    def validate_autoescape_extensions(cls, v: list[str]) -> list[str]:
        """Ensure every autoescape extension is a dotted suffix like '.html'."""
        cleaned = [ext.strip().lower() for ext in v]
        for ext in cleaned:
            if not ext.startswith(".") or len(ext) < 2:
                raise ValueError(f"autoescape extension must start with '.': {ext!r}")
        return cleaned

    @field_validator("languages", mode="after")
    @classmethod
    def validate_languages(cls, v: list[str]) -> list[str]:
        """Ensure at least one language is configured."""
        if not v:
            raise ValueError("languages must contain at least one language code")
        return v

    @field_validator("assets_base_url", mode="after")
    @classmethod
    def validate_assets_base_url(cls, v: str) -> str:
        """Normalize the asset prefix to end with a slash."""
        return v if v.endswith("/") else f"{v}/"


# Singleton settings instance (cached for performance)
_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Get singleton Settings instance for dependency injection.

    Creates the instance on first use so .env is read once per process.

    Returns:
        Cached Settings instance

    Example:
        @app.get("/")
        async def route(settings: Settings = Depends(get_settings)):
            return {"dev": settings.dev}
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
