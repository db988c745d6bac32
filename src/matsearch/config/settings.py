"""Application settings — Pydantic-based configuration with YAML and env var support.

Configuration is loaded from (in order of precedence):
  1. YAML config file (if specified)
  2. Environment variables (MATSEARCH_ prefix)
  3. Default values
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class ServerSettings(BaseModel):
    """HTTP server configuration."""

    host: str = Field(default="0.0.0.0", description="Server bind address")
    port: int = Field(default=8080, description="Server port")
    workers: int = Field(default=1, description="Number of worker processes")
    cors_origins: list[str] = Field(default=["*"], description="Allowed CORS origins")

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _parse_origins(cls, v: Any) -> list[str]:
        """Parse origins from JSON string (env var) or list."""
        if isinstance(v, str):
            import json

            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return [str(o) for o in parsed]
            except (json.JSONDecodeError, TypeError):
                pass
            # Comma-separated origins as plain string
            return [o.strip() for o in v.split(",") if o.strip()]
        return list(v)


class LocalDatasetSettings(BaseModel):
    """Locally cached bulk dataset.

    The dataset is a JSON array of material objects, read once on the first
    local query and kept for the lifetime of the process.
    """

    enabled: bool = Field(default=True, description="Whether the local provider is active")
    path: str = Field(default="data/local_materials.json", description="Path to the dataset JSON file")


class RemoteProviderSettings(BaseModel):
    """Remote property-lookup service (Materials Project summary API shape).

    An empty ``api_key`` is a supported configuration: the remote provider
    then contributes no results instead of failing.
    """

    enabled: bool = Field(default=True, description="Whether the remote provider is active")
    base_url: str = Field(default="https://api.materialsproject.org", description="Remote API base URL")
    summary_path: str = Field(default="/materials/summary", description="Path of the summary search endpoint")
    api_key: str = Field(default="", description="Remote API key (sent as X-API-KEY)")
    timeout: float | None = Field(
        default=None,
        description="HTTP timeout in seconds (None = no timeout; wrap the call for bounded latency)",
    )


class ObservabilitySettings(BaseModel):
    """Observability configuration."""

    log_level: str = Field(default="info", description="Log level: debug, info, warning, error")
    log_format: str = Field(default="json", description="Log format: json, console")


class Settings(BaseSettings):
    """Root application settings.

    Configuration is loaded from environment variables with the MATSEARCH_ prefix.
    Nested settings use double underscores: MATSEARCH_SERVER__PORT=9090

    Example:
        MATSEARCH_SERVER__PORT=9090
        MATSEARCH_LOCAL__PATH=/srv/data/local_materials.json
        MATSEARCH_REMOTE__API_KEY=...
    """

    model_config = {
        "env_prefix": "MATSEARCH_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    # Application metadata
    app_name: str = Field(default="MatSearch", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    # Component settings
    server: ServerSettings = Field(default_factory=ServerSettings)
    local: LocalDatasetSettings = Field(default_factory=LocalDatasetSettings)
    remote: RemoteProviderSettings = Field(default_factory=RemoteProviderSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @classmethod
    def from_yaml(cls, path: str | Path) -> Settings:
        """Load settings from a YAML configuration file.

        Keys set in the YAML file win over environment variables; anything
        the file leaves out still comes from the environment or defaults.

        Args:
            path: Path to the YAML config file.

        Returns:
            Populated Settings instance.
        """
        import yaml  # type: ignore[import-untyped]

        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)
