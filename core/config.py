"""
Configuration management for VeoStudio.

Centralizes all configuration including:
- Gemini API key and endpoint
- Video model selection
- Operation polling cadence and optional guards
- Output location for downloaded videos
"""

import os
from dataclasses import dataclass, field
from typing import Optional


def _env_float(name: str, default: Optional[float] = None) -> Optional[float]:
    value = os.getenv(name, "").strip()
    return float(value) if value else default


def _env_int(name: str) -> Optional[int]:
    value = os.getenv(name, "").strip()
    return int(value) if value else None


@dataclass
class APIConfig:
    """API configuration for the Gemini video service."""

    # API_KEY is what the hosted studio injects; GEMINI_API_KEY wins when both are set
    gemini_api_key: str = field(
        default_factory=lambda: (
            os.getenv("GEMINI_API_KEY")
            or os.getenv("API_KEY")
            or os.getenv("GOOGLE_API_KEY", "")
        )
    )
    use_vertexai: bool = False


@dataclass
class ModelConfig:
    """Model selection configuration."""

    video_model: str = field(
        default_factory=lambda: os.getenv("VEO_MODEL", "veo-2.0-generate-001")
    )

    # Uploads are accepted as PNG only
    reference_mime_type: str = "image/png"


@dataclass
class PollingConfig:
    """Long-running operation polling configuration."""

    interval_seconds: float = field(
        default_factory=lambda: _env_float("VEO_POLL_INTERVAL", 1.0)
    )

    # Both guards are off by default: an operation that never completes polls forever
    max_attempts: Optional[int] = field(
        default_factory=lambda: _env_int("VEO_POLL_MAX_ATTEMPTS")
    )
    max_duration_seconds: Optional[float] = field(
        default_factory=lambda: _env_float("VEO_POLL_MAX_DURATION")
    )


@dataclass
class OutputConfig:
    """Storage configuration for downloaded videos."""

    output_dir: str = field(default_factory=lambda: os.getenv("VEO_OUTPUT_DIR", "output"))
    download_timeout: float = 600.0  # 10 min, generated clips can be large


@dataclass
class Config:
    """Main configuration class."""

    api: APIConfig = field(default_factory=APIConfig)
    models: ModelConfig = field(default_factory=ModelConfig)
    polling: PollingConfig = field(default_factory=PollingConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls()

    def validate(self) -> list[str]:
        """Validate configuration and return list of issues."""
        issues = []

        if not self.api.gemini_api_key:
            issues.append("GEMINI_API_KEY (or API_KEY) not configured")

        if self.polling.interval_seconds < 0:
            issues.append("VEO_POLL_INTERVAL must not be negative")

        if self.polling.max_attempts is not None and self.polling.max_attempts < 1:
            issues.append("VEO_POLL_MAX_ATTEMPTS must be at least 1")

        if (
            self.polling.max_duration_seconds is not None
            and self.polling.max_duration_seconds <= 0
        ):
            issues.append("VEO_POLL_MAX_DURATION must be positive")

        return issues


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reload_config():
    """Reload configuration from environment."""
    global _config
    _config = Config.from_env()
