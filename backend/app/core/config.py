"""
Configuration management using Pydantic Settings
"""
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# config.py is at: backend/app/core/config.py
# Project root is: backend/app/core/../../../
_current_file = Path(__file__).resolve()
_backend_dir = _current_file.parent.parent.parent
_project_root = _backend_dir.parent
ENV_FILE = _project_root / ".env"
# Fallback: try in backend/ directory if not found in project root
if not ENV_FILE.exists():
    ENV_FILE = _backend_dir / ".env"
if ENV_FILE.exists():
    load_dotenv(ENV_FILE, override=False)


class Settings(BaseSettings):
    """Application settings"""

    # Application
    app_name: str = "Tipster"
    app_env: str = Field(default="development", description="Application environment")
    log_level: str = Field(default="INFO", description="Logging level")
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=3000, ge=1, le=65535, description="API port")
    allowed_origins: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # Logging
    log_uvicorn_access: bool = Field(default=False, description="Enable Uvicorn access logging")
    log_module_levels: Optional[str] = Field(
        default=None,
        description='Module-specific log levels (JSON string, e.g., {"app.services": "DEBUG"})'
    )
    log_format: str = Field(
        default="json",
        description="Log format: 'json' for structured logging, 'text' for plain text"
    )
    log_file_enabled: bool = Field(default=False, description="Enable file logging")
    log_file_path: str = Field(
        default="logs/tipster.log",
        description="Path to log file (relative to project root)"
    )
    log_file_rotation: str = Field(
        default="midnight",
        description="Log file rotation: 'midnight' or 'W0'..'W6' (weekly)"
    )
    log_file_retention: int = Field(default=30, ge=1, description="Number of rotated log files to keep")
    log_sensitive_data: bool = Field(
        default=False,
        description="Disable masking of API keys in logs - NOT RECOMMENDED"
    )

    # Upstream HTTP
    upstream_timeout_seconds: float = Field(default=15.0, gt=0, description="Timeout for upstream data APIs")

    # Football statistics provider (apifootball.com v3)
    football_api_key: Optional[str] = Field(default=None, description="apifootball.com API key")
    football_api_url: str = Field(
        default="https://apiv3.apifootball.com/",
        description="apifootball.com base URL"
    )
    fixture_lookahead_days: int = Field(default=14, ge=1, description="Days ahead to list upcoming fixtures")
    form_lookback_days: int = Field(default=60, ge=1, description="Days back to collect recent team form")
    head_to_head_limit: int = Field(default=5, ge=1, description="Head-to-head matches embedded in the prompt")
    recent_form_matches: int = Field(default=5, ge=1, description="Finished matches used for form averages")

    # Odds comparison provider (the-odds-api.com v4)
    odds_api_key: Optional[str] = Field(default=None, description="the-odds-api.com API key")
    odds_api_url: str = Field(default="https://api.the-odds-api.com/v4", description="Odds API base URL")
    odds_regions: str = Field(default="eu", description="Bookmaker regions (comma-separated)")
    odds_markets: str = Field(default="h2h,totals", description="Odds markets (comma-separated)")

    # Deriv WebSocket API
    deriv_ws_url: str = Field(
        default="wss://ws.derivws.com/websockets/v3",
        description="Deriv WebSocket endpoint"
    )
    deriv_app_id: str = Field(default="1089", description="Deriv application id")
    deriv_candle_count: int = Field(default=200, ge=2, le=5000, description="Candles requested per analysis")
    deriv_granularity: int = Field(default=300, ge=60, description="Candle size in seconds")

    # Generative language endpoint (Gemini)
    gemini_api_key: Optional[str] = Field(default=None, description="Generative language API key")
    gemini_api_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Generative language API base URL"
    )
    gemini_model: str = Field(default="gemini-1.5-flash-latest", description="Model used for analysis")
    llm_timeout_seconds: float = Field(default=60.0, ge=5, le=300, description="LLM request timeout (seconds)")
    llm_temperature: Optional[float] = Field(
        default=None,
        ge=0.0,
        le=2.0,
        description="Sampling temperature; provider default when unset"
    )

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v):
        return v.upper() if isinstance(v, str) else v

    @property
    def allowed_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE) if ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
