"""
Configuration management for the QR Label Sheet Service.
Loads environment variables with validation.
"""

from typing import Literal
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # =============================================================================
    # Ledger Storage
    # =============================================================================
    # Deleting this file is the only way to restart numbering from 1
    db_path: str = "./labels.db"
    db_busy_timeout_seconds: float = 30.0

    # =============================================================================
    # Code Allocation
    # =============================================================================
    code_width: int = 6
    code_separator: str = "-"
    default_prefix: str = "T"
    max_batch_size: int = 1000

    # =============================================================================
    # Label Layout
    # =============================================================================
    label_profile: str = "pls601"
    qr_error_correction: Literal["L", "M", "Q", "H"] = "M"
    qr_pixel_size: int = 256
    qr_border: int = 0
    show_code_text: bool = True
    font_name: str = "Helvetica"
    font_size: float = 9.0

    # Printer feed drift compensation (points), applied to every placed element
    label_x_offset: float = 0.0
    label_y_offset: float = 0.0

    # =============================================================================
    # Deployment Configuration
    # =============================================================================
    port: int = 4000
    log_level: Literal["debug", "info", "warning", "error"] = "info"
    environment: Literal["development", "staging", "production"] = "development"

    @field_validator("code_width")
    @classmethod
    def _check_code_width(cls, value: int) -> int:
        if value not in (5, 6):
            raise ValueError("code_width must be 5 or 6")
        return value

    # =============================================================================
    # Computed Properties
    # =============================================================================
    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"


# Global settings instance
settings = Settings()
