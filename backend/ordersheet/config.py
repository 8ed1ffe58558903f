"""
Order Sheet Backend: Application Configuration
===============================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by the app factory, the workbook store and the logging setup.
When:  Loaded once at module import time; validated before app starts.
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have working defaults for a local front-end talking to
    this service on the same machine. Attributes are grouped by concern.
    """

    # ── Workbook Storage ──────────────────────────────────────────────────
    # What: Path of the .xlsx file that holds the entire order table
    # Relative paths resolve against the process working directory
    workbook_path: str = Field(
        default="orders.xlsx",
        description="Spreadsheet file backing the order table",
    )

    # What: Name of the sheet holding the header row and the order rows
    sheet_name: str = Field(default="Orders", min_length=1, max_length=31)

    # What: strftime pattern used for dateOfCreation cells
    timestamp_format: str = Field(default="%Y-%m-%d %H:%M:%S")

    # ── CORS ──────────────────────────────────────────────────────────────
    # What: Allowed origins for cross-origin requests (the local front-end)
    # Format: Comma-separated URLs (parsed by the property below)
    cors_origins: str = Field(default="http://localhost:3001")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=3000, ge=1, le=65535)

    # ── Logging ───────────────────────────────────────────────────────────
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    # What: Optional log file written alongside the console output
    # Empty string disables the file handler
    log_file: str = Field(default="app.log")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # WORKBOOK_PATH and workbook_path both work
    }


# Singleton instance, imported throughout the application
settings = Settings()
