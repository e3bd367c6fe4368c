"""
Configuration settings for the foundation dashboard.

Uses Pydantic Settings to load environment variables for the data backend,
workbook locations, database connection and logging.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_DATA_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    # Backend
    data_backend: Literal["spreadsheet", "database"] = Field("spreadsheet", alias="DATA_BACKEND")

    # Workbooks
    data_dir: Path = Field(DEFAULT_DATA_DIR, alias="FOUNDATION_DATA_DIR")
    donations_file: str = Field("Donation_Dashboard_Updated.xlsx", alias="DONATIONS_FILE")
    cep_file: str = Field("CEP 2025 (AASTHA FOUNDATION).xlsx", alias="CEP_FILE")
    medical_file: str = Field("Patient_Records (1).xlsx", alias="MEDICAL_FILE")

    # Database
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("foundation", alias="DB_NAME")
    db_pool_min: int = Field(1, alias="DB_POOL_MIN")
    db_pool_max: int = Field(5, alias="DB_POOL_MAX")

    # Application
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    json_logs: bool = Field(False, alias="JSON_LOGS")
    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000", "http://localhost:8501"],
        alias="CORS_ORIGINS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def dsn(self) -> str:
        return (
            f"postgresql://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    @property
    def donations_path(self) -> Path:
        return self.data_dir / self.donations_file

    @property
    def cep_path(self) -> Path:
        return self.data_dir / self.cep_file

    @property
    def medical_path(self) -> Path:
        return self.data_dir / self.medical_file

    def workbook_paths(self) -> dict[str, Path]:
        return {
            "Donations": self.donations_path,
            "CEP": self.cep_path,
            "Medical": self.medical_path,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings", "DEFAULT_DATA_DIR"]
