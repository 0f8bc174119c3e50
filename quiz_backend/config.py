# FILE: quiz_backend/config.py
"""
Configuration management for the quiz attempt service
Loads from environment variables with validation
"""
import os
from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment"""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True
    )
    
    # Backend server
    backend_host: str = Field(default="0.0.0.0", alias="BACKEND_HOST")
    backend_port: int = Field(default=8000, alias="BACKEND_PORT")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    
    # Data paths
    data_dir: str = Field(default="./data", alias="DATA_DIR")
    quizzes_dir: str = Field(default="./data/quizzes", alias="QUIZZES_DIR")
    attempts_dir: str = Field(default="./data/attempts", alias="ATTEMPTS_DIR")
    question_bank_dir: str = Field(default="./data/question_bank", alias="QUESTION_BANK_DIR")
    logs_dir: str = Field(default="./logs", alias="LOGS_DIR")
    
    # Telemetry
    telemetry_enabled: bool = Field(default=True, alias="TELEMETRY_ENABLED")
    
    # Deadline enforcement
    deadline_sweep_enabled: bool = Field(default=True, alias="DEADLINE_SWEEP_ENABLED")
    deadline_sweep_interval_seconds: float = Field(
        default=30.0,
        alias="DEADLINE_SWEEP_INTERVAL_SECONDS",
        description="Seconds between background sweeps that finalize attempts past their quiz endTime"
    )
    
    # Enrollment
    enroll_cutoff_minutes: Optional[int] = Field(
        default=None,
        alias="ENROLL_CUTOFF_MINUTES",
        description="New attempts may only be created this many minutes after startTime. "
                    "Unset means enrollment stays open until endTime."
    )
    password_hash_iterations: int = Field(default=200_000, alias="PASSWORD_HASH_ITERATIONS")
    
    
    # CORS
    cors_origins: List[str] = Field(default=["http://localhost:5173"], alias="CORS_ORIGINS")
    
    # Validators
    @field_validator("deadline_sweep_interval_seconds")
    @classmethod
    def validate_sweep_interval(cls, v):
        if v <= 0:
            raise ValueError("deadline_sweep_interval_seconds must be positive")
        return v
    
    @field_validator("enroll_cutoff_minutes")
    @classmethod
    def validate_enroll_cutoff(cls, v):
        if v is not None and v < 0:
            raise ValueError("enroll_cutoff_minutes must not be negative")
        return v
    
    @field_validator("password_hash_iterations")
    @classmethod
    def validate_hash_iterations(cls, v):
        if v < 10_000:
            raise ValueError("password_hash_iterations must be at least 10000")
        return v
    
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        # Ensure directories exist
        for dir_path in [
            self.data_dir, self.quizzes_dir, self.attempts_dir,
            self.question_bank_dir, self.logs_dir
        ]:
            os.makedirs(dir_path, exist_ok=True)


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create singleton settings instance"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings():
    """Reload settings (useful for testing)"""
    global _settings
    _settings = None
    return get_settings()
