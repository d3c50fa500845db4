"""
Application configuration using Pydantic settings.
"""
from typing import Optional

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Random Forest Hyperparameters
    model_num_trees: int = Field(
        default=15,
        description="Number of decision trees in the forest"
    )
    model_max_depth: int = Field(
        default=12,
        description="Maximum depth of each decision tree"
    )
    model_min_samples_split: int = Field(
        default=5,
        description="Minimum number of samples required to split a node"
    )
    model_warmup_on_startup: bool = Field(
        default=False,
        description="Train the model during application startup instead of on first request"
    )

    # Training Data
    samples_per_crop: int = Field(
        default=50,
        description="Number of synthetic samples generated per crop class"
    )
    train_test_split: float = Field(
        default=0.8,
        description="Fraction of the corpus used for training during evaluation"
    )
    random_seed: Optional[int] = Field(
        default=None,
        description="Seed for all stochastic sampling (unset = fresh entropy)"
    )

    # Prediction
    top_n_predictions: int = Field(
        default=3,
        description="Number of ranked crops returned by the API"
    )
    min_confidence: float = Field(
        default=0.3,
        description="Top confidence below which a prediction is flagged as uncertain"
    )

    # Advice Service Configuration
    advice_service_url: str = Field(
        default="",
        description="Base URL of the generative advice service (empty = disabled)"
    )
    advice_service_api_key: str = Field(
        default="",
        description="API key for the advice service"
    )
    advice_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for advice service calls"
    )

    # Retry Configuration
    max_retry_attempts: int = Field(
        default=3,
        description="Maximum number of retry attempts for advice service calls"
    )
    retry_backoff_multiplier: int = Field(
        default=1,
        description="Multiplier for exponential backoff"
    )
    retry_min_wait: int = Field(
        default=4,
        description="Minimum wait time in seconds between retries"
    )
    retry_max_wait: int = Field(
        default=10,
        description="Maximum wait time in seconds between retries"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins (use specific origins in production)"
    )

    # Rate Limiting
    rate_limit_requests: int = Field(
        default=100,
        description="Maximum requests per minute per client"
    )

    # Application Settings
    app_name: str = Field(
        default="Crop Advisor",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode"
    )

    @field_validator("model_num_trees", "model_max_depth")
    @classmethod
    def _at_least_one(cls, value: int, info) -> int:
        if value < 1:
            raise ValueError(f"{info.field_name} must be at least 1")
        return value

    @field_validator("train_test_split")
    @classmethod
    def _split_in_open_interval(cls, value: float) -> float:
        if not 0 < value < 1:
            raise ValueError("train_test_split must be between 0 and 1")
        return value

    class Config:
        env_file = ".env"
        case_sensitive = False
        protected_namespaces = ()


# Global settings instance
settings = Settings()
