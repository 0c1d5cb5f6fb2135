"""Configuration: mix weights, thresholds, timeouts, model parameters."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

WeightingStrategy = Literal["smart", "keyword", "static"]


class MixWeights(BaseModel):
    """How much each signal source contributes to a raw aspect weight."""

    intent: float = Field(default=0.6, ge=0.0, le=1.0)
    pattern: float = Field(default=0.3, ge=0.0, le=1.0)
    context: float = Field(default=0.1, ge=0.0, le=1.0)


class Settings(BaseSettings):
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    anthropic_fast_model: str = "claude-3-haiku-20240307"

    weighting_strategy: WeightingStrategy = "smart"
    mix_weights: MixWeights = MixWeights()
    classifier_timeout_seconds: float = Field(default=5.0, gt=0.0)

    aspect_epsilon: float = 0.01
    default_threshold: float = 0.01
    default_limit: int = 10
    batch_size: int = Field(default=50, ge=1)

    cache_enabled: bool = True
    cache_ttl_seconds: float = 300.0
    cache_max_entries: int = 100

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
