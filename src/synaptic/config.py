"""Configuration management using Pydantic Settings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Layout engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SYNAPTIC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Seeding
    seed_margin: float = Field(
        default=50.0,
        description="Distance from the viewport edge inside which seeded nodes are placed",
    )
    serendipity: float = Field(
        default=0.10,
        ge=0.0,
        le=1.0,
        description="Probability of a random hypothesis edge between untagged pairs",
    )

    # Force model
    repulsion: float = 2000.0  # k_rep
    confirmed_strength: float = 0.05
    hypothesis_strength: float = 0.01
    center_gravity: float = 0.005
    damping: float = Field(default=0.9, gt=0.0, le=1.0)
    min_distance: float = Field(
        default=1.0,
        gt=0.0,
        description="Distance floor for repulsion, avoids the 1/d² singularity",
    )
    boundary_margin: float = Field(
        default=20.0,
        description="Velocity is reflected once a node crosses this distance from an edge",
    )

    # Frame clock
    fps: float = Field(default=60.0, gt=0.0)

    # Rendering
    excerpt_length: int = Field(
        default=30,
        description="Characters of note content shown as a node label",
    )


def get_dev_settings() -> Settings:
    """Get development environment settings."""
    return Settings()


def get_test_settings() -> Settings:
    """Get test environment settings.

    Hypothesis edges only come from shared tags, so tests see a stable edge set.
    """
    return Settings(serendipity=0.0)


# Global settings instance
settings = Settings()
