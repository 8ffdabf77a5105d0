"""Pydantic models for richlinks configuration."""

from __future__ import annotations

from pydantic import BaseModel, Field

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; richlinks/1.0; +https://github.com/richlinks/richlinks)"


class FetchConfig(BaseModel):
    """Metadata fetch configuration."""

    timeout_seconds: float = Field(default=10.0, gt=0)
    user_agent: str = DEFAULT_USER_AGENT
    follow_redirects: bool = True
    max_bytes: int = Field(default=2_000_000, gt=0)


class ImageConfig(BaseModel):
    """Thumbnail loading configuration."""

    timeout_seconds: float = Field(default=10.0, gt=0)
    max_bytes: int = Field(default=5_000_000, gt=0)
    frame_width: int = Field(default=16, gt=0)
    frame_height: int = Field(default=8, gt=0)


class DisplayConfig(BaseModel):
    """Card rendering configuration."""

    spinner: str = "dots"
    refresh_per_second: int = Field(default=12, gt=0)
    untitled_text: str = "Untitled"
    card_width: int = Field(default=72, gt=20)


class RichlinksConfig(BaseModel):
    """Top-level richlinks configuration."""

    fetch: FetchConfig = FetchConfig()
    image: ImageConfig = ImageConfig()
    display: DisplayConfig = DisplayConfig()
