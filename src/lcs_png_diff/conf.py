"""Settings for diff runs, loaded from ``LCS_PNG_DIFF_*`` environment variables."""

from __future__ import annotations

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from lcs_png_diff.image_diff.composite import RATE, HighlightStyle

DEFAULT_RESULT_SUFFIX = "_result"


def _default_workers() -> int:
    return os.cpu_count() or 1


class DiffSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LCS_PNG_DIFF_",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )

    max_workers: int = Field(default_factory=_default_workers, ge=1)
    result_suffix: str = DEFAULT_RESULT_SUFFIX
    blend_rate: float = Field(default=RATE, ge=0.0, le=1.0)

    @property
    def style(self) -> HighlightStyle:
        return HighlightStyle(rate=self.blend_rate)
