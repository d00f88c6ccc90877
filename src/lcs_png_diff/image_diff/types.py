from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class DiffResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    diff_png: str
    width: int
    aligned_height: int
    before_width: int
    before_height: int
    after_width: int
    after_height: int
    removed_rows: int
    added_rows: int
    common_rows: int

    @property
    def changed(self) -> bool:
        return self.removed_rows > 0 or self.added_rows > 0
