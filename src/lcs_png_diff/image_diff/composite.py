from __future__ import annotations

from collections.abc import Sequence
from typing import Annotated

from PIL import Image
from pydantic import BaseModel, ConfigDict, Field

from .lcs import DiffKind, DiffOp
from .rows import BYTES_PER_PIXEL, decode_row

Channel = Annotated[int, Field(ge=0, le=255)]
RGB = tuple[Channel, Channel, Channel]
RGBA = tuple[int, int, int, int]

BLACK: RGB = (0, 0, 0)
RED: RGB = (255, 119, 119)
GREEN: RGB = (99, 195, 99)
RATE = 0.25

TRANSPARENT: RGBA = (0, 0, 0, 0)


class HighlightStyle(BaseModel):
    model_config = ConfigDict(frozen=True)

    removed_color: RGB = RED
    added_color: RGB = GREEN
    common_color: RGB = BLACK
    rate: float = Field(default=RATE, ge=0.0, le=1.0)

    def tint_for(self, kind: DiffKind) -> tuple[RGB, float]:
        if kind is DiffKind.ADDED:
            return self.added_color, self.rate
        if kind is DiffKind.REMOVED:
            return self.removed_color, self.rate
        return self.common_color, 0.0


DEFAULT_STYLE = HighlightStyle()


def blend(pixel: RGBA, rgb: RGB, rate: float) -> RGBA:
    return (
        int(pixel[0] * (1.0 - rate) + rgb[0] * rate),
        int(pixel[1] * (1.0 - rate) + rgb[1] * rate),
        int(pixel[2] * (1.0 - rate) + rgb[2] * rate),
        pixel[3],
    )


def _blend_lut(rgb: RGB, rate: float) -> list[int]:
    # Image.point takes 256 entries per band, in band order; alpha is identity.
    lut: list[int] = []
    for channel in rgb:
        lut.extend(int(v * (1.0 - rate) + channel * rate) for v in range(256))
    lut.extend(range(256))
    return lut


def _render_row(row: bytes, width: int, lut: list[int] | None) -> Image.Image:
    row_width = min(len(row) // BYTES_PER_PIXEL, width)
    line = Image.new("RGBA", (width, 1), TRANSPARENT)
    if row_width:
        data = row[: row_width * BYTES_PER_PIXEL]
        with Image.frombytes("RGBA", (row_width, 1), data) as pixels:
            line.paste(pixels, (0, 0))
    if lut is None:
        return line
    tinted = line.point(lut)
    line.close()
    return tinted


def composite(
    ops: Sequence[DiffOp],
    before_rows: Sequence[str],
    after_rows: Sequence[str],
    before_width: int,
    after_width: int,
    style: HighlightStyle = DEFAULT_STYLE,
) -> Image.Image:
    """Render one output row per edit operation.

    Rows narrower than the output are padded with transparent pixels, and the
    padding is tinted along with the rest of the row. Raises ``RowDecodeError``
    when a referenced row token is malformed.
    """
    width = max(before_width, after_width)
    out = Image.new("RGBA", (width, len(ops)), TRANSPARENT)
    if width == 0:
        return out

    luts: dict[DiffKind, list[int] | None] = {}
    for kind in DiffKind:
        rgb, rate = style.tint_for(kind)
        luts[kind] = _blend_lut(rgb, rate) if rate else None

    for y, op in enumerate(ops):
        if op.kind is DiffKind.ADDED:
            token = after_rows[op.after_index]  # type: ignore[index]
        else:
            token = before_rows[op.before_index]  # type: ignore[index]
        line = _render_row(decode_row(token), width, luts[op.kind])
        out.paste(line, (0, y))
        line.close()
    return out
