from __future__ import annotations

import base64
import binascii

from PIL import Image

BYTES_PER_PIXEL = 4


class RowDecodeError(ValueError):
    """A row token could not be turned back into pixel bytes."""


def encode_row(chunk: bytes) -> str:
    return base64.b64encode(chunk).decode("ascii")


def decode_row(token: str) -> bytes:
    try:
        return base64.b64decode(token, validate=True)
    except (binascii.Error, ValueError) as e:
        raise RowDecodeError(f"malformed row token: {e}") from e


def extract_rows(buffer: bytes, stride: int) -> list[str]:
    """Split a raw pixel buffer into one token per scanline.

    A trailing chunk shorter than ``stride`` is kept as its own row.
    """
    if stride <= 0:
        raise ValueError(f"row stride must be positive, got {stride}")
    return [encode_row(buffer[offset : offset + stride]) for offset in range(0, len(buffer), stride)]


def image_rows(image: Image.Image) -> list[str]:
    if image.width == 0:
        return [encode_row(b"")] * image.height
    if image.mode != "RGBA":
        rgba = image.convert("RGBA")
        try:
            return extract_rows(rgba.tobytes(), rgba.width * BYTES_PER_PIXEL)
        finally:
            rgba.close()
    return extract_rows(image.tobytes(), image.width * BYTES_PER_PIXEL)
