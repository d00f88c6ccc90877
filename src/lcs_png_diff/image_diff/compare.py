from __future__ import annotations

import base64
import io
import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

from PIL import Image

from .composite import DEFAULT_STYLE, HighlightStyle, composite
from .lcs import DiffOp, count_ops, lcs_diff
from .rows import image_rows
from .types import DiffResult

logger = logging.getLogger(__name__)

ImageSource = bytes | Image.Image


def _as_image(source: ImageSource) -> Image.Image:
    if isinstance(source, bytes):
        img = Image.open(io.BytesIO(source))
        try:
            img.load()
        except Exception:
            img.close()
            raise
        return img
    return source


def _encode_png_base64(image: Image.Image) -> str:
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return base64.b64encode(buf.getvalue()).decode("ascii")


def diff_images(
    before: Image.Image,
    after: Image.Image,
    style: HighlightStyle = DEFAULT_STYLE,
) -> tuple[Image.Image, list[DiffOp]]:
    before_rows = image_rows(before)
    after_rows = image_rows(after)
    ops = lcs_diff(before_rows, after_rows)
    logger.debug(
        "Aligned %d before rows with %d after rows",
        len(before_rows),
        len(after_rows),
        extra={"ops": len(ops)},
    )
    image = composite(ops, before_rows, after_rows, before.width, after.width, style)
    return image, ops


def diff(
    before: Image.Image,
    after: Image.Image,
    style: HighlightStyle = DEFAULT_STYLE,
) -> Image.Image:
    """Render the row level diff of two images.

    Unchanged rows are copied as-is, rows only present in ``after`` are tinted
    with ``style.added_color`` and rows only present in ``before`` with
    ``style.removed_color``. Raises ``RowDecodeError`` if a row cannot be
    rendered.
    """
    image, _ = diff_images(before, after, style)
    return image


def compare_images(
    before: ImageSource,
    after: ImageSource,
    style: HighlightStyle = DEFAULT_STYLE,
) -> DiffResult | None:
    return _compare_single_pair(0, before, after, style)


def compare_images_batch(
    pairs: Sequence[tuple[ImageSource, ImageSource]],
    max_workers: int | None = None,
    style: HighlightStyle = DEFAULT_STYLE,
) -> list[DiffResult | None]:
    if not pairs:
        return []
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [
            executor.submit(_compare_single_pair, idx, before, after, style)
            for idx, (before, after) in enumerate(pairs)
        ]
        return [future.result() for future in futures]


def _compare_single_pair(
    idx: int,
    before: ImageSource,
    after: ImageSource,
    style: HighlightStyle,
) -> DiffResult | None:
    before_img: Image.Image | None = None
    after_img: Image.Image | None = None
    diff_img: Image.Image | None = None
    try:
        before_img = _as_image(before)
        after_img = _as_image(after)
        bw, bh = before_img.size
        aw, ah = after_img.size

        diff_img, ops = diff_images(before_img, after_img, style)
        stats = count_ops(ops)

        return DiffResult(
            diff_png=_encode_png_base64(diff_img),
            width=diff_img.width,
            aligned_height=diff_img.height,
            before_width=bw,
            before_height=bh,
            after_width=aw,
            after_height=ah,
            removed_rows=stats.removed,
            added_rows=stats.added,
            common_rows=stats.common,
        )
    except Exception:
        logger.exception("Failed to compare image pair %d", idx)
        return None
    finally:
        if before_img is not None and isinstance(before, bytes):
            before_img.close()
        if after_img is not None and isinstance(after, bytes):
            after_img.close()
        if diff_img is not None:
            diff_img.close()
