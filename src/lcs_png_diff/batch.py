from __future__ import annotations

import logging
import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Literal

from PIL import Image
from pydantic import BaseModel

from lcs_png_diff.conf import DiffSettings
from lcs_png_diff.image_diff.compare import diff_images
from lcs_png_diff.image_diff.lcs import count_ops
from lcs_png_diff.manifest import DiffPair

logger = logging.getLogger(__name__)


class PairOutcome(BaseModel):
    status: Literal["changed", "unchanged", "errored"]
    before: str
    after: str
    result: str
    elapsed: float
    removed_rows: int | None = None
    added_rows: int | None = None
    common_rows: int | None = None
    error_type: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status != "errored"


def save_png(image: Image.Image, filename: str) -> None:
    path = Path(filename)
    path.parent.mkdir(parents=True, exist_ok=True)
    image.save(path, "PNG")


def generate_diff(pair: DiffPair, settings: DiffSettings) -> PairOutcome:
    start = time.monotonic()
    result_filename = pair.result_path(settings.result_suffix)
    try:
        with Image.open(pair.before) as before, Image.open(pair.after) as after:
            diff_img, ops = diff_images(before, after, settings.style)
        try:
            save_png(diff_img, result_filename)
        finally:
            diff_img.close()
    except Exception as e:
        elapsed = time.monotonic() - start
        logger.exception(
            "Failed to generate diff for %s",
            result_filename,
            extra={"before": pair.before, "after": pair.after},
        )
        return PairOutcome(
            status="errored",
            before=pair.before,
            after=pair.after,
            result=result_filename,
            elapsed=elapsed,
            error_type=type(e).__name__,
            error=str(e),
        )

    elapsed = time.monotonic() - start
    stats = count_ops(ops)
    logger.info(
        "%s: %.3fs",
        result_filename,
        elapsed,
        extra={
            "before": pair.before,
            "after": pair.after,
            "removed_rows": stats.removed,
            "added_rows": stats.added,
            "common_rows": stats.common,
        },
    )
    return PairOutcome(
        status="changed" if stats.removed or stats.added else "unchanged",
        before=pair.before,
        after=pair.after,
        result=result_filename,
        elapsed=elapsed,
        removed_rows=stats.removed,
        added_rows=stats.added,
        common_rows=stats.common,
    )


def run_batch(pairs: Sequence[DiffPair], settings: DiffSettings | None = None) -> list[PairOutcome]:
    """Diff every pair on a fixed-size thread pool and wait for all of them.

    Outcomes are returned in input order. A failing pair is reported in its
    own outcome and never stops the others.
    """
    if settings is None:
        settings = DiffSettings()
    if not pairs:
        return []

    logger.info(
        "Starting batch diff of %d pairs",
        len(pairs),
        extra={"max_workers": settings.max_workers},
    )
    with ThreadPoolExecutor(max_workers=settings.max_workers) as executor:
        futures = [executor.submit(generate_diff, pair, settings) for pair in pairs]
        outcomes = [future.result() for future in futures]

    errored = sum(1 for outcome in outcomes if not outcome.ok)
    logger.info(
        "Batch diff complete",
        extra={"total": len(outcomes), "errored": errored},
    )
    return outcomes
