from __future__ import annotations

from unittest.mock import patch

from PIL import Image

from lcs_png_diff.batch import generate_diff, run_batch
from lcs_png_diff.conf import DiffSettings
from lcs_png_diff.image_diff.rows import RowDecodeError
from lcs_png_diff.manifest import DiffPair

GRAY = (100, 100, 100, 255)
BANNER = (10, 20, 30, 255)


def _save_striped(path, width: int, colors: list[tuple[int, int, int, int]]) -> str:
    img = Image.new("RGBA", (width, len(colors)))
    for y, color in enumerate(colors):
        img.paste(color, (0, y, width, y + 1))
    img.save(path, "PNG")
    return str(path)


class TestGenerateDiff:
    def test_writes_result_next_to_before(self, tmp_path):
        before = _save_striped(tmp_path / "home.png", 4, [GRAY, GRAY])
        after = _save_striped(tmp_path / "home_after.png", 4, [GRAY, BANNER, GRAY])

        outcome = generate_diff(DiffPair(before=before, after=after), DiffSettings(max_workers=1))

        assert outcome.ok
        assert outcome.status == "changed"
        assert outcome.result == str(tmp_path / "home_result.png")
        assert outcome.added_rows == 1
        assert outcome.removed_rows == 0
        assert outcome.common_rows == 2
        with Image.open(outcome.result) as img:
            assert img.size == (4, 3)
            assert img.convert("RGBA").getpixel((0, 0)) == GRAY

    def test_creates_result_directory(self, tmp_path):
        before = _save_striped(tmp_path / "a.png", 2, [GRAY])
        result = tmp_path / "nested" / "deeper" / "out.png"

        outcome = generate_diff(
            DiffPair(before=before, after=before, result=str(result)),
            DiffSettings(max_workers=1),
        )

        assert outcome.status == "unchanged"
        assert result.exists()

    def test_missing_input_is_reported(self, tmp_path):
        before = _save_striped(tmp_path / "a.png", 2, [GRAY])

        outcome = generate_diff(
            DiffPair(before=before, after=str(tmp_path / "missing.png")),
            DiffSettings(max_workers=1),
        )

        assert not outcome.ok
        assert outcome.error_type == "FileNotFoundError"
        assert not (tmp_path / "a_result.png").exists()

    def test_decode_error_is_reported(self, tmp_path):
        before = _save_striped(tmp_path / "a.png", 2, [GRAY])
        with patch(
            "lcs_png_diff.image_diff.composite.decode_row",
            side_effect=RowDecodeError("malformed row token"),
        ):
            outcome = generate_diff(DiffPair(before=before, after=before), DiffSettings())

        assert outcome.status == "errored"
        assert outcome.error_type == "RowDecodeError"
        assert outcome.error == "malformed row token"


class TestRunBatch:
    def test_failures_do_not_stop_other_pairs(self, tmp_path):
        a = _save_striped(tmp_path / "a.png", 3, [GRAY, GRAY])
        b = _save_striped(tmp_path / "b.png", 3, [GRAY, BANNER])
        pairs = [
            DiffPair(before=a, after=b),
            DiffPair(before=str(tmp_path / "missing.png"), after=b),
            DiffPair(before=b, after=a, result=str(tmp_path / "out" / "ba.png")),
        ]

        outcomes = run_batch(pairs, DiffSettings(max_workers=2))

        assert [outcome.status for outcome in outcomes] == ["changed", "errored", "changed"]
        assert [outcome.before for outcome in outcomes] == [pair.before for pair in pairs]
        assert (tmp_path / "a_result.png").exists()
        assert (tmp_path / "out" / "ba.png").exists()

    def test_custom_suffix(self, tmp_path):
        a = _save_striped(tmp_path / "a.png", 3, [GRAY])
        outcomes = run_batch(
            [DiffPair(before=a, after=a)],
            DiffSettings(max_workers=1, result_suffix="_diff"),
        )
        assert outcomes[0].result == str(tmp_path / "a_diff.png")
        assert (tmp_path / "a_diff.png").exists()

    def test_empty_batch(self):
        assert run_batch([]) == []
