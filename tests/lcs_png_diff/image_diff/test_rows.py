from __future__ import annotations

import pytest
from PIL import Image

from lcs_png_diff.image_diff.rows import (
    RowDecodeError,
    decode_row,
    encode_row,
    extract_rows,
    image_rows,
)


class TestRowCodec:
    def test_equal_bytes_give_equal_tokens(self):
        assert encode_row(b"\x00\x01\x02\x03") == encode_row(bytes([0, 1, 2, 3]))
        assert encode_row(b"\x00\x01\x02\x03") != encode_row(b"\x00\x01\x02\x04")

    def test_decode_inverts_encode(self):
        chunk = bytes(range(16))
        assert decode_row(encode_row(chunk)) == chunk

    @pytest.mark.parametrize("token", ["not base64!", "abc", "@@@@"])
    def test_malformed_token(self, token):
        with pytest.raises(RowDecodeError):
            decode_row(token)

    def test_decode_error_is_value_error(self):
        assert issubclass(RowDecodeError, ValueError)


class TestExtractRows:
    def test_splits_on_stride(self):
        rows = extract_rows(b"aaaabbbbcccc", 4)
        assert [decode_row(row) for row in rows] == [b"aaaa", b"bbbb", b"cccc"]

    def test_trailing_partial_row_is_kept(self):
        rows = extract_rows(b"aaaabbbbcc", 4)
        assert len(rows) == 3
        assert decode_row(rows[-1]) == b"cc"

    def test_empty_buffer(self):
        assert extract_rows(b"", 8) == []

    def test_invalid_stride(self):
        with pytest.raises(ValueError):
            extract_rows(b"abcd", 0)


class TestImageRows:
    def test_one_token_per_scanline(self):
        img = Image.new("RGBA", (3, 5), (1, 2, 3, 4))
        rows = image_rows(img)
        assert len(rows) == 5
        assert decode_row(rows[0]) == bytes([1, 2, 3, 4]) * 3

    def test_rgb_image_uses_rgba_stride(self):
        img = Image.new("RGB", (2, 2), (9, 8, 7))
        rows = image_rows(img)
        assert len(rows) == 2
        assert decode_row(rows[1]) == bytes([9, 8, 7, 255]) * 2

    def test_different_widths_never_match(self):
        narrow = image_rows(Image.new("RGBA", (2, 1), (0, 0, 0, 255)))
        wide = image_rows(Image.new("RGBA", (3, 1), (0, 0, 0, 255)))
        assert narrow[0] != wide[0]
