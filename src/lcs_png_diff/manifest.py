from __future__ import annotations

import os.path
from pathlib import Path

import orjson
from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from lcs_png_diff.conf import DEFAULT_RESULT_SUFFIX

RESULT_EXTENSION = ".png"


class ManifestError(ValueError):
    pass


class DiffPair(BaseModel):
    model_config = ConfigDict(frozen=True)

    before: str
    after: str
    result: str | None = None

    def result_path(self, suffix: str = DEFAULT_RESULT_SUFFIX) -> str:
        if self.result is not None:
            return self.result
        return add_suffix_to_file_name(self.before, suffix)


_pairs_adapter = TypeAdapter(list[DiffPair])


def add_suffix_to_file_name(file_name: str, suffix: str) -> str:
    # Always written as PNG, whatever the source extension was.
    name = f"{Path(file_name).stem}{suffix}{RESULT_EXTENSION}"
    return os.path.join(os.path.dirname(file_name), name)


def parse_manifest(data: bytes | str) -> list[DiffPair]:
    try:
        return _pairs_adapter.validate_python(orjson.loads(data))
    except (orjson.JSONDecodeError, ValidationError) as e:
        raise ManifestError(f"invalid batch manifest: {e}") from e


def load_manifest(path: str | Path) -> list[DiffPair]:
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise ManifestError(f"cannot read batch manifest {path}: {e}") from e
    return parse_manifest(data)
