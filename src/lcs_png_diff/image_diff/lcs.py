"""Row alignment using a longest common subsequence table.

Rows are compared as opaque tokens. The common prefix and suffix of the two
sequences are trimmed first, so the quadratic table only covers the region
that actually changed.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Sequence
from typing import NamedTuple, TypeVar

T = TypeVar("T")


class DiffKind(enum.Enum):
    REMOVED = "removed"
    COMMON = "common"
    ADDED = "added"


class DiffOp(NamedTuple):
    kind: DiffKind
    before_index: int | None
    after_index: int | None

    @classmethod
    def removed(cls, before_index: int) -> DiffOp:
        return cls(DiffKind.REMOVED, before_index, None)

    @classmethod
    def common(cls, before_index: int, after_index: int) -> DiffOp:
        return cls(DiffKind.COMMON, before_index, after_index)

    @classmethod
    def added(cls, after_index: int) -> DiffOp:
        return cls(DiffKind.ADDED, None, after_index)


class Trim(NamedTuple):
    prefix: int
    suffix: int


class DiffStats(NamedTuple):
    removed: int
    common: int
    added: int


def trim_common(before: Sequence[T], after: Sequence[T]) -> Trim:
    prefix = 0
    limit = min(len(before), len(after))
    while prefix < limit and before[prefix] == after[prefix]:
        prefix += 1

    # Bounded by what the prefix left over so identical inputs are not counted twice.
    suffix = 0
    limit -= prefix
    while suffix < limit and before[-1 - suffix] == after[-1 - suffix]:
        suffix += 1
    return Trim(prefix, suffix)


def create_table(before: Sequence[T], after: Sequence[T]) -> list[list[int]]:
    """Build the LCS length table for ``after`` (rows) against ``before`` (columns).

    ``table[i][j]`` is the length of the longest common subsequence of
    ``after[i:]`` and ``before[j:]``; the last row and column are all zero.
    """
    after_len = len(after)
    before_len = len(before)
    table = [[0] * (before_len + 1) for _ in range(after_len + 1)]
    for i in range(after_len - 1, -1, -1):
        row = table[i]
        below = table[i + 1]
        item = after[i]
        for j in range(before_len - 1, -1, -1):
            if item == before[j]:
                row[j] = below[j + 1] + 1
            else:
                row[j] = max(below[j], row[j + 1])
    return table


def _align(
    before: Sequence[T],
    after: Sequence[T],
    offset: int,
) -> list[DiffOp]:
    before_len = len(before)
    after_len = len(after)
    if after_len == 0:
        return [DiffOp.removed(offset + o) for o in range(before_len)]
    if before_len == 0:
        return [DiffOp.added(offset + n) for n in range(after_len)]

    table = create_table(before, after)
    ops: list[DiffOp] = []
    n = 0
    o = 0
    while n < after_len and o < before_len:
        if after[n] == before[o]:
            ops.append(DiffOp.common(offset + o, offset + n))
            n += 1
            o += 1
        # Ties go to Added; downstream output ordering depends on it.
        elif table[n + 1][o] >= table[n][o + 1]:
            ops.append(DiffOp.added(offset + n))
            n += 1
        else:
            ops.append(DiffOp.removed(offset + o))
            o += 1

    ops.extend(DiffOp.added(offset + i) for i in range(n, after_len))
    ops.extend(DiffOp.removed(offset + i) for i in range(o, before_len))
    return ops


def lcs_diff(before: Sequence[T], after: Sequence[T], *, trim: bool = True) -> list[DiffOp]:
    """Return the ordered row edit script turning ``before`` into ``after``.

    Indices in the returned operations always refer to the untrimmed inputs.
    """
    if not trim or not before or not after:
        return _align(before, after, 0)

    prefix, suffix = trim_common(before, after)
    before_end = len(before) - suffix
    after_end = len(after) - suffix

    ops = [DiffOp.common(i, i) for i in range(prefix)]
    ops.extend(_align(before[prefix:before_end], after[prefix:after_end], prefix))
    ops.extend(DiffOp.common(before_end + i, after_end + i) for i in range(suffix))
    return ops


def count_ops(ops: Iterable[DiffOp]) -> DiffStats:
    counts = dict.fromkeys(DiffKind, 0)
    for op in ops:
        counts[op.kind] += 1
    return DiffStats(counts[DiffKind.REMOVED], counts[DiffKind.COMMON], counts[DiffKind.ADDED])
