"""Layout planning: offsets and padding for a list of buffers.

The plan is computed once, sequentially, from the ordered buffer sizes and is
the single source of truth for every offset the writer emits.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from ..logging import get_logger
from ..models import Buffer, NamedBuffer, Range, byte_view
from .constants import ALIGNMENT, HEADER_SIZE, RANGE_SIZE
from .layout import (
    align,
    compute_data_start,
    compute_offsets,
)
from .names import pack_names


@dataclass(frozen=True, slots=True)
class PaddingStats:
    total: int
    by_section: Dict[str, int]


@dataclass(frozen=True, slots=True)
class BfastPlan:
    ranges: Tuple[Range, ...]
    data_start: int
    data_end: int
    needed_size: int
    padding: PaddingStats
    alignment: int = ALIGNMENT

    @property
    def num_arrays(self) -> int:
        return len(self.ranges)

    @property
    def file_size(self) -> int:
        return self.data_end

    @property
    def data_bytes(self) -> int:
        return sum(r.size for r in self.ranges)


def compute_plan(sizes: Sequence[int]) -> BfastPlan:
    logger = get_logger()
    ranges = compute_offsets(sizes)
    data_start = compute_data_start(len(sizes))
    needed_size = ranges[-1].end if ranges else data_start
    data_end = align(needed_size)
    padding: Dict[str, int] = {}

    preamble_pad = data_start - (HEADER_SIZE + RANGE_SIZE * len(sizes))
    if preamble_pad:
        padding["preamble"] = preamble_pad
    # Padding after buffer i runs up to the next buffer (or to data_end).
    next_begins = [r.begin for r in ranges[1:]] + [data_end]
    for i, (r, nxt) in enumerate(zip(ranges, next_begins)):
        if nxt > r.end:
            padding[f"buffer[{i}]"] = nxt - r.end
    logger.debug(
        "plan: arrays=%d data_start=%d data_end=%d padding=%d",
        len(ranges),
        data_start,
        data_end,
        sum(padding.values()),
    )
    return BfastPlan(
        ranges=tuple(ranges),
        data_start=data_start,
        data_end=data_end,
        needed_size=needed_size,
        padding=PaddingStats(total=sum(padding.values()), by_section=padding),
    )


def full_buffer_list(named_buffers: Iterable[NamedBuffer]) -> List[Buffer]:
    """``[name buffer] + data buffers`` in input order."""
    items = list(named_buffers)
    return [pack_names(nb.name for nb in items)] + [
        byte_view(nb.data) for nb in items
    ]


def plan_for_buffers(named_buffers: Iterable[NamedBuffer]) -> BfastPlan:
    return compute_plan([len(b) for b in full_buffer_list(named_buffers)])


def to_plan_dict(plan: BfastPlan) -> Dict[str, Any]:
    return {
        "alignment": plan.alignment,
        "num_arrays": plan.num_arrays,
        "data_start": plan.data_start,
        "data_end": plan.data_end,
        "needed_size": plan.needed_size,
        "file_size": plan.file_size,
        "ranges": [
            {"index": i, "begin": r.begin, "end": r.end, "size": r.size}
            for i, r in enumerate(plan.ranges)
        ],
        "padding": {
            "total": plan.padding.total,
            "by_section": dict(plan.padding.by_section),
        },
        "statistics": {
            "data_bytes": plan.data_bytes,
            "empty_buffers": sum(1 for r in plan.ranges if r.size == 0),
        },
    }


__all__ = [
    "BfastPlan",
    "PaddingStats",
    "compute_plan",
    "full_buffer_list",
    "plan_for_buffers",
    "to_plan_dict",
]
