"""Binary writer emitting a BFAST stream from a plan.

The writer performs no layout math of its own: it consumes the immutable
:class:`BfastPlan` produced by the planner. Any divergence between emitted
byte positions and the plan raises an error, so the plan stays the single
source of truth for offsets.
"""

from __future__ import annotations
from concurrent.futures import Executor
from typing import BinaryIO, Iterable, Optional, Sequence

from ..logging import get_logger
from ..models import Buffer, NamedBuffer, Range, byte_view
from .errors import BfastError, internal_error, E_WRITE_IO
from .packers import make_header, pack_preamble
from .planner import BfastPlan, compute_plan, full_buffer_list

__all__ = ["pack", "copy_buffers", "write_stream", "encode_buffers"]


def copy_buffers(
    dest: bytearray,
    ranges: Sequence[Range],
    buffers: Sequence[Buffer],
    *,
    executor: Optional[Executor] = None,
) -> None:
    """Copy ``buffers[i]`` into ``dest[ranges[i].begin:ranges[i].end]``.

    Precondition: the ranges are pairwise disjoint. Each copy then touches a
    window no other copy touches, so the copies may run in any order and on
    any thread; ``executor.map`` is used when an executor is given.
    """
    if len(ranges) != len(buffers):
        raise internal_error(
            "Range/buffer count mismatch",
            {"ranges": len(ranges), "buffers": len(buffers)},
        )
    view = memoryview(dest)

    def _copy(index: int) -> int:
        r = ranges[index]
        src = byte_view(buffers[index])
        if len(src) != r.size:
            raise internal_error(
                f"Buffer {index} size changed after planning",
                {"index": index, "planned": r.size, "actual": len(src)},
            )
        view[r.begin : r.end] = src
        return r.size

    mapper = executor.map if executor is not None else map
    # Consume the iterator so worker exceptions propagate here.
    for _ in mapper(_copy, range(len(ranges))):
        pass


def encode_buffers(
    buffers: Sequence[Buffer],
    *,
    plan: Optional[BfastPlan] = None,
    executor: Optional[Executor] = None,
) -> bytearray:
    """Encode a full buffer list (name buffer first) into a new bytearray."""
    logger = get_logger()
    buffers = [byte_view(b) for b in buffers]
    if plan is None:
        plan = compute_plan([len(b) for b in buffers])
    header = make_header(plan.ranges, plan.data_end)
    # Zero-initialised, so every padding byte is zero.
    out = bytearray(plan.data_end)
    preamble = pack_preamble(header, plan.ranges)
    out[: len(preamble)] = preamble
    copy_buffers(out, plan.ranges, buffers, executor=executor)
    logger.debug(
        "encoded %d arrays into %d bytes (padding=%d)",
        header.num_arrays,
        len(out),
        plan.padding.total,
    )
    return out


def pack(
    named_buffers: Iterable[NamedBuffer],
    *,
    executor: Optional[Executor] = None,
) -> bytes:
    """Encode named buffers into a single BFAST byte stream."""
    buffers = full_buffer_list(named_buffers)
    return bytes(encode_buffers(buffers, executor=executor))


def _pad_to(f: BinaryIO, written: int, target_offset: int) -> int:
    """Write zero padding until ``written`` reaches ``target_offset``."""
    if written > target_offset:
        raise internal_error(
            f"Writer position {written} surpassed planned offset {target_offset}",
            {"position": written, "target": target_offset},
        )
    if written < target_offset:
        f.write(b"\x00" * (target_offset - written))
    return target_offset


def write_stream(named_buffers: Iterable[NamedBuffer], stream: BinaryIO) -> int:
    """Stream the encoded form to ``stream`` without building it in memory.

    Returns the number of bytes written, which equals ``plan.data_end``.
    """
    logger = get_logger()
    buffers = full_buffer_list(named_buffers)
    plan = compute_plan([len(b) for b in buffers])
    header = make_header(plan.ranges, plan.data_end)
    try:
        preamble = pack_preamble(header, plan.ranges)
        stream.write(preamble)
        written = len(preamble)
        for i, (r, buf) in enumerate(zip(plan.ranges, buffers)):
            written = _pad_to(stream, written, r.begin)
            stream.write(buf)
            written += byte_view(buf).nbytes
            if written != r.end:
                raise internal_error(
                    f"Buffer {i} ended at {written}, plan expects {r.end}",
                    {"index": i, "written": written, "planned": r.end},
                )
        written = _pad_to(stream, written, plan.data_end)
    except OSError as e:
        raise BfastError(
            E_WRITE_IO,
            f"Stream write failed: {e}",
            {"planned": plan.data_end},
        ) from e
    logger.debug("streamed %d arrays, %d bytes", len(buffers), written)
    return written
