"""Incremental construction of BFAST streams, including nested containers."""

from __future__ import annotations
from concurrent.futures import Executor
from typing import BinaryIO, Iterable, List, Optional, Tuple, Union

from ..models import Buffer, NamedBuffer
from .names import pack_names
from .planner import BfastPlan, compute_plan
from .writer import pack, write_stream

__all__ = ["BfastBuilder"]

Child = Union[Buffer, str, "BfastBuilder"]


class BfastBuilder:
    """Collects named children; a child is a buffer or another builder.

    A nested builder is stored as one buffer holding its complete encoded
    stream. Nothing derived is cached: sizes and offsets are recomputed from
    the current children on every call.
    """

    def __init__(self) -> None:
        self._children: List[Tuple[str, Child]] = []

    def add(self, name: str, child: Child) -> "BfastBuilder":
        """Append a child; ``str`` children are stored UTF-8 encoded."""
        if isinstance(child, str):
            child = child.encode("utf-8")
        self._children.append((name, child))
        return self

    def add_all(self, named_buffers: Iterable[NamedBuffer]) -> "BfastBuilder":
        for nb in named_buffers:
            self.add(nb.name, nb.data)
        return self

    @property
    def names(self) -> List[str]:
        return [name for name, _ in self._children]

    def child_sizes(self) -> List[int]:
        return [
            c.size() if isinstance(c, BfastBuilder) else memoryview(c).nbytes
            for _, c in self._children
        ]

    def plan(self) -> BfastPlan:
        sizes = [len(pack_names(self.names))] + self.child_sizes()
        return compute_plan(sizes)

    def size(self) -> int:
        return self.plan().data_end

    def freeze(self) -> Tuple[NamedBuffer, ...]:
        return tuple(
            NamedBuffer(
                name,
                c.to_bytes() if isinstance(c, BfastBuilder) else bytes(c),
            )
            for name, c in self._children
        )

    def to_bytes(self, *, executor: Optional[Executor] = None) -> bytes:
        return pack(self.freeze(), executor=executor)

    def write(self, stream: BinaryIO) -> int:
        return write_stream(self.freeze(), stream)

    def __len__(self) -> int:
        return len(self._children)

    def __repr__(self) -> str:
        return f"BfastBuilder(children={len(self._children)})"
