"""Error definitions for BFAST encoding and decoding."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional

E_MAGIC = "E_MAGIC"
E_TRUNCATED = "E_TRUNCATED"
E_DATA_START = "E_DATA_START"
E_DATA_END = "E_DATA_END"
E_NUM_ARRAYS = "E_NUM_ARRAYS"
E_ALIGNMENT = "E_ALIGNMENT"
E_RANGE_BOUNDS = "E_RANGE_BOUNDS"
E_RANGE_OVERLAP = "E_RANGE_OVERLAP"
E_NAME_COUNT = "E_NAME_COUNT"
E_NAME_ENCODING = "E_NAME_ENCODING"
E_NAME_NUL = "E_NAME_NUL"
E_SIZE_NEGATIVE = "E_SIZE_NEGATIVE"
E_WRITE_IO = "E_WRITE_IO"
E_INTERNAL = "E_INTERNAL"


@dataclass
class BfastError(Exception):
    code: str
    message: str
    context: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}" + (
            f" | ctx={self.context}" if self.context else ""
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": type(self).__name__,
            "code": self.code,
            "message": self.message,
            "context": self.context or {},
        }


class ValidationError(BfastError):
    """Any failure while decoding a byte stream."""


class FormatError(ValidationError):
    pass


class SizeError(ValidationError):
    pass


class RangeError(ValidationError):
    pass


class NameCountMismatch(ValidationError):
    pass


class AlignmentError(ValidationError):
    pass


def internal_error(
    message: str, context: Optional[Dict[str, Any]] = None
) -> BfastError:
    return BfastError(code=E_INTERNAL, message=message, context=context)


__all__ = [
    "BfastError",
    "ValidationError",
    "FormatError",
    "SizeError",
    "RangeError",
    "NameCountMismatch",
    "AlignmentError",
    "internal_error",
    "E_MAGIC",
    "E_TRUNCATED",
    "E_DATA_START",
    "E_DATA_END",
    "E_NUM_ARRAYS",
    "E_ALIGNMENT",
    "E_RANGE_BOUNDS",
    "E_RANGE_OVERLAP",
    "E_NAME_COUNT",
    "E_NAME_ENCODING",
    "E_NAME_NUL",
    "E_SIZE_NEGATIVE",
    "E_WRITE_IO",
    "E_INTERNAL",
]
