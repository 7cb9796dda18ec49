"""High-level API for BFAST bundles.

Wraps the core codec with file handling, reporter tasks and summaries.
"""

from __future__ import annotations

from concurrent.futures import Executor
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence

from .logging import get_logger
from .models import NamedBuffer
from .packing.inspector import inspect_bfast, read_container, validate_bfast
from .packing.planner import BfastPlan, compute_plan, to_plan_dict
from .packing.writer import pack
from .reporting import get_reporter, task
from .spec.loader import load_spec
from .spec.models import BundleSpec
from .spec.validator import run_validation_pipeline
from .utils.io import read_data_from_spec, safe_read_file
from .utils.paths import buffer_file_name, indexed_file_name, safe_file_path

__all__ = [
    "PackOptions",
    "PackResult",
    "UnpackOptions",
    "pack_files",
    "build_bundle",
    "unpack_to_directory",
    "inspect_file",
    "validate_file",
    "plan_sizes",
    "load_models",
]


@dataclass(slots=True)
class PackOptions:
    input_spec: Path
    output_path: Path
    # Optional executor for parallel buffer copies (e.g. ThreadPoolExecutor)
    executor: Executor | None = None


@dataclass(slots=True)
class PackResult:
    output_file: Path
    bytes_written: int
    buffers: int


@dataclass(slots=True)
class UnpackOptions:
    input_path: Path
    output_dir: Path
    force: bool = False


def load_models(path: str | Path) -> BundleSpec:
    return load_spec(path)


def _write_output(
    named: Sequence[NamedBuffer],
    output_path: Path,
    executor: Executor | None,
) -> int:
    rep = get_reporter()
    with task("pack.encode", "Encode buffers", buffers=len(named)):
        data = pack(named, executor=executor)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(data)
    rep.summary(
        "pack",
        file=output_path.name,
        bytes=len(data),
        buffers=len(named),
    )
    return len(data)


def pack_files(
    files: Sequence[str | Path],
    output_path: str | Path,
    *,
    executor: Executor | None = None,
) -> PackResult:
    """Pack files into a BFAST file, each named after its file name."""
    logger = get_logger()
    paths = [Path(f) for f in files]
    named: List[NamedBuffer] = []
    with task("pack.read", "Read input files", total=len(paths)) as t:
        for p in paths:
            named.append(NamedBuffer(p.name, safe_read_file(p)))
            t.advance("pack.read", current_item=p.name)
    out = Path(output_path)
    written = _write_output(named, out, executor)
    logger.info("Packed %d files into %s (%d bytes)", len(named), out, written)
    return PackResult(output_file=out, bytes_written=written, buffers=len(named))


def build_bundle(options: PackOptions) -> PackResult:
    logger = get_logger()
    spec_model = load_models(options.input_spec)
    spec_dict = spec_model.to_dict()
    val_errors = run_validation_pipeline(spec_dict)
    if val_errors:
        raise ValueError(
            "Spec validation failed: "
            + "; ".join(f"{e.code}:{e.path}:{e.message}" for e in val_errors)
        )
    base_dir = Path(options.input_spec).parent
    named: List[NamedBuffer] = []
    with task(
        "spec.read", "Resolve buffer data", total=len(spec_model.buffers)
    ) as t:
        for entry in spec_model.buffers:
            named.append(
                NamedBuffer(entry["name"], read_data_from_spec(entry, base_dir))
            )
            t.advance("spec.read", current_item=entry["name"])
    written = _write_output(named, options.output_path, options.executor)
    logger.info(
        "Built bundle: %s (%d bytes, buffers=%d)",
        options.output_path.name,
        written,
        len(named),
    )
    return PackResult(
        output_file=options.output_path,
        bytes_written=written,
        buffers=len(named),
    )


def unpack_to_directory(options: UnpackOptions) -> List[Path]:
    """Decode a BFAST file and write each buffer as a file under output_dir.

    Buffer names are used as relative paths and must stay inside output_dir.
    """
    logger = get_logger()
    rep = get_reporter()
    data = safe_read_file(Path(options.input_path))
    container = read_container(data)
    out_dir = Path(options.output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    written: List[Path] = []
    taken: set[Path] = set()
    with task("unpack.write", "Write buffers", total=len(container)) as t:
        for i, nb in enumerate(container):
            rel = buffer_file_name(i, nb.name)
            try:
                target = safe_file_path(out_dir, rel)
            except ValueError as e:
                raise ValueError(
                    f"Buffer name escapes output directory: {nb.name!r}"
                ) from e
            # Names need not be unique; later duplicates get the index appended.
            while target in taken:
                rel = indexed_file_name(i, rel)
                target = safe_file_path(out_dir, rel)
            if target.exists() and not options.force:
                raise FileExistsError(target)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(nb.tobytes())
            written.append(target)
            taken.add(target)
            t.advance("unpack.write", current_item=rel)
    logger.info("Unpacked %d buffers into %s", len(written), out_dir)
    rep.summary(
        "unpack",
        file=Path(options.input_path).name,
        buffers=len(written),
        bytes=sum(nb.size for nb in container),
    )
    return written


def inspect_file(path: str | Path) -> dict:
    info = inspect_bfast(safe_read_file(Path(path)))
    get_reporter().summary(
        "inspect",
        file=Path(path).name,
        size=info["file_size"],
        buffers=len(info["buffers"]),
        padding=info["padding"],
    )
    return info


def validate_file(path: str | Path) -> list[str]:
    return validate_bfast(safe_read_file(Path(path)))


def plan_sizes(sizes: Sequence[int]) -> tuple[BfastPlan, dict]:
    """Compute a plan for raw array sizes without encoding anything.

    Returns (BfastPlan, plan_dict) where plan_dict is JSON-serialisable.
    """
    plan = compute_plan(sizes)
    return plan, to_plan_dict(plan)
