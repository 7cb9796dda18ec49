"""Command line interface for BFAST."""

from __future__ import annotations

import argparse
import json
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from .logging import configure_logging, section, step
from .packing.errors import ValidationError
from .reporting import (
    set_reporter,
    get_reporter,
    PlainReporter,
    JsonLinesReporter,
    SilentReporter,
    RichReporter,
    set_verbosity,
)
from .api import (
    PackOptions,
    UnpackOptions,
    build_bundle,
    inspect_file,
    pack_files,
    plan_sizes,
    unpack_to_directory,
    validate_file,
)


def _executor(args: argparse.Namespace) -> ThreadPoolExecutor | None:
    jobs = getattr(args, "jobs", 0)
    return ThreadPoolExecutor(max_workers=jobs) if jobs and jobs > 1 else None


def _pack_cmd(args: argparse.Namespace) -> int:
    step(f"packing {len(args.files)} files")
    executor = _executor(args)
    try:
        pack_files(args.files, args.output, executor=executor)
    finally:
        if executor is not None:
            executor.shutdown()
    return 0


def _build_cmd(args: argparse.Namespace) -> int:
    executor = _executor(args)
    try:
        build_bundle(
            PackOptions(
                input_spec=args.spec,
                output_path=args.output,
                executor=executor,
            )
        )
    finally:
        if executor is not None:
            executor.shutdown()
    return 0


def _unpack_cmd(args: argparse.Namespace) -> int:
    unpack_to_directory(
        UnpackOptions(
            input_path=args.input,
            output_dir=args.directory,
            force=args.force,
        )
    )
    return 0


def _inspect_cmd(args: argparse.Namespace) -> int:
    info = inspect_file(args.input)
    # Ensure any active progress UI is finalized before emitting output
    rep = get_reporter()
    rep.flush()
    if args.json:
        print(json.dumps(info, indent=2, sort_keys=True))
        return 0
    with section("Buffers"):
        for b in info["buffers"]:
            rep.status(
                f"[{b['index']}] {b['name']!r} offset={b['offset']} size={b['size']}"
            )
    return 0


def _validate_cmd(args: argparse.Namespace) -> int:
    step(f"validating {args.input.name}")
    problems = validate_file(args.input)
    rep = get_reporter()
    for p in problems:
        rep.error(p)
    rep.summary(
        "validate",
        file=args.input.name,
        result="ok" if not problems else "failed",
    )
    return 1 if problems else 0


def _plan_cmd(args: argparse.Namespace) -> int:
    plan, plan_dict = plan_sizes(args.sizes)
    rep = get_reporter()
    rep.flush()
    if args.json:
        print(json.dumps(plan_dict, indent=2, sort_keys=True))
    else:
        ranges_summary = ",".join(f"{r.begin}+{r.size}" for r in plan.ranges)
        rep.summary(
            "plan",
            data_start=plan.data_start,
            data_end=plan.data_end,
            padding=plan.padding.total,
            ranges=ranges_summary,
        )
    return 0


def _size(text: str) -> int:
    value = int(text)
    if value < 0:
        raise argparse.ArgumentTypeError(f"size must be >= 0: {text}")
    return value


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="bfast", description="BFAST binary container tool"
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (repeatable)",
    )
    p.add_argument(
        "-r",
        "--reporter",
        choices=["plain", "rich", "json", "silent"],
        default="plain",
        help="Select reporter backend: plain (default), rich, json (JSONL events), silent",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    pk = sub.add_parser("pack", help="Pack files into a BFAST file")
    pk.add_argument("output", type=Path)
    pk.add_argument("files", type=Path, nargs="+")
    pk.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=0,
        help="Copy buffers with this many threads",
    )
    pk.set_defaults(func=_pack_cmd)

    b = sub.add_parser("build", help="Build a BFAST file from a bundle spec")
    b.add_argument("spec", type=Path)
    b.add_argument("output", type=Path)
    b.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=0,
        help="Copy buffers with this many threads",
    )
    b.set_defaults(func=_build_cmd)

    u = sub.add_parser("unpack", help="Extract buffers into a directory")
    u.add_argument("input", type=Path)
    u.add_argument("directory", type=Path)
    u.add_argument(
        "--force", action="store_true", help="Overwrite existing files"
    )
    u.set_defaults(func=_unpack_cmd)

    i = sub.add_parser("inspect", help="Inspect a BFAST file")
    i.add_argument("input", type=Path)
    i.add_argument("--json", action="store_true", help="Emit JSON report")
    i.set_defaults(func=_inspect_cmd)

    v = sub.add_parser("validate", help="Validate a BFAST file")
    v.add_argument("input", type=Path)
    v.set_defaults(func=_validate_cmd)

    pl = sub.add_parser("plan", help="Compute layout for sizes (dry run)")
    pl.add_argument("sizes", type=_size, nargs="+")
    pl.add_argument("--json", action="store_true", help="Emit JSON plan")
    pl.set_defaults(func=_plan_cmd)

    return p


def _select_reporter(requested: str) -> None:
    if requested == "json":
        set_reporter(JsonLinesReporter())
    elif requested == "silent":
        set_reporter(SilentReporter())
    elif requested == "rich" and sys.stderr.isatty():
        set_reporter(RichReporter())
    else:
        # rich without a TTY falls back to plain
        set_reporter(PlainReporter())


def main(argv: list[str] | None = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)
    _select_reporter(args.reporter)
    set_verbosity(args.verbose)
    configure_logging(args.verbose)
    try:
        return args.func(args)
    except ValidationError as e:
        rep = get_reporter()
        rep.error(str(e))
        rep.flush()
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
