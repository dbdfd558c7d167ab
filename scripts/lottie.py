#!/usr/bin/env python3
"""lottie — CLI for the animation asset pipeline.

Usage:
    lottie validate [<animation-dir> ...]
    lottie bundle   [<animation-dir> ...]
    lottie optimize [<animation-dir> ...]
    lottie extract  <bundle.json> <output-dir>
    lottie index    [--out <index.json>]
    lottie verify   [<animation-dir> ...]

Without animation directories, every directory under the animations root
(--animations-root, LOTTIE_ANIMATIONS_ROOT, ./animations) is processed.

Exit codes:
    0  — success
    1  — at least one animation failed, or validation reported an error
    2  — invalid usage
"""
import argparse
import sys
from collections.abc import Callable
from pathlib import Path

import jsonschema
from pydantic import ValidationError

# Ensure project root is on sys.path so app/*, models/* and friends are
# importable when the script is invoked from any working directory.
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.batch import discover_animations, run_batch  # noqa: E402
from app.config import Settings, load_settings  # noqa: E402
from app.errors import AssetPipelineError  # noqa: E402
from app.utils.logging import configure_logging  # noqa: E402
from catalog.index import build_index, write_index  # noqa: E402
from models.reports import BatchReport  # noqa: E402
from transforms.embedder import Embedder  # noqa: E402
from transforms.extractor import Extractor  # noqa: E402
from transforms.optimizer import Optimizer  # noqa: E402
from transforms.roundtrip import verify_roundtrip  # noqa: E402
from validators.animation import AnimationValidator  # noqa: E402

_USAGE = """\
Usage:
  lottie validate [<animation-dir> ...]
  lottie bundle   [<animation-dir> ...]
  lottie optimize [<animation-dir> ...]
  lottie extract  <bundle.json> <output-dir>
  lottie index    [--out <path>]
  lottie verify   [<animation-dir> ...]
"""


def _kb(size: int) -> str:
    return f"{size / 1024:.2f} KB"


# ---------------------------------------------------------------------------
# shared argument handling
# ---------------------------------------------------------------------------

def _parser(prog: str, with_dirs: bool = True) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=f"lottie {prog}", add_help=True)
    if with_dirs:
        parser.add_argument("dirs", nargs="*", metavar="ANIMATION_DIR",
                            help="Animation directories (default: all under the animations root)")
    parser.add_argument("--animations-root", metavar="PATH",
                        help="Directory holding one sub-directory per animation")
    parser.add_argument("--dist", metavar="PATH",
                        help="Output root for bundles and minified documents")
    parser.add_argument("--workers", type=int, metavar="N",
                        help="Process N animations in parallel")
    parser.add_argument("--log-level", metavar="LEVEL",
                        help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--log-format", choices=["console", "json"])
    return parser


def _parse(parser: argparse.ArgumentParser, argv: list[str]) -> "tuple[argparse.Namespace, Settings] | int":
    """Parse *argv* and build settings; return an exit code on usage errors."""
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return int(exc.code) if exc.code is not None else 2

    try:
        settings = load_settings(
            animations_root=args.animations_root,
            dist_root=args.dist,
            index_path=getattr(args, "out", None),
            workers=args.workers,
            log_level=args.log_level,
            log_format=args.log_format,
        )
    except ValidationError as exc:
        print(f"ERROR: invalid settings: {exc}", file=sys.stderr)
        return 2

    configure_logging(settings.log_level, settings.log_format)
    return args, settings


def _units(args: argparse.Namespace, settings: Settings) -> list[Path]:
    if args.dirs:
        return [Path(d) for d in args.dirs]
    return discover_animations(settings.animations_root)


def _run(
    prog: str,
    argv: list[str],
    make_work: Callable[[Settings], Callable[[Path], object]],
    report_unit: Callable[[object], None],
) -> "tuple[BatchReport, Settings] | int":
    parsed = _parse(_parser(prog), argv)
    if isinstance(parsed, int):
        return parsed
    args, settings = parsed

    try:
        units = _units(args, settings)
    except AssetPipelineError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    report = run_batch(units, make_work(settings), workers=settings.workers)
    for outcome in report.outcomes:
        if outcome.ok or outcome.result is not None:
            report_unit(outcome.result)
        else:
            print(f"ERROR: {outcome.name}: {outcome.reason}")
    return report, settings


def _summary(report: BatchReport, verb: str) -> int:
    print(f"Total animations: {len(report.outcomes)}")
    print(f"{verb} successfully: {report.succeeded}")
    if not report.ok:
        print(f"Failed: {report.failed}")
        return 1
    return 0


# ---------------------------------------------------------------------------
# validate
# ---------------------------------------------------------------------------

def _print_validation(report) -> None:
    print(f"{report.animation}:")
    for error in report.errors:
        print(f"  ERROR: {error}")
    for warning in report.warnings:
        print(f"  WARN: {warning}")
    if not report.errors and not report.warnings:
        print("  OK: all checks passed")


def cmd_validate(argv: list[str]) -> int:
    result = _run("validate", argv, lambda s: AnimationValidator().validate, _print_validation)
    if isinstance(result, int):
        return result
    report, _ = result

    reports = [o.result for o in report.outcomes if o.result is not None]
    errors = sum(len(r.errors) for r in reports)
    warnings = sum(len(r.warnings) for r in reports)
    print(f"Total animations: {len(report.outcomes)}")
    print(f"Errors: {errors}")
    print(f"Warnings: {warnings}")
    if not report.ok:
        print(f"ERROR: validation failed with {errors} error(s)")
        return 1
    print("OK: validation passed")
    return 0


# ---------------------------------------------------------------------------
# bundle
# ---------------------------------------------------------------------------

def _print_bundle(result) -> None:
    stats = result.stats
    for warning in result.warnings:
        print(f"  WARN: {result.animation}: {warning}")
    if stats.has_images:
        print(
            f"OK: {result.animation}: converted {stats.images_converted} images "
            f"({_kb(stats.original_bytes)} -> bundle {_kb(stats.output_bytes)})"
        )
    else:
        print(f"OK: {result.animation}: no images to bundle (bundle {_kb(stats.output_bytes)})")


def cmd_bundle(argv: list[str]) -> int:
    result = _run("bundle", argv, lambda s: Embedder(s.dist_root).embed, _print_bundle)
    if isinstance(result, int):
        return result
    return _summary(result[0], "Bundled")


# ---------------------------------------------------------------------------
# optimize
# ---------------------------------------------------------------------------

def _print_optimize(result) -> None:
    print(
        f"OK: {result.animation}: {_kb(result.original_bytes)} -> "
        f"{_kb(result.optimized_bytes)} (saved {result.saved_pct:.1f}%)"
    )


def cmd_optimize(argv: list[str]) -> int:
    result = _run("optimize", argv, lambda s: Optimizer(s.dist_root).optimize, _print_optimize)
    if isinstance(result, int):
        return result
    return _summary(result[0], "Optimized")


# ---------------------------------------------------------------------------
# verify
# ---------------------------------------------------------------------------

def _print_verify(report) -> None:
    if report.ok:
        print(f"OK: {report.animation}: {report.asset_count} assets; "
              f"{report.images_checked} images byte-identical")
    else:
        for mismatch in report.mismatches:
            print(f"ERROR: {report.animation}: {mismatch}")


def cmd_verify(argv: list[str]) -> int:
    result = _run("verify", argv, lambda s: verify_roundtrip, _print_verify)
    if isinstance(result, int):
        return result
    return _summary(result[0], "Verified")


# ---------------------------------------------------------------------------
# extract
# ---------------------------------------------------------------------------

def cmd_extract(argv: list[str]) -> int:
    parser = _parser("extract", with_dirs=False)
    parser.add_argument("bundle", metavar="BUNDLE_JSON")
    parser.add_argument("output", metavar="OUTPUT_DIR")
    parsed = _parse(parser, argv)
    if isinstance(parsed, int):
        return parsed
    args, _ = parsed

    try:
        result = Extractor().extract(args.bundle, args.output)
    except AssetPipelineError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    info = result.summary
    duration = f"{info.duration}s" if info.duration is not None else "unknown"
    print(f"OK: extracted {info.image_count} images -> {result.document_path}")
    print(f"  Dimensions: {info.width}x{info.height}")
    print(f"  Frame Rate: {info.frame_rate} fps")
    print(f"  Frames: {info.frames}")
    print(f"  Duration: {duration}")
    return 0


# ---------------------------------------------------------------------------
# index
# ---------------------------------------------------------------------------

def cmd_index(argv: list[str]) -> int:
    parser = _parser("index", with_dirs=False)
    parser.add_argument("--out", metavar="PATH", help="Output index.json")
    parser.add_argument("--generated-at", metavar="TIMESTAMP",
                        help="Timestamp recorded in the index (default: fixed epoch)")
    parsed = _parse(parser, argv)
    if isinstance(parsed, int):
        return parsed
    args, settings = parsed

    try:
        kwargs = {"generated_at": args.generated_at} if args.generated_at else {}
        index = build_index(settings.animations_root, settings.dist_root, **kwargs)
        size = write_index(settings.index_path, index)
    except AssetPipelineError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except jsonschema.ValidationError as exc:
        print(f"ERROR: index does not conform to AnimationIndex.v1.json: {exc.message}",
              file=sys.stderr)
        return 1

    print(f"OK: {index['totalAnimations']} animations; "
          f"{len(index['categories'])} categories -> {settings.index_path} ({_kb(size)})")
    return 0


# ---------------------------------------------------------------------------
# entry point
# ---------------------------------------------------------------------------

_COMMANDS: dict[str, Callable[[list[str]], int]] = {
    "validate": cmd_validate,
    "bundle": cmd_bundle,
    "optimize": cmd_optimize,
    "extract": cmd_extract,
    "index": cmd_index,
    "verify": cmd_verify,
}


def main() -> None:
    if len(sys.argv) < 2:
        print(_USAGE, file=sys.stderr)
        sys.exit(2)

    subcmd, rest = sys.argv[1], sys.argv[2:]
    command = _COMMANDS.get(subcmd)
    if command is None:
        print(f"Unknown subcommand: {subcmd!r}\n{_USAGE}", file=sys.stderr)
        sys.exit(2)
    sys.exit(command(rest))


if __name__ == "__main__":
    main()
