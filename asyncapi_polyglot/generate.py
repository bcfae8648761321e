"""Command line entrypoint.

    asyncapi-polyglot validate SPEC
    asyncapi-polyglot generate SPEC [-o OUT] [-l LANG ...] [--random-ids] [--workers N]
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
import sys

from asyncapi_polyglot.core.logging import configure_logging
from asyncapi_polyglot.core.settings import get_settings
from asyncapi_polyglot.errors import PipelineError, SpecLoadError
from asyncapi_polyglot.generators.options import IdlIdMode, Language
from asyncapi_polyglot.pipeline import Pipeline
from asyncapi_polyglot.spec.loader import load_spec
from asyncapi_polyglot.validation.validator import validation_report


def cmd_validate(args: argparse.Namespace) -> int:
    try:
        spec = load_spec(args.spec)
    except SpecLoadError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    ok, report = validation_report(spec)
    print(report, file=sys.stdout if ok else sys.stderr)
    return 0 if ok else 1


def cmd_generate(args: argparse.Namespace) -> int:
    settings = get_settings()
    if args.workers is not None:
        settings = settings.model_copy(update={"max_workers": args.workers})

    options = settings.generator_options()
    if args.languages:
        # Keep first occurrence order, drop repeats
        languages = tuple(dict.fromkeys(Language(name) for name in args.languages))
        options = replace(options, languages=languages)
    if args.random_ids:
        options = replace(options, id_mode=IdlIdMode.RANDOM)

    print("Loading spec...")
    try:
        spec = load_spec(args.spec)
    except SpecLoadError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    pipeline = Pipeline.from_settings(settings, args.output)
    pipeline.options = options
    print(f"Generating {', '.join(options.languages)} into {pipeline.output_dir}...")
    try:
        written = pipeline.run(spec)
    except PipelineError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for path in written:
        print(f"  ✓ {path.relative_to(pipeline.output_dir)}")
    print(f"\n✓ Generated {len(written)} files")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="asyncapi-polyglot",
        description="Compile an event-driven API document into Cap'n Proto schemas and clients",
    )
    parser.add_argument("--log-level", help="Override POLYGLOT_LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    validate_parser = subparsers.add_parser("validate", help="Validate a spec document")
    validate_parser.add_argument("spec", type=Path, help="YAML or JSON spec document")
    validate_parser.set_defaults(func=cmd_validate)

    generate_parser = subparsers.add_parser("generate", help="Generate schemas and clients")
    generate_parser.add_argument("spec", type=Path, help="YAML or JSON spec document")
    generate_parser.add_argument(
        "-o", "--output", type=Path, help="Output directory (default: POLYGLOT_OUTPUT_DIR)"
    )
    generate_parser.add_argument(
        "-l",
        "--language",
        dest="languages",
        action="append",
        choices=[language.value for language in Language],
        help="Client language; repeat for several (default: all)",
    )
    generate_parser.add_argument(
        "--random-ids", action="store_true", help="Use random Cap'n Proto file ids"
    )
    generate_parser.add_argument("--workers", type=int, help="Concurrent file writes")
    generate_parser.set_defaults(func=cmd_generate)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if getattr(args, "workers", None) is not None and args.workers < 1:
        parser.error("--workers must be at least 1")
    configure_logging(args.log_level)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
