"""Main CLI entry point for the codec-text-view command-line tool.

Provides a command-line interface for decoding files through the reference
codecs, transcoding between them and benchmarking traversal.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from codec_text_view import __version__
from codec_text_view.character.codecs import CODEC_REGISTRY, get_codec, get_codec_spec
from codec_text_view.character.iterator import make_text_iterator
from codec_text_view.character.output import BinaryIOCursor, make_text_writer
from codec_text_view.character.sentinel import make_text_sentinel
from codec_text_view.character.storage import CodeUnitSequence, CodeUnitStream
from codec_text_view.shared.config import (
    BenchmarkConfig,
    ConfigError,
    MalformedInputPolicy,
    TextIteratorConfig,
)
from codec_text_view.shared.errors import TextIteratorError
from codec_text_view.shared.logging import get_logger
from codec_text_view.tools.benchmarks import DEFAULT_CODECS, SCENARIOS, TraversalBenchmark

logger = get_logger(__name__, None, "cli")


def units_from_bytes(data: bytes, unit_size: int, byteorder: str) -> List[int]:
    """Split raw bytes into integer code units."""
    usable = len(data) - len(data) % unit_size
    if usable != len(data):
        logger.warning(
            "Dropping trailing partial code unit",
            extra={"trailing_bytes": len(data) - usable, "unit_size": unit_size}
        )
    if unit_size == 1:
        return list(data)
    return [
        int.from_bytes(data[offset:offset + unit_size], byteorder)
        for offset in range(0, usable, unit_size)
    ]


def load_iterator_config(args: argparse.Namespace) -> TextIteratorConfig:
    """Build the iterator configuration from --config and --malformed."""
    config = TextIteratorConfig()
    if args.config:
        config = TextIteratorConfig.from_json(args.config.read_text())
    if args.malformed:
        config = config.override(malformed_input=MalformedInputPolicy[args.malformed.upper()])
    return config


def decode_file(
    path: Path,
    codec_name: str,
    config: TextIteratorConfig,
    byteorder: str = "little",
    stream: bool = False,
    ranges: bool = False
) -> Dict[str, Any]:
    """Decode a file and describe the characters found in it."""
    entry = get_codec_spec(codec_name)
    codec = entry.factory()

    with path.open("rb") as fp:
        if stream:
            storage: Any = CodeUnitStream.from_binary_io(fp, entry.unit_size, byteorder)
        else:
            storage = CodeUnitSequence(units_from_bytes(fp.read(), entry.unit_size, byteorder))

        it = make_text_iterator(codec, storage, config=config)
        end = make_text_sentinel(storage)
        characters: List[str] = []
        spans: List[List[int]] = []
        with_ranges = ranges and it.capability.tier.exposes_range
        while it != end:
            characters.append(it.value)
            if with_ranges:
                consumed = it.base_range()  # type: ignore[attr-defined]
                spans.append([consumed.first.position, consumed.last.position])
            it.advance()

    result: Dict[str, Any] = {
        "file": str(path),
        "codec": codec_name,
        "tier": it.capability.tier.name,
        "characters": len(characters),
        "text": "".join(characters),
    }
    if with_ranges:
        result["ranges"] = spans
    return result


def transcode_file(
    source: Path,
    target: Path,
    from_codec: str,
    to_codec: str,
    config: TextIteratorConfig,
    byteorder: str = "little"
) -> Dict[str, Any]:
    """Decode ``source`` with one codec and write it to ``target`` with another.

    Output goes to a partial file beside ``target`` that replaces it only once
    every character has been written; on failure ``target`` is left untouched.
    """
    source_entry = get_codec_spec(from_codec)
    target_entry = get_codec_spec(to_codec)
    decoder = source_entry.factory()
    partial = target.with_name(f".{target.name}.partial")

    try:
        with source.open("rb") as fp_in, partial.open("wb") as fp_out:
            storage = CodeUnitStream.from_binary_io(fp_in, source_entry.unit_size, byteorder)
            it = make_text_iterator(decoder, storage, config=config)
            end = make_text_sentinel(storage)
            output = BinaryIOCursor(fp_out, target_entry.unit_size, byteorder)
            writer = make_text_writer(target_entry.factory(), output, config=config)
            characters = 0
            while it != end:
                writer.write(it.value)
                characters += 1
                it.advance()
    except BaseException:
        partial.unlink(missing_ok=True)
        raise
    partial.replace(target)

    return {
        "source": str(source),
        "target": str(target),
        "from": from_codec,
        "to": to_codec,
        "characters": characters,
        "code_units_read": storage.position,
        "code_units_written": writer.units_written,
    }


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="codec-text-view",
        description="Decode, transcode and benchmark text through pluggable codecs"
    )

    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")
    codec_names = sorted(CODEC_REGISTRY)

    def add_iteration_options(sub: argparse.ArgumentParser) -> None:
        sub.add_argument(
            "--byteorder",
            choices=["little", "big"],
            default="little",
            help="Byte order of multi-byte code units (default: little)"
        )
        sub.add_argument(
            "--malformed",
            choices=[policy.name.lower() for policy in MalformedInputPolicy],
            help="What to do with malformed input (default: skip)"
        )
        sub.add_argument(
            "--config", "-c",
            type=Path,
            help="Iterator configuration file (JSON)"
        )

    # Decode command
    decode_parser = subparsers.add_parser("decode", help="Decode files and print their text")
    decode_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="Files to decode"
    )
    decode_parser.add_argument(
        "--codec",
        default="utf-8",
        help=f"Codec name ({', '.join(codec_names)}; default: utf-8)"
    )
    decode_parser.add_argument(
        "--stream",
        action="store_true",
        help="Read files as single-pass streams"
    )
    decode_parser.add_argument(
        "--ranges",
        action="store_true",
        help="Report the code-unit range of each character"
    )
    decode_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="text",
        help="Output format (default: text)"
    )
    add_iteration_options(decode_parser)

    # Transcode command
    transcode_parser = subparsers.add_parser(
        "transcode", help="Re-encode a file with another codec"
    )
    transcode_parser.add_argument("source", type=Path, help="File to read")
    transcode_parser.add_argument("target", type=Path, help="File to write")
    transcode_parser.add_argument(
        "--from", dest="from_codec", default="utf-8", help="Source codec (default: utf-8)"
    )
    transcode_parser.add_argument(
        "--to", dest="to_codec", required=True, help="Target codec"
    )
    add_iteration_options(transcode_parser)

    # Benchmark command
    benchmark_parser = subparsers.add_parser("benchmark", help="Benchmark traversal")
    benchmark_parser.add_argument(
        "--codecs",
        nargs="+",
        default=list(DEFAULT_CODECS),
        help="Codecs to benchmark"
    )
    benchmark_parser.add_argument(
        "--scenarios",
        nargs="+",
        choices=list(SCENARIOS),
        default=list(SCENARIOS),
        help="Traversal scenarios to run"
    )
    benchmark_parser.add_argument(
        "--quick",
        action="store_true",
        help="Small sample sizes and a single run"
    )
    benchmark_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Write the JSON report to a file (default: stdout)"
    )

    # Global options
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    return parser


def format_results(results: List[Dict[str, Any]], format_type: str) -> str:
    """Format decode results for output."""
    if format_type == "json":
        return json.dumps(results, indent=2, ensure_ascii=False)

    if not results:
        return "No results to display."

    lines = []
    for result in results:
        if "error" in result:
            lines.append(f"✗ {result['file']}: {result['error']}")
            continue
        lines.append(
            f"✓ {result['file']} ({result['codec']}, {result['tier']}, "
            f"{result['characters']} characters)"
        )
        if "ranges" in result:
            for character, (start, stop) in zip(result["text"], result["ranges"]):
                lines.append(f"   [{start}, {stop}) U+{ord(character):04X} {character!r}")
        else:
            lines.append(result["text"])
    return "\n".join(lines)


def cmd_decode(args: argparse.Namespace) -> int:
    """Handle decode command."""
    config = load_iterator_config(args)
    results = []

    for path in args.paths:
        if not path.exists():
            results.append({"file": str(path), "error": "File not found"})
            continue
        try:
            results.append(
                decode_file(path, args.codec, config, args.byteorder, args.stream, args.ranges)
            )
        except (TextIteratorError, ValueError) as e:
            logger.error("Failed to decode file", extra={"file": str(path)}, exc_info=False)
            results.append({"file": str(path), "error": str(e)})

    print(format_results(results, args.format))
    return 0 if all("error" not in r for r in results) else 1


def cmd_transcode(args: argparse.Namespace) -> int:
    """Handle transcode command."""
    config = load_iterator_config(args)
    if not args.source.exists():
        print(f"Error: {args.source} not found", file=sys.stderr)
        return 1

    try:
        summary = transcode_file(
            args.source, args.target, args.from_codec, args.to_codec, config, args.byteorder
        )
    except (TextIteratorError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(summary, indent=2))
    return 0


def cmd_benchmark(args: argparse.Namespace) -> int:
    """Handle benchmark command."""
    for name in args.codecs:
        get_codec(name)

    config = BenchmarkConfig.quick() if args.quick else BenchmarkConfig()
    benchmark = TraversalBenchmark(config=config)
    report = benchmark.run_benchmark(codecs=args.codecs, scenarios=args.scenarios).generate_report()
    formatted_output = json.dumps(report, indent=2)

    if args.output:
        args.output.write_text(formatted_output)
        print(f"Results written to {args.output}", file=sys.stderr)
    else:
        print(formatted_output)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Set up logging verbosity
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    elif args.quiet:
        logging.basicConfig(level=logging.ERROR)

    # Route to appropriate command handler
    try:
        if args.command == "decode":
            return cmd_decode(args)
        elif args.command == "transcode":
            return cmd_transcode(args)
        elif args.command == "benchmark":
            return cmd_benchmark(args)
        else:
            print(f"Unknown command: {args.command}", file=sys.stderr)
            return 1

    except (ConfigError, LookupError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
