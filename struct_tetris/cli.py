"""CLI entry point and argument parsing."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from struct_tetris.config import STRATEGIES, load_config
from struct_tetris.internals.errors import ConfigError
from struct_tetris.internals.report import Reporter
from struct_tetris.internals.version import print_banner
from struct_tetris.pipeline import EXIT_IO, run_tetris


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="struct-tetris",
        description="Reorder Go struct fields to minimize padding",
    )
    ap.add_argument("source", nargs='?', help="Path to a Go source file")
    ap.add_argument("--version", action="store_true", help="Show version and exit")
    ap.add_argument("--no-banner", action="store_true", help="Do not print the version banner")
    ap.add_argument("--config", metavar="PATH",
                    help="Configuration file (default: tetris.toml next to the source file)")
    ap.add_argument("--word-size", type=int, choices=[4, 8],
                    help="Platform word size in bytes (default: host word size)")
    ap.add_argument("--top", type=int, metavar="K", dest="top_k",
                    help="Number of brute-force solutions to keep (default: 3)")
    ap.add_argument("--limit", type=int, metavar="N", dest="brute_force_limit",
                    help="Skip brute force for structs with more than N fields (default: 9)")
    ap.add_argument("--struct", metavar="NAME", dest="struct_name",
                    help="Only optimize the struct with this name")
    ap.add_argument("--strategy", choices=STRATEGIES,
                    help="Ordering written back to the file (default: greedy)")
    ap.add_argument("--dry-run", action="store_true",
                    help="Print the report without rewriting the file")
    ap.add_argument("--explain", action="store_true",
                    help="Show offset, size and padding of every field")
    ap.add_argument("--verify-abi", action="store_true",
                    help="Cross-check layout sizes against LLVM's data layout")
    ap.add_argument("--progress", action="store_true",
                    help="Show a progress bar while permuting fields")
    return ap


def main(argv: list[str] | None = None) -> int:
    """Struct Tetris entry point."""
    ap = build_arg_parser()
    args = ap.parse_args(argv)

    if not args.no_banner or args.version:
        print_banner()
    if args.version:
        return 0
    if not args.source:
        ap.error("the following arguments are required: source")

    src_path = Path(args.source)
    reporter = Reporter(filename=str(src_path))

    try:
        config = load_config(
            Path(args.config) if args.config else None,
            search_dir=src_path.resolve().parent,
        )
        config = config.override(
            word_size=args.word_size,
            top_k=args.top_k,
            brute_force_limit=args.brute_force_limit,
            struct_name=args.struct_name,
            strategy=args.strategy,
            write_back=False if args.dry_run else None,
            explain=True if args.explain else None,
            verify_abi=True if args.verify_abi else None,
            progress=True if args.progress else None,
        )
    except ConfigError as e:
        e.report(reporter)
        reporter.print()
        return EXIT_IO

    code = run_tetris(src_path, config, reporter)
    reporter.print()
    return code


if __name__ == "__main__":
    sys.exit(main())
