"""Struct optimization pipeline: read, parse, validate, optimize, report, rewrite."""
from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, TextIO, Tuple

from struct_tetris.config import TetrisConfig, default_config
from struct_tetris.internals.errors import (
    FileAccessError,
    SearchLimitError,
    StructParseError,
    UnknownTypeError,
    ValidationError,
    emit,
    ERR,
)
from struct_tetris.internals.parser import StructDecl, parse_structs
from struct_tetris.internals.report import Reporter, Span
from struct_tetris.layout.abi import abi_size
from struct_tetris.layout.catalog import TypeCatalog
from struct_tetris.layout.fields import FieldDescriptor, iter_field_errors, parse_fields
from struct_tetris.layout.optimize import Candidate, optimize_brute_force, optimize_greedy
from struct_tetris.layout.render import render_report
from struct_tetris.layout.sizing import Layout, compute_layout

EXIT_OK = 0
EXIT_WARNINGS = 1
EXIT_ERRORS = 2
EXIT_IO = 3


@dataclass
class StructReport:
    name: str
    decl: StructDecl
    catalog: TypeCatalog
    baseline: Layout
    greedy: Layout
    candidates: Optional[List[Candidate]] = None
    abi_sizes: Dict[str, int] = field(default_factory=dict)

    def candidate_layouts(self) -> List[Layout]:
        return [compute_layout(c.ordering, self.catalog) for c in self.candidates or []]

    def chosen(self, strategy: str) -> Tuple[FieldDescriptor, ...]:
        """Ordering to write back for the given strategy.

        Falls back to the greedy ordering when brute force was skipped.
        """
        if strategy == "brute-force" and self.candidates:
            return self.candidates[0].ordering
        return self.greedy.fields


def validate_decl(decl: StructDecl, catalog: TypeCatalog) -> List[ValidationError]:
    """Every validation error of a struct, each pointing at its source line."""
    errors = list(iter_field_errors(decl.field_texts, catalog))
    for error in errors:
        line = decl.fields[error.index]
        error.span = line.type_span if isinstance(error, UnknownTypeError) else line.span
    return errors


def optimize_struct(decl: StructDecl, config: TetrisConfig,
                    reporter: Optional[Reporter] = None) -> StructReport:
    """Run baseline, greedy and brute-force layouts for one struct.

    Raises:
        ValidationError: If a field line is invalid.
    """
    catalog = config.catalog
    fields = parse_fields(decl.field_texts, catalog)

    baseline = compute_layout(fields, catalog)
    greedy = compute_layout(optimize_greedy(list(fields), catalog), catalog)
    report = StructReport(decl.name, decl, catalog, baseline, greedy)

    # Brute force permutes the greedy arrangement; ties keep the order they are found in
    try:
        report.candidates = optimize_brute_force(
            greedy.fields, catalog,
            k=config.top_k,
            limit=config.brute_force_limit,
            progress=config.progress,
            name=decl.name,
        )
    except SearchLimitError as e:
        e.span = Span(decl.header_line, 1, decl.header_line, 1)
        if reporter is None:
            raise
        e.report(reporter)

    if config.verify_abi:
        _check_abi(report, reporter)
    return report


def _check_abi(report: StructReport, reporter: Optional[Reporter]) -> None:
    layouts = {"initial": report.baseline, "greedy": report.greedy}
    if report.candidates:
        layouts["brute force"] = compute_layout(report.candidates[0].ordering, report.catalog)

    for label, layout in layouts.items():
        native = abi_size(layout.fields, report.catalog)
        report.abi_sizes[label] = native
        if native != layout.total_size and reporter is not None:
            span = Span(report.decl.header_line, 1, report.decl.header_line, 1)
            emit(reporter, ERR.TE0302, span,
                 name=f"{report.name} ({label})", abi=native, size=layout.total_size)


def rewrite_source(source: str, replacements: Sequence[Tuple[StructDecl, Sequence[FieldDescriptor]]]) -> str:
    """Replace each struct body with the given ordering, one tab-indented field per line."""
    lines = source.split("\n")
    for decl, ordering in replacements:
        assert len(ordering) == len(decl.body_lines), \
            f"struct '{decl.name}' has {len(decl.body_lines)} body lines, got {len(ordering)} fields"
        for lineno, fd in zip(decl.body_lines, ordering):
            ending = "\r" if lines[lineno - 1].endswith("\r") else ""
            lines[lineno - 1] = "\t" + fd.text + ending
    return "\n".join(lines)


# newline="" on both ends keeps CRLF files CRLF
def read_source(path: Path) -> str:
    try:
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise FileAccessError("TE0201", path=str(path), reason=getattr(e, "strerror", None) or str(e)) from e


def write_source(path: Path, text: str) -> None:
    try:
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(text)
    except OSError as e:
        raise FileAccessError("TE0202", path=str(path), reason=e.strerror or str(e)) from e


def analyze_source(source: str, config: TetrisConfig, reporter: Reporter) -> List[StructReport]:
    """Optimize every struct in `source`, reporting problems to `reporter`.

    Structs with invalid fields are reported and left out of the result.
    """
    try:
        decls = parse_structs(source)
    except StructParseError as e:
        e.report(reporter)
        return []

    if config.struct_name is not None:
        decls = [d for d in decls if d.name == config.struct_name]
        if not decls:
            emit(reporter, ERR.TE0104, None, name=config.struct_name)
            return []

    catalog = config.catalog
    reports = []
    for decl in decls:
        errors = validate_decl(decl, catalog)
        for error in errors:
            error.report(reporter)
        if not errors:
            reports.append(optimize_struct(decl, config, reporter))
    return reports


def run_tetris(path: Path, config: Optional[TetrisConfig] = None,
               reporter: Optional[Reporter] = None, stream: Optional[TextIO] = None) -> int:
    """Print the optimization report for every struct in `path`.

    Rewrites the file with the chosen orderings when `config.write_back` is
    set and no errors were found.

    Returns:
        Exit code (0=success, 1=warnings, 2=errors, 3=file access errors).
    """
    config = config or default_config()
    reporter = reporter or Reporter(filename=str(path))
    stream = stream or sys.stdout

    try:
        source = read_source(path)
    except FileAccessError as e:
        e.report(reporter)
        return EXIT_IO
    reporter.source = source

    reports = analyze_source(source, config, reporter)
    if reporter.has_errors:
        return EXIT_ERRORS

    for report in reports:
        stream.write(render_report(report, explain=config.explain))

    if config.write_back and reports:
        updated = rewrite_source(source, [(r.decl, r.chosen(config.strategy)) for r in reports])
        if updated != source:
            try:
                write_source(path, updated)
            except FileAccessError as e:
                e.report(reporter)
                return EXIT_IO

    return EXIT_WARNINGS if reporter.has_warnings else EXIT_OK
