"""Locating and parsing struct declarations in Go source text."""
from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import List

from lark import Lark, Token, Tree, UnexpectedInput

from struct_tetris.internals.errors import StructNotFoundError, StructParseError
from struct_tetris.internals.report import Span

GRAMMAR_PATH = Path(__file__).parent.parent / "grammar.lark"

STRUCT_MARKER = " struct {"
CLOSING_MARKER = "}"
ANONYMOUS = "<anonymous>"


@dataclass
class StructBlock:
    """Raw source lines of one struct, header and closing line included."""
    start_line: int  # 1-based line number of the header
    lines: List[str]

    @property
    def end_line(self) -> int:
        return self.start_line + len(self.lines) - 1

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


@dataclass
class FieldLine:
    text: str
    line: int
    column: int = 1
    type_column: int | None = None

    @property
    def span(self) -> Span:
        return Span(self.line, self.column, self.line, self.column + len(self.text))

    @property
    def type_span(self) -> Span:
        if self.type_column is None:
            return self.span
        return Span(self.line, self.type_column, self.line, self.type_column)


@dataclass
class StructDecl:
    name: str
    header_line: int
    closing_line: int
    fields: List[FieldLine] = field(default_factory=list)

    @property
    def field_texts(self) -> List[str]:
        return [f.text for f in self.fields]

    @property
    def body_lines(self) -> range:
        """1-based line numbers of the struct body."""
        return range(self.header_line + 1, self.closing_line)


@lru_cache(maxsize=1)
def get_parser() -> Lark:
    return Lark.open(
        str(GRAMMAR_PATH),
        parser="lalr",
        propagate_positions=True,
        maybe_placeholders=False,
    )


def find_struct_blocks(source: str) -> List[StructBlock]:
    """Cut every struct block out of `source`.

    A block opens on a line containing ' struct {' and ends on the first
    following line containing '}'. Single-line declarations such as
    'type Empty struct {}' have no body and are skipped.

    Raises:
        StructNotFoundError: If no block is found.
        StructParseError: If a block is still open at end of input.
    """
    blocks: List[StructBlock] = []
    current: StructBlock | None = None

    for lineno, line in enumerate(source.split("\n"), start=1):
        if current is None:
            marker = line.find(STRUCT_MARKER)
            if marker < 0:
                continue
            if CLOSING_MARKER in line[marker:]:
                continue
            current = StructBlock(lineno, [line])
        else:
            current.lines.append(line)
            if CLOSING_MARKER in line:
                blocks.append(current)
                current = None

    if current is not None:
        name = _header_name(current.lines[0])
        raise StructParseError("TE0102", Span(current.start_line, 1, current.start_line, 1), name=name)
    if not blocks:
        raise StructNotFoundError("TE0101")
    return blocks


def _header_name(header: str) -> str:
    words = header[:header.find(STRUCT_MARKER)].split()
    return words[-1] if words else ANONYMOUS


def parse_struct_block(block: StructBlock) -> StructDecl:
    """Parse one located block into a StructDecl with file positions."""
    try:
        tree = get_parser().parse(block.text)
    except UnexpectedInput as e:
        raise _parse_error(e, block) from None

    header, body, _closing = tree.children
    words = []
    for t in header.children:
        if isinstance(t, Token) and t.type == "STRUCT":
            break  # anything after the brace is a trailing comment
        if isinstance(t, Token) and t.type == "WORD":
            words.append(t)
    decl = StructDecl(
        name=str(words[-1]) if words else ANONYMOUS,
        header_line=block.start_line,
        closing_line=block.end_line,
    )

    for index, line_tree in enumerate(body.children):
        assert isinstance(line_tree, Tree), line_tree
        lineno = block.start_line + 1 + index
        tokens = [t for t in line_tree.children if isinstance(t, Token)]
        text = block.lines[1 + index].strip()
        if not tokens:
            decl.fields.append(FieldLine(text, lineno))
            continue
        type_column = tokens[1].column if len(tokens) > 1 else None
        decl.fields.append(FieldLine(text, lineno, tokens[0].column, type_column))

    return decl


def _parse_error(e: UnexpectedInput, block: StructBlock) -> StructParseError:
    token = getattr(e, "token", None)
    if token is None:
        shown = getattr(e, "char", "?")
    elif token.type == "$END":
        shown = "end of struct"
    elif token.type == "_NL":
        shown = "end of line"
    else:
        shown = str(token)

    line = e.line if isinstance(e.line, int) and e.line > 0 else len(block.lines)
    column = e.column if isinstance(e.column, int) and e.column > 0 else 1
    file_line = block.start_line + line - 1
    return StructParseError("TE0103", Span(file_line, column, file_line, column), token=shown)


def parse_structs(source: str) -> List[StructDecl]:
    return [parse_struct_block(block) for block in find_struct_blocks(source)]
