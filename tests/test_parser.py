import pytest

from struct_tetris.internals.errors import StructNotFoundError, StructParseError
from struct_tetris.internals.parser import (
    ANONYMOUS,
    find_struct_blocks,
    parse_struct_block,
    parse_structs,
)


def test_find_struct_block(point_source):
    blocks = find_struct_blocks(point_source)
    assert len(blocks) == 1
    block = blocks[0]
    assert block.start_line == 3
    assert block.end_line == 7
    assert block.lines[0] == "type Point struct {"
    assert block.lines[-1] == "}"


def test_parse_point(point_source):
    [decl] = parse_structs(point_source)
    assert decl.name == "Point"
    assert decl.header_line == 3
    assert decl.closing_line == 7
    assert list(decl.body_lines) == [4, 5, 6]
    assert decl.field_texts == ["a int8", 'b int64 `json:"b"`', "c int16 // trailing"]


def test_field_positions(point_source):
    [decl] = parse_structs(point_source)
    first = decl.fields[0]
    assert (first.line, first.column, first.type_column) == (4, 2, 4)
    assert first.type_span.col == 4
    assert decl.fields[2].line == 6


def test_blank_lines_are_kept():
    [decl] = parse_structs("type Gap struct {\n\n\ty int32\n}\n")
    assert decl.field_texts == ["", "y int32"]
    assert decl.fields[0].line == 2
    assert decl.fields[0].type_column is None


def test_single_token_line_has_no_type_column():
    [decl] = parse_structs("type T struct {\n\tlonely\n}")
    assert decl.fields[0].type_column is None
    assert decl.fields[0].type_span == decl.fields[0].span


def test_several_structs():
    source = (
        "package p\n"
        "type Empty struct {}\n"
        "type A struct {\n\tx int8\n}\n"
        "var b struct {\n\ty int16\n\tz int32\n}\n"
    )
    decls = parse_structs(source)
    assert [d.name for d in decls] == ["A", "b"]
    assert [d.field_texts for d in decls] == [["x int8"], ["y int16", "z int32"]]
    assert decls[1].header_line == 6


def test_empty_body():
    [decl] = parse_structs("type Unit struct {\n}\n")
    assert decl.fields == []


def test_anonymous_struct_header():
    [decl] = parse_structs(" struct {\n\ta int8\n}")
    assert decl.name == ANONYMOUS


def test_header_may_carry_trailing_comment():
    [decl] = parse_structs("type P struct { // point, see below\n\ta int8\n}\n")
    assert decl.name == "P"
    assert decl.field_texts == ["a int8"]


def test_closing_line_may_carry_trailing_words():
    [decl] = parse_structs("type A struct {\n\ta int8\n} // end of A\n")
    assert decl.field_texts == ["a int8"]


def test_crlf_line_endings():
    [decl] = parse_structs("type A struct {\r\n\ta int8\r\n\tb int16\r\n}\r\n")
    assert decl.field_texts == ["a int8", "b int16"]


def test_no_struct():
    with pytest.raises(StructNotFoundError) as exc:
        parse_structs("package main\n\nfunc main() {}\n")
    assert exc.value.code == "TE0101"


def test_unterminated_struct():
    with pytest.raises(StructParseError) as exc:
        find_struct_blocks("type Open struct {\n\ta int8\n")
    assert exc.value.code == "TE0102"
    assert "Open" in exc.value.text
    assert exc.value.span.line == 1


def test_nested_struct_is_a_parse_error():
    source = "type Outer struct {\n\tinner struct {\n\t\tx int8\n\t}\n}\n"
    blocks = find_struct_blocks(source)
    with pytest.raises(StructParseError) as exc:
        parse_struct_block(blocks[0])
    assert exc.value.code == "TE0103"
    assert exc.value.span.line == 2
