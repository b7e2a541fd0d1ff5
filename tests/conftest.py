import pytest

from struct_tetris.layout import TypeCatalog


@pytest.fixture
def catalog():
    return TypeCatalog(8)


@pytest.fixture
def catalog32():
    return TypeCatalog(4)


GO_POINT = """package main

type Point struct {
\ta int8
\tb int64 `json:"b"`
\tc int16 // trailing
}

func main() {}
"""


@pytest.fixture
def point_source():
    return GO_POINT
