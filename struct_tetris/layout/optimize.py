"""Field ordering search.

Two strategies are provided:

- greedy: one sort by descending field size. Cheap, usually good, not
  always optimal.
- brute force: every permutation is laid out and the K smallest are kept.
  This costs n! layout evaluations and is only meant for ordinary struct
  sizes (a handful of fields); a field limit guards against runaway input.
"""
from __future__ import annotations

import bisect
import math
from dataclasses import dataclass
from typing import Generic, Iterator, MutableSequence, Sequence, TypeVar

from tqdm import tqdm

from struct_tetris.internals.errors import SearchLimitError
from struct_tetris.layout.catalog import DEFAULT_CATALOG, TypeCatalog
from struct_tetris.layout.fields import FieldDescriptor
from struct_tetris.layout.sizing import compute_size

T = TypeVar("T")

DEFAULT_TOP_K = 3


@dataclass(frozen=True)
class Candidate:
    ordering: tuple[FieldDescriptor, ...]
    size: int


def optimize_greedy(fields: MutableSequence[FieldDescriptor],
                    catalog: TypeCatalog = DEFAULT_CATALOG) -> MutableSequence[FieldDescriptor]:
    """Sort `fields` in place, largest first, and return it."""
    fields.sort(key=lambda field: catalog.size_of(field.type_name), reverse=True)
    return fields


def heap_permutations(items: MutableSequence[T]) -> Iterator[MutableSequence[T]]:
    """Generate every arrangement of `items` with Heap's algorithm.

    The same list object is permuted in place and yielded after each swap;
    copy it if an arrangement has to outlive the next iteration.
    """
    def generate(k: int) -> Iterator[MutableSequence[T]]:
        if k <= 1:
            yield items
            return
        yield from generate(k - 1)
        for i in range(k - 1):
            if k % 2 == 0:
                items[i], items[k - 1] = items[k - 1], items[i]
            else:
                items[0], items[k - 1] = items[k - 1], items[0]
            yield from generate(k - 1)

    yield from generate(len(items))


class TopK(Generic[T]):
    """The k smallest-scored items seen so far, ranked ascending.

    An item is kept only if it scores strictly below the current worst slot,
    so among equal scores the first one offered ranks higher.
    """

    def __init__(self, k: int = DEFAULT_TOP_K) -> None:
        if k < 1:
            raise ValueError(f"k must be at least 1, got {k}")
        self.k = k
        self._scores: list[float] = []
        self._items: list[T] = []

    def __len__(self) -> int:
        return len(self._items)

    @property
    def worst(self) -> float:
        """Score an item has to beat to get in (infinity while not full)."""
        if len(self._scores) < self.k:
            return math.inf
        return self._scores[-1]

    def offer(self, score: float, item: T) -> bool:
        if score >= self.worst:
            return False
        pos = bisect.bisect_right(self._scores, score)
        self._scores.insert(pos, score)
        self._items.insert(pos, item)
        del self._scores[self.k:]
        del self._items[self.k:]
        return True

    def ranked(self) -> list[tuple[float, T]]:
        return list(zip(self._scores, self._items))


def optimize_brute_force(fields: Sequence[FieldDescriptor],
                         catalog: TypeCatalog = DEFAULT_CATALOG,
                         k: int = DEFAULT_TOP_K,
                         limit: int | None = None,
                         progress: bool = False,
                         name: str = "struct") -> list[Candidate]:
    """Return the `k` smallest layouts over all orderings of `fields`.

    Always returns exactly `k` candidates: when there are fewer than `k`
    orderings, the last one found is repeated.

    Raises:
        SearchLimitError: If `limit` is set and there are more fields than it.
    """
    if limit is not None and len(fields) > limit:
        raise SearchLimitError("TE0301", name=name, count=len(fields), limit=limit)

    best: TopK[tuple[FieldDescriptor, ...]] = TopK(k)
    work = list(fields)
    perms = tqdm(heap_permutations(work), total=math.factorial(len(work)),
                 desc=f"Permuting {name}", unit="perm", disable=not progress, leave=False)
    for ordering in perms:
        size = compute_size(ordering, catalog)
        if size < best.worst:
            best.offer(size, tuple(ordering))

    candidates = [Candidate(ordering, int(size)) for size, ordering in best.ranked()]
    while len(candidates) < k:
        candidates.append(candidates[-1])
    return candidates
