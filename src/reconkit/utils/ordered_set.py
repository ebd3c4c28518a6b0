# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Insertion-ordered, deduplicated collections."""

from collections.abc import Hashable, Iterable, Iterator
from typing import Generic, TypeVar

H = TypeVar("H", bound=Hashable)


class OrderedSet(Generic[H]):
    """Ordered, deduplicated collection. Not thread-safe; owners guard it with their own lock."""

    def __init__(self, items: Iterable[H] = ()):
        self._items: list[H] = []
        self._seen: set[H] = set()
        self.add_many(*items)

    def add(self, item: H) -> bool:
        if item not in self._seen:
            self._seen.add(item)
            self._items.append(item)
            return True
        return False

    def add_many(self, *items: H) -> int:
        count = 0
        for item in items:
            if self.add(item):
                count += 1
        return count

    def __contains__(self, item: object) -> bool:
        return item in self._seen

    def __iter__(self) -> Iterator[H]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"OrderedSet({self._items!r})"

    def to_list(self) -> list[H]:
        return list(self._items)
