"""Case-insensitive containers keyed by names and relative paths.

Library names, package ids and asset paths are compared without regard to
case. Keys are folded one character at a time to upper case on insert and
lookup, so a character only matches characters with the same single
uppercase form ("ß" never matches "SS"). The first spelling inserted is
the one reported on iteration.
"""

from collections.abc import Iterable, Iterator, Mapping, MutableMapping, MutableSet
from typing import Any, TypeVar

V = TypeVar("V")


def _fold_char(char: str) -> str:
    upper = char.upper()
    return upper if len(upper) == 1 else char


def _fold(key: str) -> str:
    folded = key.upper()
    if len(folded) == len(key):
        return folded
    return "".join(_fold_char(char) for char in key)


class CaseInsensitiveDict(MutableMapping[str, V]):
    """Dictionary with case-insensitive string keys.

    Example:
        >>> d = CaseInsensitiveDict({'Newtonsoft.Json': 1})
        >>> d['newtonsoft.json']
        1
        >>> list(d)
        ['Newtonsoft.Json']
    """

    def __init__(self, data: Mapping[str, V] | Iterable[tuple[str, V]] | None = None, **kwargs: V):
        self._store: dict[str, tuple[str, V]] = {}
        if data is not None:
            self.update(data)
        self.update(kwargs)

    def __setitem__(self, key: str, value: V) -> None:
        folded = _fold(key)
        existing = self._store.get(folded)
        original = existing[0] if existing is not None else key
        self._store[folded] = (original, value)

    def __getitem__(self, key: str) -> V:
        return self._store[_fold(key)][1]

    def __delitem__(self, key: str) -> None:
        del self._store[_fold(key)]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and _fold(key) in self._store

    def __iter__(self) -> Iterator[str]:
        return (original for original, _ in self._store.values())

    def __len__(self) -> int:
        return len(self._store)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self.items())!r})"


class CaseInsensitiveSet(MutableSet[str]):
    """Set of strings compared case-insensitively."""

    def __init__(self, values: Iterable[str] = ()):
        self._store: dict[str, str] = {}
        for value in values:
            self.add(value)

    def add(self, value: str) -> None:
        self._store.setdefault(_fold(value), value)

    def discard(self, value: str) -> None:
        self._store.pop(_fold(value), None)

    def __contains__(self, value: Any) -> bool:
        return isinstance(value, str) and _fold(value) in self._store

    def __iter__(self) -> Iterator[str]:
        return iter(self._store.values())

    def __len__(self) -> int:
        return len(self._store)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self)!r})"
