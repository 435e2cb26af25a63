"""Ordered multi-valued query parameters."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Optional, Union
from urllib.parse import parse_qsl, urlencode


class QueryParams:
    """
    Ordered mapping of query keys to one or more values.

    ``set`` always replaces the values of a key; there is no appending.
    Keys keep the position of their first insertion.

    Example:
        query = QueryParams.from_string("a=1&b=1")
        query.set("b", "4")
        query.encode()  # "a=1&b=4"
    """

    def __init__(self, items: Optional[Iterable[tuple[str, str]]] = None) -> None:
        self._data: dict[str, list[str]] = {}
        for key, value in items or ():
            self._data.setdefault(key, []).append(value)

    @classmethod
    def from_string(cls, query_string: str) -> QueryParams:
        """Parse a raw ``a=1&a=2&b=3`` string, keeping repeated keys."""
        return cls(parse_qsl(query_string.lstrip("?"), keep_blank_values=True))

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """First value for ``key``."""
        values = self._data.get(key)
        return values[0] if values else default

    def get_list(self, key: str) -> list[str]:
        return list(self._data.get(key, []))

    def set(self, key: str, *values: Union[str, int, float]) -> None:
        """Replace all values of ``key``."""
        if not values:
            raise ValueError(f"set() needs at least one value for {key!r}")
        self._data[key] = [str(value) for value in values]

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def update(self, other: QueryParams) -> None:
        """Replace the values of every key present in ``other``."""
        for key in other:
            self._data[key] = other.get_list(key)

    def copy(self) -> QueryParams:
        return QueryParams(self.items())

    def items(self) -> list[tuple[str, str]]:
        return [(key, value) for key, values in self._data.items() for value in values]

    def encode(self) -> str:
        return urlencode(self.items())

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._data))

    def __len__(self) -> int:
        return len(self._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, QueryParams):
            return NotImplemented
        return self._data == other._data

    def __repr__(self) -> str:
        return f"QueryParams({self.items()!r})"
