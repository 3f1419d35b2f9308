"""Append-only two-way mapping between keys and integer codes."""

from __future__ import annotations

from typing import Generic, Hashable, Iterator, TypeVar

from .errors import DuplicateCodeError, DuplicateKeyError, NotFoundError

K = TypeVar("K", bound=Hashable)
C = TypeVar("C", bound=Hashable)


class Bijection(Generic[K, C]):
    """A fixed one-to-one mapping ``key <-> code``.

    Entries are never removed. Inserting a pair that is already present is
    a no-op; inserting a pair that would break uniqueness in either
    direction raises.

    Example::

        labels = Bijection()
        labels.insert("positive", 1)
        labels.code_of("positive")  # 1
        labels.key_of(1)            # "positive"
    """

    def __init__(self) -> None:
        self._codes: dict[K, C] = {}
        self._keys: dict[C, K] = {}

    def insert(self, key: K, code: C) -> None:
        """Register ``key <-> code``.

        Raises:
            DuplicateKeyError: If ``key`` already maps to a different code.
            DuplicateCodeError: If ``code`` already maps to a different key.
        """
        if key in self._codes and self._codes[key] != code:
            raise DuplicateKeyError(
                f"Key {key!r} is already mapped to {self._codes[key]!r}, not {code!r}"
            )
        if code in self._keys and self._keys[code] != key:
            raise DuplicateCodeError(
                f"Code {code!r} is already mapped to {self._keys[code]!r}, not {key!r}"
            )
        self._codes[key] = code
        self._keys[code] = key

    def code_of(self, key: K) -> C:
        try:
            return self._codes[key]
        except KeyError:
            raise NotFoundError(f"No code for key {key!r}") from None

    def key_of(self, code: C) -> K:
        try:
            return self._keys[code]
        except KeyError:
            raise NotFoundError(f"No key for code {code!r}") from None

    def has_key(self, key: K) -> bool:
        return key in self._codes

    def has_code(self, code: C) -> bool:
        return code in self._keys

    def items(self) -> Iterator[tuple[K, C]]:
        """Iterate ``(key, code)`` pairs in insertion order."""
        return iter(self._codes.items())

    def __len__(self) -> int:
        return len(self._codes)

    def __contains__(self, key: object) -> bool:
        return key in self._codes

    def __repr__(self) -> str:
        return f"Bijection({dict(self._codes)!r})"
