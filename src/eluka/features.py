"""Feature space: stable integer IDs for symbolic feature keys.

A feature key is either a plain name (``"length"``) or a categorical
field/value composite (``"colour||red"``). IDs start at 1, are handed out
in the order features are first observed, and are never reused.

Classification must not grow the space, so the model resolves query
features through a :class:`FrozenFeatureSpace` view which knows every ID
of its base space but never mints new ones.
"""

from __future__ import annotations

import threading
from typing import Iterable, Iterator, Optional, Union

from .bijection import Bijection
from .errors import NotFoundError

KEY_SEPARATOR = "||"

FeatureRef = Union[int, str, tuple, list]


def feature_key(field: str, value: object) -> str:
    """Build the composite key of a categorical feature."""
    return f"{field}{KEY_SEPARATOR}{value}"


def split_feature_key(key: str) -> str | tuple[str, str]:
    """Split a composite key into ``(field, value)``; plain keys pass through."""
    if KEY_SEPARATOR not in key:
        return key
    field, value = key.split(KEY_SEPARATOR, 1)
    return field, value


class FeatureSpace:
    """Mutable, append-only registry of features for one model.

    Example::

        space = FeatureSpace()
        space.id_for("word||cat")   # 1
        space.id_for("word||dog")   # 2
        space.id_for("word||cat")   # 1
        space.key_for(2)            # "word||dog"
    """

    def __init__(self) -> None:
        self._ids: Bijection[str, int] = Bijection()
        self._next_id = 1
        self._lock = threading.Lock()

    @property
    def root(self) -> "FeatureSpace":
        """The growable space that owns the IDs."""
        return self

    @property
    def is_frozen(self) -> bool:
        return False

    def id_for(self, key: str) -> int:
        """Return the ID of ``key``, assigning the next free ID if it is new."""
        with self._lock:
            if self._ids.has_key(key):
                return self._ids.code_of(key)
            feature_id = self._next_id
            self._ids.insert(key, feature_id)
            self._next_id += 1
            return feature_id

    def resolve(self, key: str) -> Optional[int]:
        """ID used when building a data point; always succeeds on a growable space."""
        return self.id_for(key)

    def lookup(self, key: str) -> Optional[int]:
        """Existing ID of ``key`` or None, without assigning one."""
        if self._ids.has_key(key):
            return self._ids.code_of(key)
        return None

    def key_for(self, feature_id: int) -> str:
        """Reverse lookup.

        Raises:
            NotFoundError: If ``feature_id`` was never assigned.
        """
        return self._ids.key_of(feature_id)

    def frozen(self) -> "FrozenFeatureSpace":
        """A read-only view that drops unseen features instead of growing."""
        return FrozenFeatureSpace(self)

    def selected_subset(self, features: Iterable[FeatureRef]) -> frozenset[int]:
        """Resolve a feature selection to the set of IDs it names.

        Entries may be IDs, feature keys, or ``(field, value)`` pairs as
        returned by feature suggestion (tuples, or lists when read back
        from JSON). The space itself is unchanged; the result only filters
        what gets serialized.

        Raises:
            NotFoundError: If an entry names no known feature.
        """
        ids: set[int] = set()
        for ref in features:
            if isinstance(ref, bool):
                raise NotFoundError(f"Not a feature reference: {ref!r}")
            if isinstance(ref, int):
                self.key_for(ref)
                ids.add(ref)
                continue
            if isinstance(ref, (tuple, list)):
                if len(ref) != 2:
                    raise NotFoundError(f"Not a feature reference: {ref!r}")
                key = feature_key(*ref)
            elif isinstance(ref, str):
                key = ref
            else:
                raise NotFoundError(f"Not a feature reference: {ref!r}")
            feature_id = self.lookup(key)
            if feature_id is None:
                raise NotFoundError(f"Unknown feature {key!r}")
            ids.add(feature_id)
        return frozenset(ids)

    def items(self) -> Iterator[tuple[str, int]]:
        """Iterate ``(key, id)`` pairs in ID order."""
        return self._ids.items()

    def to_dict(self) -> dict:
        return {"features": [[key, fid] for key, fid in self.items()]}

    @classmethod
    def from_dict(cls, data: dict) -> "FeatureSpace":
        """Restore a space, keeping every ID exactly as it was assigned."""
        space = cls()
        for key, feature_id in data.get("features", []):
            space._ids.insert(key, int(feature_id))
            space._next_id = max(space._next_id, int(feature_id) + 1)
        return space

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, key: object) -> bool:
        return key in self._ids

    def __repr__(self) -> str:
        return f"FeatureSpace(size={len(self)})"


class FrozenFeatureSpace:
    """Read-only view of a FeatureSpace used at classification time."""

    def __init__(self, base: FeatureSpace) -> None:
        self._base = base

    @property
    def root(self) -> FeatureSpace:
        return self._base

    @property
    def is_frozen(self) -> bool:
        return True

    def id_for(self, key: str) -> int:
        """ID of a known feature.

        Raises:
            NotFoundError: If ``key`` was never seen by the base space.
        """
        feature_id = self._base.lookup(key)
        if feature_id is None:
            raise NotFoundError(f"Unknown feature {key!r} in frozen feature space")
        return feature_id

    def resolve(self, key: str) -> Optional[int]:
        """ID of a known feature, or None for an out-of-vocabulary one."""
        return self._base.lookup(key)

    def lookup(self, key: str) -> Optional[int]:
        return self._base.lookup(key)

    def key_for(self, feature_id: int) -> str:
        return self._base.key_for(feature_id)

    def __len__(self) -> int:
        return len(self._base)

    def __contains__(self, key: object) -> bool:
        return key in self._base

    def __repr__(self) -> str:
        return f"FrozenFeatureSpace(size={len(self)})"
