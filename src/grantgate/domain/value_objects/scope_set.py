"""Scope set - canonical set of permitted action codes on a resource."""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

from loguru import logger

SCOPE_PREFIX = "@"
WILDCARD_SCOPE = "all"
STANDARD_SCOPES: tuple[str, ...] = ("r", "c", "u", "d", "e")


def _normalize(codes: Iterable[object]) -> list[str]:
    result = []
    for code in codes:
        if not isinstance(code, str):
            continue
        code = code.strip().lstrip(SCOPE_PREFIX).strip().lower()
        if code and code not in result:
            result.append(code)
    return result


def _split_raw(raw: object) -> list[str] | None:
    """Dispatch on the stored shape; None means the shape is not recognized."""
    if raw is None:
        return []
    if isinstance(raw, (list, tuple, set, frozenset)):
        return _normalize(raw)
    if not isinstance(raw, str):
        return None
    text = raw.strip()
    if not text:
        return []
    if text[0] == SCOPE_PREFIX:
        return _normalize(text.split(SCOPE_PREFIX))
    if text[0] == "[":
        try:
            decoded = json.loads(text)
        except ValueError:
            return None
        if not isinstance(decoded, list):
            return None
        return _normalize(decoded)
    return None


def _sort_key(code: str) -> tuple[int, int, str]:
    if code in STANDARD_SCOPES:
        return (0, STANDARD_SCOPES.index(code), code)
    if code == WILDCARD_SCOPE:
        return (1, 0, code)
    return (2, 0, code)


@dataclass(frozen=True)
class ScopeSet:
    """Immutable set of scope codes (r, c, u, d, e, ...).

    Accepts the compact ``@r@c@u`` form, a JSON array of codes or a plain list.
    Unrecognized input yields an empty set so resolution stays total.
    """

    _codes: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def of(cls, codes: Iterable[str]) -> ScopeSet:
        return cls(frozenset(_normalize(codes)))

    @classmethod
    def empty(cls) -> ScopeSet:
        return cls()

    @classmethod
    def parse(cls, raw: object, known: Iterable[str] | None = None) -> ScopeSet:
        """Parse a stored scope value; never raises."""
        codes = _split_raw(raw)
        if codes is None:
            logger.warning(f"Unrecognized scope encoding {raw!r:.64}, treating as empty")
            return cls()
        if known is not None:
            allowed = set(known)
            unknown = [c for c in codes if c not in allowed]
            if unknown:
                logger.warning(f"Dropping unknown scope codes {unknown}")
                codes = [c for c in codes if c in allowed]
        return cls(frozenset(codes))

    @property
    def codes(self) -> tuple[str, ...]:
        """Codes in canonical order."""
        return tuple(sorted(self._codes, key=_sort_key))

    def union(self, other: ScopeSet) -> ScopeSet:
        return ScopeSet(self._codes | other._codes)

    def __or__(self, other: ScopeSet) -> ScopeSet:
        return self.union(other)

    def contains(self, code: str) -> bool:
        """True when the code is granted, directly or through the wildcard."""
        code = code.strip().lstrip(SCOPE_PREFIX).lower()
        return code in self._codes or WILDCARD_SCOPE in self._codes

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and self.contains(code)

    def serialize(self) -> str:
        """Canonical compact form, e.g. ``@r@c@u``."""
        return "".join(f"{SCOPE_PREFIX}{code}" for code in self.codes)

    def __iter__(self) -> Iterator[str]:
        return iter(self.codes)

    def __len__(self) -> int:
        return len(self._codes)

    def __bool__(self) -> bool:
        return bool(self._codes)

    def __repr__(self) -> str:
        return f"ScopeSet({self.serialize()!r})"


def requested_scope_codes(raw: object, default: Iterable[str] = STANDARD_SCOPES) -> list[str]:
    """Codes of a check request in the order the caller listed them."""
    codes = _split_raw(raw)
    if not codes:
        if codes is None:
            logger.warning(f"Unrecognized requested scopes {raw!r:.64}, checking defaults")
        return list(default)
    return codes
