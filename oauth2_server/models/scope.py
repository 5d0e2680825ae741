"""
Scope value type.

A scope is an ordered set of scope tokens. Tokens are made of NQCHAR
characters and are separated by single spaces.

https://datatracker.ietf.org/doc/html/rfc6749#section-3.3
"""

import re
from typing import Iterable, Iterator, List, Optional, Union

from ..errors import InvalidScope

VSCHAR = re.compile(r"[\x20-\x7e]")
NQCHAR = re.compile(r"[\x21\x23-\x5b\x5d-\x7e]")
NQSCHAR = re.compile(r"[\x20\x21\x23-\x5b\x5d-\x7e]")

SCOPE = re.compile(rf"^(?:{NQCHAR.pattern}+(?: {NQCHAR.pattern}+)*)?$")
SCOPE_TOKEN = re.compile(rf"{NQCHAR.pattern}+")

ScopeLike = Union["Scope", str]


class Scope:
    """
    A basic implementation of scope.

    Equality and containment compare token sets, so ``Scope("a b")`` equals
    ``Scope("b a")``. The string form keeps insertion order and is cached
    until the scope is mutated. Scopes are mutable; use ``Scope.from_scope``
    to get an independent copy.
    """

    __hash__ = None

    def __init__(self, scope: Optional[str] = None):
        if scope and not SCOPE.match(scope):
            raise InvalidScope("invalid scope")
        self._tokens = dict.fromkeys(SCOPE_TOKEN.findall(scope)) if scope else {}
        self._string_cache: Optional[str] = None

    @classmethod
    def _coerce(cls, scope: ScopeLike) -> "Scope":
        return cls(scope) if isinstance(scope, str) else scope

    @classmethod
    def from_scope(cls, scope: ScopeLike) -> "Scope":
        """Creates a new scope from a scope or scope string."""
        if isinstance(scope, str):
            return cls(scope)
        result = cls()
        result._extend(scope)
        return result

    @classmethod
    def union(cls, a: ScopeLike, b: ScopeLike) -> "Scope":
        """Creates a new scope with all scope tokens from both scopes."""
        return cls.from_scope(a).add(b)

    @classmethod
    def intersection(cls, a: ScopeLike, b: ScopeLike) -> "Scope":
        """Creates a new scope with all scope tokens present in both scopes."""
        a = cls._coerce(a)
        b = cls._coerce(b)
        result = cls()
        result._extend(token for token in a if token in b)
        return result

    def _extend(self, tokens: Iterable[str]) -> None:
        for token in tokens:
            self._tokens[token] = None
        self._string_cache = None

    def clear(self) -> "Scope":
        """Deletes all scope tokens from this scope."""
        self._tokens = {}
        self._string_cache = None
        return self

    def add(self, scope: ScopeLike) -> "Scope":
        """Adds all scope tokens in the passed in scope to this scope."""
        self._extend(self._coerce(scope))
        return self

    def remove(self, scope: ScopeLike) -> "Scope":
        """Removes all scope tokens in the passed in scope from this scope."""
        for token in self._coerce(scope):
            self._tokens.pop(token, None)
        self._string_cache = None
        return self

    def has(self, scope: ScopeLike) -> bool:
        """Checks that this scope has all scope tokens in the passed in scope."""
        return all(token in self._tokens for token in self._coerce(scope))

    def equals(self, scope: ScopeLike) -> bool:
        """Checks that this scope has exactly the same tokens as the passed in scope."""
        scope = self._coerce(scope)
        return len(self) == len(scope) and self.has(scope)

    def tokens(self) -> List[str]:
        """Returns the scope tokens in insertion order."""
        return list(self._tokens)

    def to_json(self) -> str:
        """Converts the scope to a JSON representation."""
        return str(self)

    def __str__(self) -> str:
        if self._string_cache is None:
            self._string_cache = " ".join(self._tokens)
        return self._string_cache

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Scope):
            return self.equals(other)
        return NotImplemented

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._tokens))

    def __len__(self) -> int:
        return len(self._tokens)

    def __contains__(self, token: object) -> bool:
        return token in self._tokens
