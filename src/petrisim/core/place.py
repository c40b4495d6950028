"""
Place: a named, ordered bag of tokens.

Insertion order carries no meaning for the model, but iteration is stable so
that "take the first N matching tokens" is deterministic. Removal always goes
through explicit indices: the caller names the exact tokens it takes.
"""

from __future__ import annotations
from collections import Counter
from typing import Iterable, Iterator

from petrisim.core.errors import InvariantViolationError
from petrisim.core.tokens import Token, TokenType


class Place:
    """Container of tokens, identified by name within a net."""

    def __init__(self, name: str, tokens: Iterable[Token] = ()):
        self.name = name
        self._tokens: list[Token] = []
        self._ids: set[int] = set()
        for token in tokens:
            self.add(token)

    def __len__(self) -> int:
        return len(self._tokens)

    def __iter__(self) -> Iterator[Token]:
        return iter(self._tokens)

    def __repr__(self) -> str:
        return f"Place(name={self.name!r}, tokens={len(self._tokens)})"

    @property
    def tokens(self) -> tuple[Token, ...]:
        """Read-only view of the current tokens, in place order."""
        return tuple(self._tokens)

    def count(self, token_type: TokenType) -> int:
        """Number of tokens with the given type tag."""
        return sum(1 for token in self._tokens if token.type_tag is token_type)

    def counts(self) -> Counter:
        """Counts per type tag (types with zero tokens are absent)."""
        return Counter(token.type_tag for token in self._tokens)

    def has_cancer(self) -> bool:
        """True if at least one Cancer-tagged token is present."""
        return any(token.is_cancer for token in self._tokens)

    def contains(self, token_id: int) -> bool:
        return token_id in self._ids

    def indices_of(
        self,
        token_type: TokenType,
        limit: int | None = None,
        exclude: Iterable[int] = (),
    ) -> list[int]:
        """
        Indices of tokens with ``token_type``, in place order.

        Args:
            token_type: Type tag to match
            limit: Stop after this many matches (all matches if None)
            exclude: Indices already claimed by the caller

        Returns:
            Ascending list of indices
        """
        skip = set(exclude)
        found = []
        for i, token in enumerate(self._tokens):
            if limit is not None and len(found) >= limit:
                break
            if i not in skip and token.type_tag is token_type:
                found.append(i)
        return found

    def add(self, token: Token) -> None:
        """Insert a token. A duplicate id is an invariant violation."""
        if token.token_id in self._ids:
            raise InvariantViolationError(
                f"Place {self.name!r} already holds token {token.token_id}"
            )
        self._tokens.append(token)
        self._ids.add(token.token_id)

    def remove_at(self, indices: Iterable[int]) -> list[Token]:
        """
        Remove the tokens at the given indices.

        Returns the removed tokens in ascending index order. Out-of-range or
        repeated indices raise InvariantViolationError before anything is
        removed.
        """
        ordered = sorted(indices)
        if len(set(ordered)) != len(ordered):
            raise InvariantViolationError(
                f"Repeated removal index in place {self.name!r}: {ordered}"
            )
        if ordered and (ordered[0] < 0 or ordered[-1] >= len(self._tokens)):
            raise InvariantViolationError(
                f"Removal index out of range in place {self.name!r}: {ordered}"
            )

        removed = [self._tokens[i] for i in ordered]
        for i in reversed(ordered):
            del self._tokens[i]
        for token in removed:
            self._ids.discard(token.token_id)
        return removed

    def replace_tokens(self, tokens: Iterable[Token]) -> None:
        """Reset contents wholesale (used when restoring a checkpoint)."""
        self._tokens = []
        self._ids = set()
        for token in tokens:
            self.add(token)
