"""Typed containers shared across pipeline modules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class NormalizedName:
    """Canonical view of a raw name or filename.

    ``unstripped`` holds the filename tokens before noise words were dropped,
    when that differs from ``tokens``.
    """

    raw: str
    tokens: Tuple[str, ...]
    unstripped: Tuple[str, ...] = ()

    @property
    def full(self) -> str:
        return " ".join(self.tokens)

    @property
    def compact(self) -> str:
        return "".join(self.tokens)

    @property
    def token_set(self) -> frozenset:
        return frozenset(self.tokens)

    @property
    def degenerate(self) -> bool:
        return not self.tokens

    def views(self) -> Tuple["NormalizedName", ...]:
        """This name, plus its noise-kept spelling when there is one."""
        if not self.unstripped:
            return (self,)
        return (self, NormalizedName(raw=self.raw, tokens=self.unstripped))


@dataclass(frozen=True)
class CandidateScore:
    """Score triple for one (file, student) pair, by input position."""

    file_index: int
    student_index: int
    score: float
