"""
Cohort: a query-only set of patient identifiers.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Cohort:
    """Named set of patient ids; never persisted."""

    member_ids: frozenset[int] = field(default_factory=frozenset)
    name: str | None = None

    @classmethod
    def of(cls, *patient_ids: int, name: str | None = None) -> "Cohort":
        return cls(frozenset(patient_ids), name)

    @classmethod
    def parse(cls, ids: str, name: str | None = None) -> "Cohort":
        """Build a cohort from a comma or whitespace separated id string, e.g. ``"6, 7"``."""
        tokens = ids.replace(",", " ").split()
        return cls(frozenset(int(token) for token in tokens), name)

    def union(self, other: Iterable[int]) -> "Cohort":
        return Cohort(self.member_ids | frozenset(other), self.name)

    def __contains__(self, patient_id: object) -> bool:
        return patient_id in self.member_ids

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self.member_ids))

    def __len__(self) -> int:
        return len(self.member_ids)
