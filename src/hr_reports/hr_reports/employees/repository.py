from __future__ import annotations

from typing import Protocol, Sequence

from ..reports.predicates import RosterPredicate
from .model import RosterEntry


class RosterRepository(Protocol):
    """Read access to non-deleted roster entries of one tenant.

    Note (DIP): report services depend on this interface, never on a concrete store.
    """

    def find(self, predicate: RosterPredicate) -> Sequence[RosterEntry]:
        raise NotImplementedError

    def find_ids_in_department(self, *, company_id: str, department_id: str) -> Sequence[str]:
        raise NotImplementedError
