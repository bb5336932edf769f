"""
Explicit role table: identity -> set of administrative roles.

All authorization decisions go through ``RoleTable.has_role`` (via the guard
layer) rather than ad-hoc owner comparisons.
"""

from __future__ import annotations

from enum import Enum, unique
from typing import Dict, FrozenSet, Mapping, Set

from .balances import Identity


@unique
class Role(Enum):
    ADMIN = "admin"  # grants and revokes roles
    PAUSER = "pauser"  # pauses and unpauses the exchange


class RoleTable:
    def __init__(self) -> None:
        self._roles: Dict[Identity, Set[Role]] = {}

    def has_role(self, identity: Identity, role: Role) -> bool:
        return role in self._roles.get(identity, ())

    def roles_of(self, identity: Identity) -> FrozenSet[Role]:
        return frozenset(self._roles.get(identity, ()))

    def grant(self, identity: Identity, role: Role) -> bool:
        """Grant ``role``. Returns False if the identity already held it."""
        held = self._roles.setdefault(identity, set())
        if role in held:
            return False
        held.add(role)
        return True

    def revoke(self, identity: Identity, role: Role) -> bool:
        """Revoke ``role``. Returns False if the identity did not hold it."""
        held = self._roles.get(identity)
        if not held or role not in held:
            return False
        held.discard(role)
        if not held:
            del self._roles[identity]
        return True

    def members(self, role: Role) -> FrozenSet[Identity]:
        return frozenset(identity for identity, held in self._roles.items() if role in held)

    def get_all(self) -> Mapping[Identity, FrozenSet[Role]]:
        return {identity: frozenset(held) for identity, held in self._roles.items()}

    def restore(self, snapshot: Mapping[Identity, FrozenSet[Role]]) -> None:
        self._roles = {identity: set(held) for identity, held in snapshot.items() if held}

    def __repr__(self) -> str:
        return f"RoleTable({len(self._roles)} members)"
