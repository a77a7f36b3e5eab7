from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Union


class Role(str, Enum):
    DINER = "diner"
    ADMIN = "admin"
    FRANCHISEE = "franchisee"


@dataclass(frozen=True)
class RoleAssignment:
    role: Role
    object_id: int = 0

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"role": self.role.value}
        if self.object_id:
            data["objectId"] = self.object_id
        return data

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any]) -> "RoleAssignment":
        return cls(role=Role(str(raw.get("role", "")).strip().lower()), object_id=int(raw.get("objectId") or 0))


@dataclass(frozen=True)
class Identity:
    """Authenticated caller resolved for one request."""

    id: int
    name: str = ""
    email: str = ""
    roles: frozenset[RoleAssignment] = field(default_factory=frozenset)

    def roles_payload(self) -> list[dict[str, Any]]:
        ordered = sorted(self.roles, key=lambda assignment: (assignment.role.value, assignment.object_id))
        return [assignment.to_dict() for assignment in ordered]


class _FaultedIdentity:
    """Verification blew up on infrastructure, not on the token. Never authenticated."""

    _instance: "_FaultedIdentity | None" = None

    def __new__(cls) -> "_FaultedIdentity":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "FAULTED"


FAULTED = _FaultedIdentity()

ResolvedIdentity = Union[Identity, _FaultedIdentity, None]


def build_roles(assignments: Iterable[Mapping[str, Any] | RoleAssignment]) -> frozenset[RoleAssignment]:
    roles = set()
    for assignment in assignments:
        if isinstance(assignment, RoleAssignment):
            roles.add(assignment)
        else:
            roles.add(RoleAssignment.from_mapping(assignment))
    return frozenset(roles)


def has_role(identity: Identity | None, role: Role, object_id: int | None = None) -> bool:
    if not isinstance(identity, Identity):
        return False
    for assignment in identity.roles:
        if assignment.role != role:
            continue
        if object_id is None or assignment.object_id == object_id:
            return True
    return False
