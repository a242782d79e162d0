"""
Ledger Data Model

Tour split records, role weights and participant shares. Records are plain
dataclasses; the ledger owns them and hands out copies.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Tuple, Union


@dataclass(frozen=True)
class RoleWeight:
    """A role's claim on the total cost, relative to a 100-unit baseline"""
    role: str
    weight: int

    def to_dict(self) -> Dict[str, Any]:
        return {"role": self.role, "weight": self.weight}


RoleWeightLike = Union[RoleWeight, Tuple[str, int], Mapping[str, Any]]


def coerce_role_weight(entry: RoleWeightLike) -> RoleWeight:
    """
    Normalize a role weight entry supplied by a host.

    Accepts a RoleWeight, a (role, weight) pair or a mapping with "role"
    and "weight" keys. Range checks are the ledger's job; this only fixes
    the shape.

    Raises:
        TypeError: If the entry has none of the accepted shapes
    """
    if isinstance(entry, RoleWeight):
        return entry
    if isinstance(entry, Mapping):
        if "role" not in entry or "weight" not in entry:
            raise TypeError(f"Role weight mapping needs 'role' and 'weight': {entry!r}")
        role, weight = entry["role"], entry["weight"]
    elif isinstance(entry, (tuple, list)) and len(entry) == 2:
        role, weight = entry
    else:
        raise TypeError(f"Unsupported role weight entry: {entry!r}")

    if not isinstance(role, str):
        raise TypeError(f"Role name must be a string, got {type(role).__name__}")
    if isinstance(weight, bool) or not isinstance(weight, int):
        raise TypeError(f"Role weight must be an integer, got {type(weight).__name__}")
    return RoleWeight(role=role, weight=weight)


def coerce_role_weights(entries: Iterable[RoleWeightLike]) -> Tuple[RoleWeight, ...]:
    """Normalize a sequence of role weight entries, keeping their order"""
    return tuple(coerce_role_weight(entry) for entry in entries)


@dataclass
class TourSplit:
    """
    Cost split rules and registration state for one tour.

    status=True means the tour is open for registration.
    """
    total_cost: int
    max_participants: int
    role_weights: Tuple[RoleWeight, ...] = field(default_factory=tuple)
    current_participants: int = 0
    status: bool = True

    def __post_init__(self):
        self.role_weights = coerce_role_weights(self.role_weights)

    @property
    def is_open(self) -> bool:
        return self.status

    @property
    def remaining_capacity(self) -> int:
        return max(self.max_participants - self.current_participants, 0)

    def copy(self) -> 'TourSplit':
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_cost": self.total_cost,
            "max_participants": self.max_participants,
            "role_weights": [w.to_dict() for w in self.role_weights],
            "current_participants": self.current_participants,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TourSplit':
        return cls(
            total_cost=data["total_cost"],
            max_participants=data["max_participants"],
            role_weights=data.get("role_weights", ()),
            current_participants=data.get("current_participants", 0),
            status=data.get("status", True),
        )


@dataclass
class ParticipantShare:
    """Computed cost owed by one participant of one tour"""
    share: int
    role: str
    paid: bool = False

    def copy(self) -> 'ParticipantShare':
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        return {"share": self.share, "role": self.role, "paid": self.paid}


class ShareKey(NamedTuple):
    """Composite key of a participant share"""
    tour_id: int
    participant: str


def role_names(weights: Iterable[RoleWeight]) -> List[str]:
    """Role names in declaration order, duplicates included"""
    return [w.role for w in weights]
