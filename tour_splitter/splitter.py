"""
Tour Split Ledger

Authority-gated registry of tour cost splits. The ledger owns two mappings,
tours by id and participant shares by (tour id, participant), and every
operation validates before it mutates, so a rejected call leaves both
mappings untouched.

Operations never raise for domain failures. They return a Result whose
failure value is an ErrorKind; see errors.py for the codes.
"""

import threading
from typing import Dict, Iterable, Optional, Union

from .audit import AuditEventType, AuditTrail
from .authority import AuthorityRegistry, is_valid_principal
from .config import SplitterConfig, get_config
from .errors import ErrorKind, Result
from .events import DomainEvent, EventDispatcher, EventPayload, create_tour_event
from .logging_config import get_logger, log_action
from .models import (
    ParticipantShare, RoleWeightLike, ShareKey, TourSplit,
    coerce_role_weights, role_names
)
from .storage import InMemoryStorage


# Every registered participant contributes this many units to the pool
BASELINE_UNITS = 100
DEFAULT_ROLE_WEIGHT = 100


def weight_of(tour: TourSplit, role: str, default: int = DEFAULT_ROLE_WEIGHT) -> int:
    """
    Look up a role's weight on a tour.

    Role names are not required to be unique; the first matching entry in
    declaration order wins. Roles the tour does not declare get `default`.
    """
    for entry in tour.role_weights:
        if entry.role == role:
            return entry.weight
    return default


class SplitLedger:
    """
    Ledger of tour splits and participant shares

    One instance per deployment. Calls are serialized by an internal lock,
    so each operation is observed either fully applied or not at all.
    """

    def __init__(
        self,
        authorities: Optional[AuthorityRegistry] = None,
        audit_trail: Optional[AuditTrail] = None,
        event_dispatcher: Optional[EventDispatcher] = None,
        config: Optional[SplitterConfig] = None
    ):
        self.config = config or get_config()
        self.default_split_rule = self.config.default_split_rule
        self.authority_contract: Optional[str] = None

        if authorities is None:
            authorities = AuthorityRegistry(burn_principal=self.config.burn_principal)
        self.authorities = authorities

        if audit_trail is None and self.config.enable_audit_logging:
            audit_trail = AuditTrail(InMemoryStorage())
        self.audit_trail = audit_trail

        if event_dispatcher is None and self.config.enable_events:
            event_dispatcher = EventDispatcher()
        self.event_dispatcher = event_dispatcher

        self._tours: Dict[int, TourSplit] = {}
        self._shares: Dict[ShareKey, ParticipantShare] = {}
        self._lock = threading.RLock()
        self.logger = get_logger("tour_splitter.ledger")

    # Authority

    def set_authority_contract(self, contract: str) -> Result:
        """
        Set the authority contract. Write-once: there is no update path.

        Fails with NOT_AUTHORIZED for the burn principal (or an empty one)
        and with AUTHORITY_NOT_SET once a contract is already in place.
        """
        with self._lock:
            if not is_valid_principal(contract, self.config.burn_principal):
                return self._reject("set_authority_contract", ErrorKind.NOT_AUTHORIZED,
                                    principal=contract)
            if self.authority_contract is not None:
                return self._reject("set_authority_contract", ErrorKind.AUTHORITY_NOT_SET,
                                    principal=contract)

            self.authority_contract = contract

            log_action(self.logger, "info", "Authority contract set",
                       principal=contract, action="set_authority_contract")
            self._audit(AuditEventType.AUTHORITY_CONTRACT_SET, "authority", contract, {}, contract)
            self._publish(EventPayload(
                event_type=DomainEvent.AUTHORITY_CONTRACT_SET,
                entity_type="authority",
                entity_id=contract,
                data={"authority_contract": contract}
            ))
            return Result.success(True)

    def _check_authority(self, caller: Optional[str]) -> Optional[ErrorKind]:
        if not self.authority_contract:
            return ErrorKind.AUTHORITY_NOT_SET
        if not self.authorities.is_authority(caller):
            return ErrorKind.NOT_AUTHORIZED
        return None

    # Reads

    def get_tour_split(self, tour_id: int) -> Optional[TourSplit]:
        """Copy of the tour's split, or None"""
        with self._lock:
            tour = self._tours.get(tour_id)
            return tour.copy() if tour else None

    def get_participant_share(self, tour_id: int, participant: str) -> Optional[ParticipantShare]:
        """Copy of the participant's share, or None"""
        with self._lock:
            share = self._shares.get(ShareKey(tour_id, participant))
            return share.copy() if share else None

    def get_participants(self, tour_id: int) -> Dict[str, ParticipantShare]:
        """Shares registered on a tour, keyed by participant, in registration order"""
        with self._lock:
            return {
                key.participant: share.copy()
                for key, share in self._shares.items()
                if key.tour_id == tour_id
            }

    def calculate_share(self, tour_id: int, role: str) -> Result:
        """
        Compute what a participant registering under `role` would owe.

        adjusted_total = current_participants * 100 + (100 - organizer_weight)
        share = total_cost * role_weight // adjusted_total

        A pool that comes out zero or negative (no participants yet and the
        organizer at the default weight, for instance) is resolved by the
        configured zero_pool_policy: "zero" yields a share of 0, "reject"
        fails with INVALID_WEIGHT.
        """
        with self._lock:
            tour = self._tours.get(tour_id)
            if tour is None:
                return Result.failure(ErrorKind.TOUR_NOT_FOUND)
            if not tour.is_open:
                return Result.failure(ErrorKind.TOUR_CLOSED)

            role_weight = weight_of(tour, role, self.config.default_role_weight)
            organizer_weight = weight_of(tour, self.config.organizer_role,
                                         self.config.default_role_weight)
            adjusted_total = tour.current_participants * BASELINE_UNITS + (BASELINE_UNITS - organizer_weight)

            if adjusted_total <= 0:
                self.logger.debug(
                    f"Degenerate pool for tour {tour_id}: adjusted total {adjusted_total}, "
                    f"policy {self.config.zero_pool_policy}"
                )
                if self.config.zero_pool_policy == "reject":
                    return Result.failure(ErrorKind.INVALID_WEIGHT)
                return Result.success(0)

            share = tour.total_cost * role_weight // adjusted_total
            self.logger.debug(f"Share for role {role!r} on tour {tour_id}: {share}")
            return Result.success(share)

    def validate_split(self, tour_id: int) -> Result:
        """
        Check whether the baseline share times the participant count
        reproduces the total cost exactly.

        A False value is not an error: truncating division usually leaves a
        remainder, so False means "approximately balanced". Any failure of
        the share calculation is reported as TOUR_CLOSED.
        """
        with self._lock:
            tour = self._tours.get(tour_id)
            if tour is None:
                return Result.failure(ErrorKind.TOUR_NOT_FOUND)

            share = self.calculate_share(tour_id, self.config.validation_role)
            if not share.ok:
                return Result.failure(ErrorKind.TOUR_CLOSED)

            return Result.success(tour.total_cost == share.value * tour.current_participants)

    # Mutations

    def register_tour(self, tour_id: int, tour: Union[TourSplit, dict]) -> TourSplit:
        """
        Seed a tour created by the host. Tour creation itself belongs to the
        host, so bad input here is a programming error and raises.

        Args:
            tour_id: Positive integer tour identifier
            tour: TourSplit or its dict form

        Returns:
            Copy of the stored TourSplit

        Raises:
            ValueError: If the id is taken or the record is inconsistent
        """
        if isinstance(tour, dict):
            tour = TourSplit.from_dict(tour)

        if isinstance(tour_id, bool) or not isinstance(tour_id, int) or tour_id <= 0:
            raise ValueError(f"Tour id must be a positive integer, got {tour_id!r}")
        if tour.total_cost <= 0:
            raise ValueError("Tour total cost must be positive")
        if tour.max_participants <= 0:
            raise ValueError("Tour capacity must be positive")
        if not 0 <= tour.current_participants <= tour.max_participants:
            raise ValueError(
                f"Participant count {tour.current_participants} outside 0..{tour.max_participants}"
            )
        if not self._weights_in_range(tour.role_weights):
            raise ValueError(f"Role weights must be in (0, {self.config.max_role_weight}]")

        with self._lock:
            if tour_id in self._tours:
                raise ValueError(f"Tour {tour_id} already exists")
            stored = tour.copy()
            self._tours[tour_id] = stored

            log_action(self.logger, "info", f"Tour {tour_id} registered",
                       action="register_tour", resource=f"tour:{tour_id}",
                       extra={"total_cost": stored.total_cost,
                              "max_participants": stored.max_participants})
            self._audit(AuditEventType.TOUR_REGISTERED, "tour", str(tour_id), stored.to_dict())
            self._publish(create_tour_event(DomainEvent.TOUR_REGISTERED, tour_id, stored))
            return stored.copy()

    def update_split(
        self,
        caller: str,
        tour_id: int,
        total_cost: int,
        max_participants: int,
        role_weights: Iterable[RoleWeightLike]
    ) -> Result:
        """
        Replace a tour's cost, capacity and role weights.

        Checks run in a fixed order and the first failure wins: authority
        contract, caller membership, capacity, cost, weights, tour existence.
        The participant count and open/closed status are kept, and closed
        tours can still be updated. A malformed role weight entry fails the
        weights check like an out-of-range one.
        """
        with self._lock:
            denied = self._check_authority(caller)
            if denied is not None:
                return self._reject("update_split", denied, caller, tour_id)
            if max_participants <= 0:
                return self._reject("update_split", ErrorKind.INVALID_PARTICIPANT, caller, tour_id)
            if total_cost <= 0:
                return self._reject("update_split", ErrorKind.INVALID_AMOUNT, caller, tour_id)
            try:
                weights = coerce_role_weights(role_weights)
            except TypeError:
                return self._reject("update_split", ErrorKind.INVALID_WEIGHT, caller, tour_id)
            if not self._weights_in_range(weights):
                return self._reject("update_split", ErrorKind.INVALID_WEIGHT, caller, tour_id)
            tour = self._tours.get(tour_id)
            if tour is None:
                return self._reject("update_split", ErrorKind.TOUR_NOT_FOUND, caller, tour_id)

            tour.total_cost = total_cost
            tour.max_participants = max_participants
            tour.role_weights = weights

            log_action(self.logger, "info", f"Split updated for tour {tour_id}",
                       principal=caller, action="update_split", resource=f"tour:{tour_id}",
                       extra={"total_cost": total_cost, "max_participants": max_participants,
                              "roles": role_names(weights)})
            self._audit(AuditEventType.TOUR_SPLIT_UPDATED, "tour", str(tour_id),
                        tour.to_dict(), caller)
            self._publish(create_tour_event(DomainEvent.TOUR_SPLIT_UPDATED, tour_id, tour,
                                            updated_by=caller))
            return Result.success(True)

    def add_participant(self, caller: str, tour_id: int, role: str) -> Result:
        """
        Register the caller on a tour under `role`.

        The share is fixed at registration time from the tour's state before
        the caller is counted. A share calculation failure is returned as-is.
        """
        with self._lock:
            tour = self._tours.get(tour_id)
            if tour is None:
                return self._reject("add_participant", ErrorKind.TOUR_NOT_FOUND, caller, tour_id)
            if not tour.is_open:
                return self._reject("add_participant", ErrorKind.TOUR_CLOSED, caller, tour_id)
            if tour.remaining_capacity <= 0:
                return self._reject("add_participant", ErrorKind.INVALID_PARTICIPANT, caller, tour_id)
            key = ShareKey(tour_id, caller)
            if key in self._shares:
                return self._reject("add_participant", ErrorKind.ALREADY_REGISTERED, caller, tour_id)

            share = self.calculate_share(tour_id, role)
            if not share.ok:
                return self._reject("add_participant", share.value, caller, tour_id)

            self._shares[key] = ParticipantShare(share=share.value, role=role)
            tour.current_participants += 1

            log_action(self.logger, "info", f"Participant registered on tour {tour_id}",
                       principal=caller, action="add_participant", resource=f"tour:{tour_id}",
                       extra={"role": role, "share": share.value})
            self._audit(AuditEventType.PARTICIPANT_REGISTERED, "participant_share",
                        f"{tour_id}:{caller}",
                        {"tour_id": tour_id, "role": role, "share": share.value,
                         "current_participants": tour.current_participants},
                        caller)
            self._publish(create_tour_event(DomainEvent.PARTICIPANT_ADDED, tour_id, tour,
                                            participant=caller, role=role, share=share.value))
            return share

    def close_tour(self, caller: str, tour_id: int) -> Result:
        """Close a tour for registration. Closing a closed tour succeeds."""
        with self._lock:
            denied = self._check_authority(caller)
            if denied is not None:
                return self._reject("close_tour", denied, caller, tour_id)
            tour = self._tours.get(tour_id)
            if tour is None:
                return self._reject("close_tour", ErrorKind.TOUR_NOT_FOUND, caller, tour_id)

            was_open = tour.status
            tour.status = False

            log_action(self.logger, "info", f"Tour {tour_id} closed",
                       principal=caller, action="close_tour", resource=f"tour:{tour_id}",
                       extra={"was_open": was_open})
            self._audit(AuditEventType.TOUR_CLOSED, "tour", str(tour_id),
                        {"was_open": was_open,
                         "current_participants": tour.current_participants},
                        caller)
            self._publish(create_tour_event(DomainEvent.TOUR_CLOSED, tour_id, tour,
                                            closed_by=caller))
            return Result.success(True)

    # Helpers

    def _weights_in_range(self, weights) -> bool:
        return all(0 < w.weight <= self.config.max_role_weight for w in weights)

    def _reject(self, action: str, kind: ErrorKind, principal: Optional[str] = None,
                tour_id: Optional[int] = None) -> Result:
        log_action(self.logger, "warning", f"{action} rejected: {kind.name}",
                   principal=principal, action=action,
                   resource=f"tour:{tour_id}" if tour_id is not None else None,
                   error_kind=kind.name)
        return Result.failure(kind)

    def _audit(self, event_type: AuditEventType, entity_type: str, entity_id: str,
               metadata: dict, principal: Optional[str] = None) -> None:
        if self.audit_trail is not None:
            self.audit_trail.log_event(event_type, entity_type, entity_id, metadata, principal)

    def _publish(self, event: EventPayload) -> None:
        if self.event_dispatcher is not None:
            self.event_dispatcher.publish(event)
