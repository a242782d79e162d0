"""
Authority Registry Module

The set of principals allowed to update tour splits and close tours.
Membership is maintained by the host; the ledger only asks whether a
caller belongs to it.
"""

import threading
from typing import Iterable, List, Optional

from .audit import AuditEventType, AuditTrail
from .config import get_config
from .logging_config import get_logger, log_action


def is_valid_principal(principal: object, burn_principal: str) -> bool:
    """A principal is any non-empty string other than the burn sentinel"""
    return isinstance(principal, str) and bool(principal) and principal != burn_principal


class AuthorityRegistry:
    """Membership set of authority principals"""

    def __init__(self, principals: Iterable[str] = (),
                 audit_trail: Optional[AuditTrail] = None,
                 burn_principal: Optional[str] = None):
        self.audit_trail = audit_trail
        self.burn_principal = burn_principal or get_config().burn_principal
        self.logger = get_logger("tour_splitter.authority")
        # dict keeps grant order for listing
        self._members: dict = {}
        self._lock = threading.RLock()

        for principal in principals:
            self.grant(principal)

    def grant(self, principal: str, granted_by: Optional[str] = None) -> bool:
        """
        Add a principal to the authority set

        Returns:
            True if the principal was added, False if it was already a member

        Raises:
            ValueError: If the principal is empty or the burn sentinel
        """
        if not is_valid_principal(principal, self.burn_principal):
            raise ValueError(f"Invalid authority principal: {principal!r}")

        with self._lock:
            if principal in self._members:
                return False
            self._members[principal] = True

        log_action(self.logger, "info", "Authority granted",
                   principal=granted_by, action="grant_authority",
                   resource=f"authority:{principal}")
        if self.audit_trail:
            self.audit_trail.log_event(
                AuditEventType.AUTHORITY_GRANTED,
                entity_type="authority",
                entity_id=principal,
                principal=granted_by
            )
        return True

    def revoke(self, principal: str, revoked_by: Optional[str] = None) -> bool:
        """
        Remove a principal from the authority set

        Returns:
            True if the principal was removed, False if it was not a member
        """
        with self._lock:
            if principal not in self._members:
                return False
            del self._members[principal]

        log_action(self.logger, "info", "Authority revoked",
                   principal=revoked_by, action="revoke_authority",
                   resource=f"authority:{principal}")
        if self.audit_trail:
            self.audit_trail.log_event(
                AuditEventType.AUTHORITY_REVOKED,
                entity_type="authority",
                entity_id=principal,
                principal=revoked_by
            )
        return True

    def is_authority(self, principal: Optional[str]) -> bool:
        with self._lock:
            return principal in self._members

    def list_authorities(self) -> List[str]:
        """Members in the order they were granted"""
        with self._lock:
            return list(self._members)

    def __contains__(self, principal: object) -> bool:
        return self.is_authority(principal)

    def __len__(self) -> int:
        with self._lock:
            return len(self._members)
