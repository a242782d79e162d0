"""
Test suite for the authority registry

Tests membership management, principal validation and audit logging of
grants and revocations.
"""

import pytest

from tour_splitter.audit import AuditTrail, AuditEventType
from tour_splitter.authority import AuthorityRegistry, is_valid_principal
from tour_splitter.storage import InMemoryStorage


BURN = "SP000000000000000000002Q6VF78"


@pytest.fixture
def audit():
    return AuditTrail(InMemoryStorage())


@pytest.fixture
def registry(audit):
    return AuthorityRegistry(audit_trail=audit)


class TestPrincipalValidation:
    """Test principal validity rules"""

    def test_regular_principal(self):
        assert is_valid_principal("ST1TEST", BURN)

    @pytest.mark.parametrize("principal", ["", None, 42, BURN])
    def test_invalid_principals(self, principal):
        assert not is_valid_principal(principal, BURN)


class TestAuthorityRegistry:
    """Test authority membership"""

    def test_initial_members(self):
        registry = AuthorityRegistry(["ST1A", "ST1B"])

        assert registry.list_authorities() == ["ST1A", "ST1B"]
        assert len(registry) == 2
        assert "ST1A" in registry

    def test_empty_by_default(self, registry):
        assert len(registry) == 0
        assert not registry.is_authority("ST1A")
        assert not registry.is_authority(None)

    def test_grant(self, registry):
        assert registry.grant("ST1A")
        assert registry.is_authority("ST1A")

    def test_grant_twice(self, registry):
        registry.grant("ST1A")

        assert not registry.grant("ST1A")
        assert len(registry) == 1

    def test_revoke(self, registry):
        registry.grant("ST1A")

        assert registry.revoke("ST1A")
        assert not registry.is_authority("ST1A")

    def test_revoke_non_member(self, registry):
        assert not registry.revoke("ST1A")

    @pytest.mark.parametrize("principal", ["", BURN])
    def test_grant_invalid_principal(self, registry, principal):
        with pytest.raises(ValueError, match="Invalid authority principal"):
            registry.grant(principal)
        assert len(registry) == 0

    def test_custom_burn_principal(self):
        registry = AuthorityRegistry(burn_principal="ST0BURN")

        with pytest.raises(ValueError):
            registry.grant("ST0BURN")
        assert registry.grant(BURN)

    def test_list_keeps_grant_order(self, registry):
        for principal in ("ST1C", "ST1A", "ST1B"):
            registry.grant(principal)
        registry.revoke("ST1A")

        assert registry.list_authorities() == ["ST1C", "ST1B"]


class TestAuthorityAudit:
    """Test audit events for membership changes"""

    def test_grant_and_revoke_audited(self, registry, audit):
        registry.grant("ST1A", granted_by="ST0ADMIN")
        registry.revoke("ST1A", revoked_by="ST0ADMIN")

        events = audit.get_events_for_entity("authority", "ST1A")
        assert [e.event_type for e in events] == [
            AuditEventType.AUTHORITY_GRANTED,
            AuditEventType.AUTHORITY_REVOKED,
        ]
        assert all(e.principal == "ST0ADMIN" for e in events)

    def test_no_op_changes_not_audited(self, registry, audit):
        registry.grant("ST1A")
        registry.grant("ST1A")
        registry.revoke("ST1B")

        assert audit.count_events() == 1

    def test_works_without_audit_trail(self):
        registry = AuthorityRegistry()

        assert registry.grant("ST1A")
        assert registry.revoke("ST1A")
