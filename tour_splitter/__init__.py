"""
Tour Splitter

An authority-gated ledger that splits group tour costs across participants
by role weight, with tagged results, a hash-chained audit trail and
domain events for every state change.
"""

__version__ = "1.0.0"

from .errors import ErrorKind, Result, SplitError
from .models import ParticipantShare, RoleWeight, ShareKey, TourSplit
from .authority import AuthorityRegistry
from .splitter import SplitLedger, weight_of
from .logging_config import configure_logging

__all__ = [
    "ErrorKind", "Result", "SplitError",
    "ParticipantShare", "RoleWeight", "ShareKey", "TourSplit",
    "AuthorityRegistry", "SplitLedger", "weight_of", "configure_logging",
]
