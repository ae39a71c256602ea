"""
Blood Ledger
============
Permissioned ledger for blood donors, patients, hospitals,
blood-type inventory and the patient request workflow.

Every state change is a Command judged by policies, sealed as an
event, and applied to engine projections.
"""

from bloodledger.core.config import LedgerConfig
from bloodledger.core.errors import (
    AlreadyPermitted,
    AlreadyRegistered,
    AlreadyResponded,
    InsufficientInventory,
    InvalidCommand,
    LedgerError,
    NoSuchRequest,
    NotFound,
    NotPermitted,
    NotRegistered,
    PermissionDenied,
    RequestPending,
)
from bloodledger.core.primitives import BloodType, Role
from bloodledger.ledger import BloodLedger

__all__ = [
    "BloodLedger",
    "LedgerConfig",
    "BloodType",
    "Role",
    "LedgerError",
    "PermissionDenied",
    "AlreadyRegistered",
    "NotRegistered",
    "AlreadyPermitted",
    "NotPermitted",
    "NoSuchRequest",
    "AlreadyResponded",
    "NotFound",
    "InsufficientInventory",
    "RequestPending",
    "InvalidCommand",
]
