"""
Blood Ledger Core Primitives
============================
Engine-agnostic value types shared by every engine.

Primitives:
    blood — blood type and permission role enums
"""

from bloodledger.core.primitives.blood import (
    BloodType,
    Role,
    parse_blood_type,
    parse_role,
)

__all__ = [
    "BloodType",
    "Role",
    "parse_blood_type",
    "parse_role",
]
