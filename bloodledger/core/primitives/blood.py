"""
Blood Ledger Primitives — Blood Types and Roles
================================================
No compatibility rules live here: a blood type is only a
bucket key for inventory and request queues.
"""

from __future__ import annotations

from enum import Enum
from typing import Union


class BloodType(Enum):
    """ABO group used to key inventory buckets and request queues."""
    A = "A"
    B = "B"
    AB = "AB"
    O = "O"


class Role(Enum):
    """Roles that carry a permission flag in the registry."""
    DONOR = "DONOR"
    PATIENT = "PATIENT"


def parse_blood_type(value: Union[str, BloodType]) -> BloodType:
    """Accept an enum member or its (case-insensitive) name."""
    if isinstance(value, BloodType):
        return value
    if not isinstance(value, str):
        raise ValueError(
            f"blood_type must be a string, got {type(value).__name__}."
        )
    try:
        return BloodType(value.strip().upper())
    except ValueError:
        raise ValueError(
            f"blood_type '{value}' not valid. "
            f"Must be one of: {[b.value for b in BloodType]}"
        ) from None


def parse_role(value: Union[str, Role]) -> Role:
    if isinstance(value, Role):
        return value
    if not isinstance(value, str):
        raise ValueError(f"role must be a string, got {type(value).__name__}.")
    try:
        return Role(value.strip().upper())
    except ValueError:
        raise ValueError(
            f"role '{value}' not valid. "
            f"Must be one of: {[r.value for r in Role]}"
        ) from None
