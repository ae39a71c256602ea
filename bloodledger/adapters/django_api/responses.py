"""
Blood Ledger HTTP — Response Envelope and Error Mapping
=======================================================
Every response is {"ok", "data", "error", "meta"}.
"""

from __future__ import annotations

from typing import Any, Optional

from bloodledger.core.commands.rejection import ReasonCode
from bloodledger.core.errors import InvalidCommand, LedgerError


STATUS_BY_CODE = {
    ReasonCode.PERMISSION_DENIED: 403,
    ReasonCode.NOT_FOUND: 404,
    ReasonCode.NO_SUCH_REQUEST: 404,
}

DEFAULT_CONFLICT_STATUS = 409


def success_response(
    data: Any,
    *,
    meta: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    return {"ok": True, "data": data, "error": None, "meta": meta or {}}


def error_response(
    *,
    code: str,
    message: str,
    details: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    return {
        "ok": False,
        "data": None,
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
        },
        "meta": {},
    }


def status_for_error(error: LedgerError) -> int:
    if isinstance(error, InvalidCommand):
        return 400
    return STATUS_BY_CODE.get(error.code, DEFAULT_CONFLICT_STATUS)


def ledger_error_response(error: LedgerError) -> dict[str, Any]:
    return error_response(
        code=error.code,
        message=error.message,
        details={"policy_name": error.policy_name},
    )
