"""
Blood Ledger Django Adapter Views
=================================
Pass-through JSON views over the BloodLedger facade.

The caller principal comes from the X-Ledger-Principal header.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from bloodledger.adapters.django_api.responses import (
    error_response,
    ledger_error_response,
    status_for_error,
    success_response,
)
from bloodledger.adapters.django_api.wiring import build_ledger
from bloodledger.core.errors import LedgerError
from bloodledger.core.primitives import BloodType
from bloodledger.ledger import BloodLedger

logger = logging.getLogger("bloodledger.api")

PRINCIPAL_HEADER = "X-Ledger-Principal"

# (ledger, caller, params) → JSON-ready data
Operation = Callable[[BloodLedger, str, dict], Any]


def _json_error(code: str, message: str, status: int = 400) -> JsonResponse:
    return JsonResponse(
        error_response(code=code, message=message, details={}),
        status=status,
    )


def _parse_json_body(request: HttpRequest) -> dict[str, Any]:
    if not request.body:
        return {}
    try:
        parsed = json.loads(request.body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValueError("Request body must be valid JSON.") from exc
    if not isinstance(parsed, dict):
        raise ValueError("Request body must be a JSON object.")
    return parsed


def _method_not_allowed() -> JsonResponse:
    return _json_error(
        "METHOD_NOT_ALLOWED",
        "Method not allowed for this endpoint.",
        status=405,
    )


def _dispatch(request: HttpRequest, method: str, operation: Operation):
    if request.method != method:
        return _method_not_allowed()

    caller = request.headers.get(PRINCIPAL_HEADER, "").strip()
    if not caller:
        return _json_error(
            "UNAUTHENTICATED",
            f"{PRINCIPAL_HEADER} header is required.",
            status=401,
        )

    try:
        if method == "GET":
            params = request.GET.dict()
        else:
            params = _parse_json_body(request)
        data = operation(build_ledger(), caller, params)
    except LedgerError as exc:
        return JsonResponse(
            ledger_error_response(exc), status=status_for_error(exc),
        )
    except KeyError as exc:
        return _json_error("INVALID_REQUEST", f"{exc.args[0]} is required.")
    except (ValueError, TypeError) as exc:
        return _json_error("INVALID_REQUEST", str(exc))

    logger.debug(f"{method} {request.path} by {caller} OK")
    return JsonResponse(success_response(data))


def _event_data(event) -> dict:
    return {"event": event.to_dict()}


# ══════════════════════════════════════════════════════════════
# OPERATIONS
# ══════════════════════════════════════════════════════════════

def _register_donor(ledger, caller, body):
    return _event_data(ledger.register_donor(
        caller, body["name"], body["blood_type"], principal=body.get("principal"),
    ))


def _register_patient(ledger, caller, body):
    return _event_data(ledger.register_patient(
        caller, body["name"], body["blood_type"], principal=body.get("principal"),
    ))


def _grant_permission(ledger, caller, body):
    return _event_data(
        ledger.grant_permission(caller, body["principal"], body["role"])
    )


def _revoke_permission(ledger, caller, body):
    return _event_data(
        ledger.revoke_permission(caller, body["principal"], body["role"])
    )


def _read_permission(ledger, caller, params):
    principal = params["principal"]
    role = params["role"]
    return {
        "principal": principal,
        "role": role.upper(),
        "permitted": ledger.is_permitted(principal, role),
    }


def _donate(ledger, caller, body):
    return _event_data(ledger.donate(caller, body["blood_type"], body["amount"]))


def _read_inventory(ledger, caller, params):
    blood_type = params.get("blood_type")
    if blood_type:
        return {
            "blood_type": blood_type.upper(),
            "amount": ledger.inventory(blood_type),
            "total": ledger.total_inventory(),
        }
    return {
        "buckets": {bt.value: ledger.inventory(bt) for bt in BloodType},
        "total": ledger.total_inventory(),
    }


def _submit_request(ledger, caller, body):
    return _event_data(ledger.submit_request(
        caller, body["blood_type"], body["amount"], patient=body.get("patient"),
    ))


def _respond_to_request(ledger, caller, body):
    return _event_data(ledger.respond_to_request(
        caller,
        body["patient"],
        body["blood_type"],
        body["approved"],
        body["amount"],
    ))


def _read_requests(ledger, caller, params):
    requests = ledger.get_requests(caller, params["patient"], params["blood_type"])
    return {"requests": [r.to_dict() for r in requests]}


def _read_responses(ledger, caller, params):
    responses = ledger.get_responses(caller, params["patient"])
    return {"responses": [r.to_dict() for r in responses]}


def _add_hospital(ledger, caller, body):
    return _event_data(ledger.add_hospital(
        caller, body["principal"], body["name"], body["location"],
    ))


def _locate_hospital(ledger, caller, params):
    name, location = ledger.locate_hospital(params["principal"])
    return {"name": name, "location": location}


def _list_registered(ledger, caller, params):
    donors, patients = ledger.list_registered(caller)
    return {"donors": list(donors), "patients": list(patients)}


# ══════════════════════════════════════════════════════════════
# VIEWS
# ══════════════════════════════════════════════════════════════

@csrf_exempt
def donors_register_view(request: HttpRequest) -> JsonResponse:
    return _dispatch(request, "POST", _register_donor)


@csrf_exempt
def patients_register_view(request: HttpRequest) -> JsonResponse:
    return _dispatch(request, "POST", _register_patient)


@csrf_exempt
def permissions_grant_view(request: HttpRequest) -> JsonResponse:
    return _dispatch(request, "POST", _grant_permission)


@csrf_exempt
def permissions_revoke_view(request: HttpRequest) -> JsonResponse:
    return _dispatch(request, "POST", _revoke_permission)


@csrf_exempt
def permissions_view(request: HttpRequest) -> JsonResponse:
    return _dispatch(request, "GET", _read_permission)


@csrf_exempt
def donations_view(request: HttpRequest) -> JsonResponse:
    return _dispatch(request, "POST", _donate)


@csrf_exempt
def inventory_view(request: HttpRequest) -> JsonResponse:
    return _dispatch(request, "GET", _read_inventory)


@csrf_exempt
def requests_submit_view(request: HttpRequest) -> JsonResponse:
    return _dispatch(request, "POST", _submit_request)


@csrf_exempt
def requests_respond_view(request: HttpRequest) -> JsonResponse:
    return _dispatch(request, "POST", _respond_to_request)


@csrf_exempt
def requests_list_view(request: HttpRequest) -> JsonResponse:
    return _dispatch(request, "GET", _read_requests)


@csrf_exempt
def responses_list_view(request: HttpRequest) -> JsonResponse:
    return _dispatch(request, "GET", _read_responses)


@csrf_exempt
def hospitals_add_view(request: HttpRequest) -> JsonResponse:
    return _dispatch(request, "POST", _add_hospital)


@csrf_exempt
def hospitals_locate_view(request: HttpRequest) -> JsonResponse:
    return _dispatch(request, "GET", _locate_hospital)


@csrf_exempt
def directory_view(request: HttpRequest) -> JsonResponse:
    return _dispatch(request, "GET", _list_registered)
