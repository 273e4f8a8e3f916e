# ============================================================================
# CHECK-IN BLUEPRINT
# ============================================================================
# STATUS: Trigger layer - Check-in endpoints
# PURPOSE: Azure Functions Blueprint for submitting and triaging check-ins
# EXPORTS: bp
# DEPENDENCIES: azure.functions, services.CheckInService, infrastructure.DirectoryClient
# ============================================================================
"""
Check-in Blueprint.

Register in function_app.py:
    from triggers.checkins_bp import bp as checkins_bp
    app.register_functions(checkins_bp)

Endpoints:
    POST /api/checkins                                   Submit a check-in for the caller
    GET  /api/checkins/latest                            Caller's latest check-in (404 when none)
    GET  /api/checkins/history?maxResults=               Caller's recent check-ins
    PUT  /api/checkins/{checkInId}                       Update one of the caller's check-ins
    POST /api/checkins/{userId}/{checkInId}/acknowledge  Responder acknowledges a request for help
    POST /api/checkins/{userId}/{checkInId}/resolve      Responder closes an acknowledged request
    GET  /api/checkins/needsassistance                   Open requests for help across all users
    GET  /api/checkins/user/{userId}?maxResults=         Another user's recent check-ins
"""

import azure.functions as func

from core.models import CheckInRecord, CheckInState, LocationPrecision, Principal, SafetyStatus
from exceptions import NotFoundError
from services import get_services
from util_logger import LoggerFactory, ComponentType

from .http_base import BaseHttpTrigger, HttpResult

logger = LoggerFactory.create_logger(ComponentType.TRIGGER, "CheckInsBlueprint")

bp = func.Blueprint()

_trigger = BaseHttpTrigger("checkins")

# Request bodies must name real enum values; camelCase and snake_case keys both bind
_ENUM_FIELDS = {
    "status": SafetyStatus,
    "state": CheckInState,
    "locationPrecision": LocationPrecision,
    "location_precision": LocationPrecision,
}


async def _enrich_from_directory(record: CheckInRecord, principal: Principal) -> None:
    """Fill profile fields the client left empty. Directory failures leave them empty."""
    if not principal.access_token:
        return
    async with get_services().directory_factory(principal.access_token) as directory:
        profile = await directory.get_profile_or_none()
    if profile is None:
        return
    record.user_display_name = record.user_display_name or profile.display_name or ""
    record.user_email = record.user_email or profile.email
    record.job_title = record.job_title or profile.job_title
    record.department = record.department or profile.department
    record.office_location = record.office_location or profile.office_location


# ============================================================================
# CALLER'S OWN CHECK-INS
# ============================================================================

async def _create(req: func.HttpRequest, principal: Principal):
    body = _trigger.extract_json_body(req)
    _trigger.check_enum_fields(body, _ENUM_FIELDS)
    record = CheckInRecord.model_validate(body)
    record.user_id = principal.user_id
    if not record.user_display_name and principal.display_name:
        record.user_display_name = principal.display_name
    await _enrich_from_directory(record, principal)
    created = await get_services().checkins.create(record, principal.user_id)
    return HttpResult(created, 201)


@bp.route(route="checkins", methods=["POST"])
async def create_checkin(req: func.HttpRequest) -> func.HttpResponse:
    """
    Submit a check-in. The caller is always the subject.

    POST /api/checkins

    Body:
        {"status": "NeedsAssistance", "latitude": 47.6, "longitude": -122.3,
         "locationPrecision": "Precise", "notes": "Stuck in stairwell B"}
    """
    return await _trigger.handle_request(req, _create)


async def _latest(req: func.HttpRequest, principal: Principal):
    latest = await get_services().checkins.get_latest(principal.user_id)
    if latest is None:
        raise NotFoundError("No check-ins found")
    return latest


@bp.route(route="checkins/latest", methods=["GET"])
async def get_latest_checkin(req: func.HttpRequest) -> func.HttpResponse:
    return await _trigger.handle_request(req, _latest)


async def _history(req: func.HttpRequest, principal: Principal):
    max_results = _trigger.extract_int_param(req, "maxResults")
    return await get_services().checkins.get_history(principal.user_id, max_results=max_results)


@bp.route(route="checkins/history", methods=["GET"])
async def get_checkin_history(req: func.HttpRequest) -> func.HttpResponse:
    return await _trigger.handle_request(req, _history)


async def _update(req: func.HttpRequest, principal: Principal):
    checkin_id = _trigger.extract_path_params(req, ["checkInId"])["checkInId"]
    body = _trigger.extract_json_body(req)
    _trigger.check_enum_fields(body, _ENUM_FIELDS)
    changes = CheckInRecord.model_validate(body)

    checkins = get_services().checkins
    existing = await checkins.get(principal.user_id, checkin_id)
    if existing is None:
        raise NotFoundError("Check-in not found")

    # Fields absent from the body keep their stored values
    record = existing.model_copy(
        update={name: getattr(changes, name) for name in changes.model_fields_set}
    )
    record.id = checkin_id
    record.user_id = principal.user_id
    return await checkins.update(record, principal.user_id, principal.display_name)


@bp.route(route="checkins/{checkInId}", methods=["PUT"])
async def update_checkin(req: func.HttpRequest) -> func.HttpResponse:
    """Update notes/status/state of one of the caller's own check-ins."""
    return await _trigger.handle_request(req, _update)


# ============================================================================
# RESPONDER WORKFLOW
# ============================================================================

async def _acknowledge(req: func.HttpRequest, principal: Principal):
    params = _trigger.extract_path_params(req, ["userId", "checkInId"])
    return await get_services().checkins.acknowledge(
        params["userId"], params["checkInId"], principal.user_id, principal.display_name
    )


@bp.route(route="checkins/{userId}/{checkInId}/acknowledge", methods=["POST"])
async def acknowledge_checkin(req: func.HttpRequest) -> func.HttpResponse:
    return await _trigger.handle_request(req, _acknowledge)


async def _resolve(req: func.HttpRequest, principal: Principal):
    params = _trigger.extract_path_params(req, ["userId", "checkInId"])
    return await get_services().checkins.resolve(
        params["userId"], params["checkInId"], principal.user_id, principal.display_name
    )


@bp.route(route="checkins/{userId}/{checkInId}/resolve", methods=["POST"])
async def resolve_checkin(req: func.HttpRequest) -> func.HttpResponse:
    return await _trigger.handle_request(req, _resolve)


async def _needs_assistance(req: func.HttpRequest, principal: Principal):
    return await get_services().checkins.list_needing_assistance()


@bp.route(route="checkins/needsassistance", methods=["GET"])
async def list_needing_assistance(req: func.HttpRequest) -> func.HttpResponse:
    """Open NeedsAssistance check-ins across all users (full-table scan)."""
    return await _trigger.handle_request(req, _needs_assistance)


async def _user_history(req: func.HttpRequest, principal: Principal):
    user_id = _trigger.extract_path_params(req, ["userId"])["userId"]
    max_results = _trigger.extract_int_param(req, "maxResults")
    return await get_services().checkins.get_history(user_id, max_results=max_results)


@bp.route(route="checkins/user/{userId}", methods=["GET"])
async def get_user_checkins(req: func.HttpRequest) -> func.HttpResponse:
    return await _trigger.handle_request(req, _user_history)
