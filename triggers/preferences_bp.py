"""
Preferences Blueprint.

Endpoints:
    GET /api/preferences                  Caller's preferences (defaults created on first read)
    PUT /api/preferences                  Replace the caller's preferences
    GET /api/preferences/{targetUserId}   Another user's preferences (self or Admin)
    PUT /api/preferences/{targetUserId}   Replace another user's preferences (self or Admin)

Exports:
    bp: Azure Functions Blueprint
"""

import azure.functions as func

from core.models import LocationPrecision, Principal, UserPreferences
from services import get_services

from .http_base import BaseHttpTrigger, require_self_or_role

bp = func.Blueprint()

_trigger = BaseHttpTrigger("preferences")


async def _save_for(req: func.HttpRequest, principal: Principal, user_id: str):
    body = _trigger.extract_json_body(req)
    _trigger.check_enum_fields(body, {
        "defaultLocationPrecision": LocationPrecision,
        "default_location_precision": LocationPrecision,
    })
    preferences = UserPreferences.model_validate(body)
    preferences.user_id = user_id
    return await get_services().preferences.save(preferences, principal.user_id)


async def _get_own(req: func.HttpRequest, principal: Principal):
    return await get_services().preferences.get_or_create(principal.user_id)


async def _put_own(req: func.HttpRequest, principal: Principal):
    return await _save_for(req, principal, principal.user_id)


async def _get_target(req: func.HttpRequest, principal: Principal):
    target = _trigger.extract_path_params(req, ["targetUserId"])["targetUserId"]
    require_self_or_role(principal, target)
    return await get_services().preferences.get_or_create(target)


async def _put_target(req: func.HttpRequest, principal: Principal):
    target = _trigger.extract_path_params(req, ["targetUserId"])["targetUserId"]
    require_self_or_role(principal, target)
    return await _save_for(req, principal, target)


@bp.route(route="preferences", methods=["GET"])
async def get_preferences(req: func.HttpRequest) -> func.HttpResponse:
    return await _trigger.handle_request(req, _get_own)


@bp.route(route="preferences", methods=["PUT"])
async def put_preferences(req: func.HttpRequest) -> func.HttpResponse:
    """
    PUT /api/preferences

    Body:
        {"defaultLocationPrecision": "Precise", "enableLocationServices": true,
         "enableTeamsNotifications": false}
    """
    return await _trigger.handle_request(req, _put_own)


@bp.route(route="preferences/{targetUserId}", methods=["GET"])
async def get_user_preferences(req: func.HttpRequest) -> func.HttpResponse:
    return await _trigger.handle_request(req, _get_target)


@bp.route(route="preferences/{targetUserId}", methods=["PUT"])
async def put_user_preferences(req: func.HttpRequest) -> func.HttpResponse:
    return await _trigger.handle_request(req, _put_target)
