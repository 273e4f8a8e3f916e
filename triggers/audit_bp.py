"""
Audit Blueprint.

Read-only access to the audit trail. Both endpoints require the Admin role.

Endpoints:
    GET /api/audit/recent?maxResults=&lookbackDays=   Latest entries across all entities
    GET /api/audit/{entityType}/{entityId}            History of one entity

Exports:
    bp: Azure Functions Blueprint
"""

import azure.functions as func

from core.models import Principal
from services import get_services

from .http_base import BaseHttpTrigger, require_role

bp = func.Blueprint()

_trigger = BaseHttpTrigger("audit")


async def _recent(req: func.HttpRequest, principal: Principal):
    require_role(principal)
    return await get_services().audit.get_recent(
        max_results=_trigger.extract_int_param(req, "maxResults"),
        lookback_days=_trigger.extract_int_param(req, "lookbackDays", maximum=3650),
    )


async def _entity_history(req: func.HttpRequest, principal: Principal):
    require_role(principal)
    params = _trigger.extract_path_params(req, ["entityType", "entityId"])
    return await get_services().audit.get_for_entity(params["entityType"], params["entityId"])


@bp.route(route="audit/recent", methods=["GET"])
async def get_recent_audit(req: func.HttpRequest) -> func.HttpResponse:
    return await _trigger.handle_request(req, _recent)


@bp.route(route="audit/{entityType}/{entityId}", methods=["GET"])
async def get_entity_audit(req: func.HttpRequest) -> func.HttpResponse:
    return await _trigger.handle_request(req, _entity_history)
