# ============================================================================
# DIAGNOSTICS BLUEPRINT
# ============================================================================
# STATUS: Trigger layer - Liveness and storage checks
# PURPOSE: Azure Functions Blueprint for load balancer and operator checks
# EXPORTS: bp
# DEPENDENCIES: azure.functions, services.ServiceContainer
# ============================================================================
"""
Diagnostics Blueprint.

Endpoints:
    GET /api/livez                              Process is alive (no dependencies)
    GET /api/test/storage                       Ensure tables, then write and delete a test row
    GET /api/test/checkins/recent?maxResults=   Sample of check-ins across all users

/api/livez must stay dependency-free: no storage, no config validation.
If it responds, the app is alive.
"""

from datetime import datetime, timezone

import azure.functions as func

from core.models import Principal
from services import get_services

from .http_base import BaseHttpTrigger

bp = func.Blueprint()

_trigger = BaseHttpTrigger("diagnostics")


async def _livez(req: func.HttpRequest, principal: Principal):
    return {
        "status": "alive",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


async def _test_storage(req: func.HttpRequest, principal: Principal):
    services = get_services()
    tables = await services.ensure_tables()
    check = await services.checkins.test_storage_connection()
    return {
        "status": "Success",
        "message": f"Created and deleted test entity {check['row_id']} in {check['table']}",
        "tables": tables,
        "check": check,
    }


async def _recent_checkins(req: func.HttpRequest, principal: Principal):
    max_results = _trigger.extract_int_param(req, "maxResults", default=10)
    return await get_services().checkins.list_recent(max_results)


@bp.route(route="livez", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
async def livez(req: func.HttpRequest) -> func.HttpResponse:
    """Liveness check - is the app alive? No dependencies checked."""
    return await _trigger.handle_request(req, _livez, require_auth=False)


@bp.route(route="test/storage", methods=["GET"])
async def test_storage(req: func.HttpRequest) -> func.HttpResponse:
    return await _trigger.handle_request(req, _test_storage, require_auth=False)


@bp.route(route="test/checkins/recent", methods=["GET"])
async def test_recent_checkins(req: func.HttpRequest) -> func.HttpResponse:
    """Diagnostic cross-user sample; reads stop once maxResults rows are buffered."""
    return await _trigger.handle_request(req, _recent_checkins)
