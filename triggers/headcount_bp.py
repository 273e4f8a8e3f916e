# ============================================================================
# HEADCOUNT BLUEPRINT
# ============================================================================
# STATUS: Trigger layer - Headcount campaign endpoints
# PURPOSE: Azure Functions Blueprint for starting, closing and answering campaigns
# EXPORTS: bp
# DEPENDENCIES: azure.functions, services.HeadcountService, infrastructure.DirectoryClient
# ============================================================================
"""
Headcount Blueprint.

Campaigns are stored under their initiator, so lookups of another
user's campaign need the initiator id (initiatorId query parameter or
body field).

Endpoints:
    POST /api/headcount                               Start a campaign (caller is initiator)
    GET  /api/headcount/active                        Caller's active campaigns
    GET  /api/headcount/mine                          Campaigns the caller started or is targeted by
    GET  /api/headcount/{campaignId}?initiatorId=     One campaign (initiator defaults to caller)
    PUT  /api/headcount/{campaignId}/status           Change status of one of the caller's campaigns
    GET  /api/headcount/{campaignId}/checkins         Check-ins tagged with the campaign
    POST /api/headcount/{campaignId}/responses        Caller answers a campaign
"""

from typing import List

import azure.functions as func

from core.models import HeadcountCampaign, HeadcountCampaignStatus, Principal
from exceptions import NotFoundError, ValidationError
from services import get_services
from util_logger import LoggerFactory, ComponentType

from .http_base import BaseHttpTrigger, HttpResult

logger = LoggerFactory.create_logger(ComponentType.TRIGGER, "HeadcountBlueprint")

bp = func.Blueprint()

_trigger = BaseHttpTrigger("headcount")


async def _direct_report_ids(principal: Principal) -> List[str]:
    """Caller's direct reports. Directory failures propagate."""
    async with get_services().directory_factory(principal.access_token) as directory:
        reports = await directory.get_direct_reports()
    return [report.id for report in reports if report.id]


async def _create(req: func.HttpRequest, principal: Principal):
    body = _trigger.extract_json_body(req)
    campaign = HeadcountCampaign.model_validate(body)

    if not campaign.targeted_user_ids and body.get("targetDirectReports"):
        campaign.targeted_user_ids = await _direct_report_ids(principal)
        logger.info(f"Targeting {len(campaign.targeted_user_ids)} direct reports of {principal.user_id}")

    created = await get_services().headcount.create(
        campaign,
        principal.user_id,
        principal.display_name,
        requestor_upn=req.headers.get("X-MS-CLIENT-PRINCIPAL-NAME") or "",
    )
    return HttpResult(created, 201)


@bp.route(route="headcount", methods=["POST"])
async def create_campaign(req: func.HttpRequest) -> func.HttpResponse:
    """
    Start a headcount campaign.

    POST /api/headcount

    Body:
        {"title": "Fire Drill", "description": "Building 4",
         "targetedUserIds": ["a", "b"]}
    or, to target the caller's direct reports:
        {"title": "Fire Drill", "targetDirectReports": true}
    """
    return await _trigger.handle_request(req, _create)


async def _active(req: func.HttpRequest, principal: Principal):
    return await get_services().headcount.list_active(principal.user_id)


@bp.route(route="headcount/active", methods=["GET"])
async def list_active_campaigns(req: func.HttpRequest) -> func.HttpResponse:
    return await _trigger.handle_request(req, _active)


async def _mine(req: func.HttpRequest, principal: Principal):
    return await get_services().headcount.list_all_for_user(principal.user_id)


@bp.route(route="headcount/mine", methods=["GET"])
async def list_my_campaigns(req: func.HttpRequest) -> func.HttpResponse:
    """Campaigns the caller initiated or is targeted by (scans every initiator)."""
    return await _trigger.handle_request(req, _mine)


async def _get(req: func.HttpRequest, principal: Principal):
    campaign_id = _trigger.extract_path_params(req, ["campaignId"])["campaignId"]
    initiator_id = req.params.get("initiatorId") or principal.user_id
    campaign = await get_services().headcount.get(initiator_id, campaign_id)
    if campaign is None:
        raise NotFoundError(f"Campaign with ID {campaign_id} not found")
    return campaign


@bp.route(route="headcount/{campaignId}", methods=["GET"])
async def get_campaign(req: func.HttpRequest) -> func.HttpResponse:
    return await _trigger.handle_request(req, _get)


async def _update_status(req: func.HttpRequest, principal: Principal):
    campaign_id = _trigger.extract_path_params(req, ["campaignId"])["campaignId"]
    raw_status = _trigger.extract_json_body(req).get("status")
    try:
        new_status = HeadcountCampaignStatus(raw_status)
    except ValueError:
        allowed = ", ".join(s.value for s in HeadcountCampaignStatus)
        raise ValidationError(f"Unknown campaign status '{raw_status}', expected one of: {allowed}")

    return await get_services().headcount.update_status(
        principal.user_id, campaign_id, new_status, principal.user_id, principal.display_name
    )


@bp.route(route="headcount/{campaignId}/status", methods=["PUT"])
async def update_campaign_status(req: func.HttpRequest) -> func.HttpResponse:
    """
    PUT /api/headcount/{campaignId}/status

    Body:
        {"status": "Completed"}
    """
    return await _trigger.handle_request(req, _update_status)


async def _campaign_checkins(req: func.HttpRequest, principal: Principal):
    campaign_id = _trigger.extract_path_params(req, ["campaignId"])["campaignId"]
    return await get_services().checkins.list_by_campaign(campaign_id)


@bp.route(route="headcount/{campaignId}/checkins", methods=["GET"])
async def get_campaign_checkins(req: func.HttpRequest) -> func.HttpResponse:
    return await _trigger.handle_request(req, _campaign_checkins)


async def _respond(req: func.HttpRequest, principal: Principal):
    campaign_id = _trigger.extract_path_params(req, ["campaignId"])["campaignId"]
    body = _trigger.extract_json_body(req)
    initiator_id = body.get("initiatorId") or req.params.get("initiatorId")
    if not initiator_id:
        raise ValidationError("initiatorId is required")
    needs_assistance = body.get("needsAssistance", False)
    if not isinstance(needs_assistance, bool):
        raise ValidationError(f"needsAssistance must be true or false, got {needs_assistance!r}")

    return await get_services().headcount.record_response(
        initiator_id,
        campaign_id,
        principal.user_id,
        needs_assistance,
        user_display_name=principal.display_name,
    )


@bp.route(route="headcount/{campaignId}/responses", methods=["POST"])
async def record_campaign_response(req: func.HttpRequest) -> func.HttpResponse:
    """
    POST /api/headcount/{campaignId}/responses

    Body:
        {"initiatorId": "manager-oid", "needsAssistance": false}
    """
    return await _trigger.handle_request(req, _respond)
