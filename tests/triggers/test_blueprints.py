"""
Blueprint handlers end to end over in-memory services.

Handlers are driven through each blueprint's BaseHttpTrigger, the same
path the registered routes take.
"""

import pytest

from triggers import audit_bp, checkins_bp, diagnostics_bp, headcount_bp, preferences_bp
from tests.factories.http_factories import json_body, make_request


async def call(module, handler, req, require_auth=True):
    return await module._trigger.handle_request(req, handler, require_auth=require_auth)


async def _submit(body=None, user_id="u1", **kw):
    req = make_request("POST", "checkins", user_id=user_id, body=body or {"status": "NeedsAssistance"}, **kw)
    return await call(checkins_bp, checkins_bp._create, req)


# ============================================================================
# CHECK-INS
# ============================================================================

class TestCheckIns:

    async def test_create_uses_caller_identity(self, wired, directory):
        response = await _submit({"userId": "spoofed", "status": "NeedsAssistance", "notes": "stairwell B"})
        assert response.status_code == 201
        body = json_body(response)
        assert body["userId"] == "u1"
        assert body["state"] == "Submitted"
        assert body["notes"] == "stairwell B"
        assert body["department"] == "Engineering"
        assert body["userEmail"] == "ada@contoso.example"
        assert directory.tokens == ["graph-token"]

    async def test_directory_outage_is_not_fatal(self, wired, directory):
        directory.fail = True
        response = await _submit()
        assert response.status_code == 201
        body = json_body(response)
        assert body["userDisplayName"] == "Ada Lovelace"
        assert body.get("department") is None

    async def test_no_token_skips_directory(self, wired, directory):
        response = await _submit(token=None)
        assert response.status_code == 201
        assert directory.tokens == []

    async def test_invalid_body(self, wired):
        req = make_request("POST", "checkins", body="{nope")
        response = await call(checkins_bp, checkins_bp._create, req)
        assert response.status_code == 400

    @pytest.mark.parametrize("body", [
        {"status": "NeedAssistance"},
        {"status": "OK", "locationPrecision": "Exact"},
        {"status": "OK", "location_precision": "Exact"},
        {"status": "OK", "state": "Closed"},
        {"status": 1},
        {"status": ""},
    ], ids=["status", "precision", "snake-case-precision", "state", "number", "empty"])
    async def test_unknown_enum_values_rejected(self, wired, stores, body):
        response = await _submit(body)
        assert response.status_code == 400
        assert json_body(response)["error"] == "VALIDATION_ERROR"
        assert stores["checkins"].rows == {}

    async def test_enum_values_case_insensitive(self, wired):
        body = json_body(await _submit({"status": "needsassistance", "locationPrecision": "PRECISE"}))
        assert body["status"] == "NeedsAssistance"
        assert body["locationPrecision"] == "Precise"

    async def test_latest_and_history(self, wired):
        await _submit()
        second = json_body(await _submit({"status": "OK"}))

        latest = await call(checkins_bp, checkins_bp._latest, make_request())
        assert json_body(latest)["id"] == second["id"]

        history = await call(checkins_bp, checkins_bp._history, make_request(params={"maxResults": "1"}))
        assert [r["id"] for r in json_body(history)] == [second["id"]]

    async def test_latest_missing_is_404(self, wired):
        response = await call(checkins_bp, checkins_bp._latest, make_request(user_id="nobody"))
        assert response.status_code == 404
        assert json_body(response)["message"] == "No check-ins found"

    async def test_update_merges_body_over_stored(self, wired):
        created = json_body(await _submit({"status": "NeedsAssistance", "notes": "first"}))
        req = make_request("PUT", body={"notes": "second"}, route_params={"checkInId": created["id"]})
        body = json_body(await call(checkins_bp, checkins_bp._update, req))
        assert body["notes"] == "second"
        assert body["status"] == "NeedsAssistance"

    async def test_update_unknown_state_rejected(self, wired):
        created = json_body(await _submit())
        req = make_request("PUT", body={"state": "Done"}, route_params={"checkInId": created["id"]})
        response = await call(checkins_bp, checkins_bp._update, req)
        assert response.status_code == 400
        assert json_body(response)["error"] == "VALIDATION_ERROR"
        latest = json_body(await call(checkins_bp, checkins_bp._latest, make_request()))
        assert latest["state"] == "Submitted"

    async def test_update_cannot_clear_need_on_acknowledged(self, wired):
        created = json_body(await _submit())
        ack_route = {"userId": "u1", "checkInId": created["id"]}
        await call(checkins_bp, checkins_bp._acknowledge, make_request("POST", user_id="admin1", route_params=ack_route))
        req = make_request("PUT", body={"status": "OK"}, route_params={"checkInId": created["id"]})
        response = await call(checkins_bp, checkins_bp._update, req)
        assert response.status_code == 400
        assert json_body(response)["error"] == "INVALID_STATE"

    async def test_update_other_users_checkin_is_404(self, wired):
        created = json_body(await _submit(user_id="u2"))
        req = make_request("PUT", body={"notes": "x"}, route_params={"checkInId": created["id"]})
        response = await call(checkins_bp, checkins_bp._update, req)
        assert response.status_code == 404

    async def test_responder_workflow(self, wired):
        created = json_body(await _submit())
        route = {"userId": "u1", "checkInId": created["id"]}

        ack = await call(checkins_bp, checkins_bp._acknowledge, make_request("POST", user_id="admin1", route_params=route))
        assert json_body(ack)["acknowledgedByUserId"] == "admin1"

        again = await call(checkins_bp, checkins_bp._acknowledge, make_request("POST", user_id="admin1", route_params=route))
        assert again.status_code == 400
        assert json_body(again)["error"] == "INVALID_STATE"

        open_list = await call(checkins_bp, checkins_bp._needs_assistance, make_request())
        assert [r["id"] for r in json_body(open_list)] == [created["id"]]

        done = await call(checkins_bp, checkins_bp._resolve, make_request("POST", user_id="admin1", route_params=route))
        assert json_body(done)["state"] == "Resolved"
        assert json_body(await call(checkins_bp, checkins_bp._needs_assistance, make_request())) == []

    async def test_resolve_unknown_is_404(self, wired):
        route = {"userId": "u1", "checkInId": "nope"}
        response = await call(checkins_bp, checkins_bp._resolve, make_request("POST", route_params=route))
        assert response.status_code == 404

    async def test_user_history(self, wired):
        created = json_body(await _submit(user_id="u2"))
        req = make_request(route_params={"userId": "u2"})
        assert [r["id"] for r in json_body(await call(checkins_bp, checkins_bp._user_history, req))] == [created["id"]]

    async def test_bad_max_results(self, wired):
        response = await call(checkins_bp, checkins_bp._history, make_request(params={"maxResults": "lots"}))
        assert response.status_code == 400
        assert json_body(response)["error"] == "INVALID_PARAMETER"


# ============================================================================
# HEADCOUNT
# ============================================================================

async def _start_campaign(body, user_id="boss"):
    req = make_request("POST", "headcount", user_id=user_id, body=body)
    return await call(headcount_bp, headcount_bp._create, req)


class TestHeadcount:

    async def test_fire_drill(self, wired):
        response = await _start_campaign({"title": "Fire Drill", "targetedUserIds": ["a", "b"]})
        assert response.status_code == 201
        campaign = json_body(response)
        assert campaign["initiatedByUpn"] == "boss@contoso.example"

        for user_id, flag in (("a", True), ("b", False)):
            req = make_request(
                "POST", user_id=user_id, route_params={"campaignId": campaign["id"]},
                body={"initiatorId": "boss", "needsAssistance": flag},
            )
            result = await call(headcount_bp, headcount_bp._respond, req)
            assert result.status_code == 200

        stored = json_body(await call(
            headcount_bp, headcount_bp._get, make_request(user_id="boss", route_params={"campaignId": campaign["id"]}),
        ))
        assert set(stored["respondedUserIds"]) == {"a", "b"}
        assert stored["needAssistanceUserIds"] == ["a"]
        assert stored["safeUserIds"] == ["b"]

    async def test_target_direct_reports(self, wired):
        response = await _start_campaign({"title": "Team check", "targetDirectReports": True})
        assert json_body(response)["targetedUserIds"] == ["r1", "r2"]

    async def test_direct_report_lookup_failure_is_fatal(self, wired, directory):
        directory.fail = True
        response = await _start_campaign({"title": "Team check", "targetDirectReports": True})
        assert response.status_code == 502

    async def test_missing_title(self, wired):
        response = await _start_campaign({"targetedUserIds": ["a"]})
        assert response.status_code == 400
        assert json_body(response)["error"] == "VALIDATION_ERROR"

    async def test_get_as_target_needs_initiator(self, wired):
        campaign = json_body(await _start_campaign({"title": "Drill", "targetedUserIds": ["a"]}))
        route = {"campaignId": campaign["id"]}

        missing = await call(headcount_bp, headcount_bp._get, make_request(user_id="a", route_params=route))
        assert missing.status_code == 404

        found = await call(
            headcount_bp, headcount_bp._get,
            make_request(user_id="a", route_params=route, params={"initiatorId": "boss"}),
        )
        assert json_body(found)["id"] == campaign["id"]

    async def test_active_mine_and_status(self, wired):
        campaign = json_body(await _start_campaign({"title": "Drill", "targetedUserIds": ["a"]}))
        route = {"campaignId": campaign["id"]}

        active = json_body(await call(headcount_bp, headcount_bp._active, make_request(user_id="boss")))
        assert [c["id"] for c in active] == [campaign["id"]]

        mine = json_body(await call(headcount_bp, headcount_bp._mine, make_request(user_id="a")))
        assert [c["id"] for c in mine] == [campaign["id"]]

        req = make_request("PUT", user_id="boss", route_params=route, body={"status": "Completed"})
        closed = json_body(await call(headcount_bp, headcount_bp._update_status, req))
        assert closed["status"] == "Completed"
        assert closed["expiresTimestamp"] is not None

        assert json_body(await call(headcount_bp, headcount_bp._active, make_request(user_id="boss"))) == []

    async def test_unknown_status_rejected(self, wired):
        campaign = json_body(await _start_campaign({"title": "Drill", "targetedUserIds": ["a"]}))
        req = make_request("PUT", user_id="boss", route_params={"campaignId": campaign["id"]}, body={"status": "Done"})
        response = await call(headcount_bp, headcount_bp._update_status, req)
        assert response.status_code == 400
        assert "Unknown campaign status" in json_body(response)["message"]

    async def test_response_requires_initiator(self, wired):
        req = make_request("POST", user_id="a", route_params={"campaignId": "x"}, body={"needsAssistance": True})
        response = await call(headcount_bp, headcount_bp._respond, req)
        assert response.status_code == 400
        assert json_body(response)["message"] == "initiatorId is required"

    @pytest.mark.parametrize("flag", ["false", "true", 0, None], ids=repr)
    async def test_response_flag_must_be_boolean(self, wired, flag):
        campaign = json_body(await _start_campaign({"title": "Drill", "targetedUserIds": ["a"]}))
        route = {"campaignId": campaign["id"]}
        req = make_request("POST", user_id="a", route_params=route, body={"initiatorId": "boss", "needsAssistance": flag})
        response = await call(headcount_bp, headcount_bp._respond, req)
        assert response.status_code == 400
        assert json_body(response)["error"] == "VALIDATION_ERROR"

        stored = json_body(await call(headcount_bp, headcount_bp._get, make_request(user_id="boss", route_params=route)))
        assert stored["respondedUserIds"] == []
        assert stored["needAssistanceUserIds"] == []
        assert stored["safeUserIds"] == []

    async def test_response_flag_defaults_to_safe(self, wired):
        campaign = json_body(await _start_campaign({"title": "Drill", "targetedUserIds": ["a"]}))
        req = make_request("POST", user_id="a", route_params={"campaignId": campaign["id"]}, body={"initiatorId": "boss"})
        assert json_body(await call(headcount_bp, headcount_bp._respond, req))["safeUserIds"] == ["a"]

    async def test_campaign_checkins(self, wired):
        created = json_body(await _submit({"status": "OK", "headcountCampaignId": "hc1"}))
        req = make_request(route_params={"campaignId": "hc1"})
        assert [r["id"] for r in json_body(await call(headcount_bp, headcount_bp._campaign_checkins, req))] == [created["id"]]


# ============================================================================
# PREFERENCES
# ============================================================================

class TestPreferences:

    async def test_own_preferences_created_on_first_read(self, wired, stores):
        response = await call(preferences_bp, preferences_bp._get_own, make_request())
        body = json_body(response)
        assert body["userId"] == "u1"
        assert body["defaultLocationPrecision"] == "CityWide"
        assert len(stores["preferences"].rows) == 1

    async def test_put_own(self, wired):
        req = make_request("PUT", body={"userId": "other", "enableTeamsNotifications": False})
        body = json_body(await call(preferences_bp, preferences_bp._put_own, req))
        assert body["userId"] == "u1"
        assert body["enableTeamsNotifications"] is False
        assert body["lastModifiedBy"] == "u1"

    async def test_unknown_precision_rejected(self, wired, stores):
        req = make_request("PUT", body={"defaultLocationPrecision": "Exact"})
        response = await call(preferences_bp, preferences_bp._put_own, req)
        assert response.status_code == 400
        assert "defaultLocationPrecision" in json_body(response)["message"]
        assert stores["preferences"].rows == {}

    async def test_other_user_forbidden(self, wired):
        req = make_request(route_params={"targetUserId": "u2"})
        response = await call(preferences_bp, preferences_bp._get_target, req)
        assert response.status_code == 403

    async def test_admin_may_edit_other_user(self, wired, services):
        req = make_request("PUT", user_id="admin1", roles=["Admin"], route_params={"targetUserId": "u2"},
                           body={"defaultLocationPrecision": "Precise"})
        body = json_body(await call(preferences_bp, preferences_bp._put_target, req))
        assert body["userId"] == "u2"
        assert body["lastModifiedBy"] == "admin1"
        (entry,) = await services.audit.get_for_entity("UserPreferences", "u2")
        assert entry.user_display_name == "Administrator"


# ============================================================================
# AUDIT AND DIAGNOSTICS
# ============================================================================

class TestAudit:

    async def test_requires_admin(self, wired):
        response = await call(audit_bp, audit_bp._recent, make_request())
        assert response.status_code == 403

    async def test_entity_history(self, wired):
        created = json_body(await _submit())
        req = make_request(roles=["Admin"], route_params={"entityType": "CheckInRecord", "entityId": created["id"]})
        entries = json_body(await call(audit_bp, audit_bp._entity_history, req))
        assert [e["actionType"] for e in entries] == ["CheckIn"]

    async def test_recent(self, wired):
        await _submit()
        await _submit(user_id="u2")
        req = make_request(roles=["Admin"], params={"maxResults": "1"})
        assert len(json_body(await call(audit_bp, audit_bp._recent, req))) == 1


class TestDiagnostics:

    async def test_livez_needs_no_identity(self):
        response = await call(diagnostics_bp, diagnostics_bp._livez, make_request(user_id=None), require_auth=False)
        assert response.status_code == 200
        assert json_body(response)["status"] == "alive"

    async def test_storage_connection(self, wired, stores):
        response = await call(diagnostics_bp, diagnostics_bp._test_storage, make_request(user_id=None), require_auth=False)
        body = json_body(response)
        assert body["status"] == "Success"
        assert set(body["tables"]) == {store.table_name for store in stores.values()}
        assert body["check"]["row_id"].startswith("test-")

    async def test_storage_connection_failure(self, wired, stores):
        stores["checkins"].fail("ensure_table")
        response = await call(diagnostics_bp, diagnostics_bp._test_storage, make_request(user_id=None), require_auth=False)
        assert response.status_code == 502

    async def test_recent_checkins(self, wired):
        await _submit()
        response = await call(diagnostics_bp, diagnostics_bp._recent_checkins, make_request(params={"maxResults": "5"}))
        assert len(json_body(response)) == 1
