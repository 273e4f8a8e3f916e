"""
HTTP Trigger Base Class.

Shared request/response infrastructure for the blueprint routes:
caller identity from App Service authentication headers, parameter
extraction, JSON responses and the exception -> status mapping.

Every route follows the same shape:

    _trigger = BaseHttpTrigger("checkins")

    @bp.route(route="checkins/latest", methods=["GET"])
    async def get_latest_checkin(req):
        return await _trigger.handle_request(req, _get_latest)

    async def _get_latest(req, principal):
        return await get_services().checkins.get_latest(principal.user_id)

Handlers return a model, a list, a dict, or an HttpResult when the
status code is not 200. Raised exceptions become error responses:

    ValidationError / ValueError        -> 400
    InvalidStateError                   -> 400
    no authenticated caller             -> 401
    PermissionError                     -> 403
    ResourceNotFoundError               -> 404
    ConflictError                       -> 409
    UpstreamError                       -> 502
    anything else                       -> 500 (generic message)

Exports:
    BaseHttpTrigger: Request handling for blueprint routes
    HttpResult: Payload with explicit status code
    extract_principal: Caller identity from authentication headers
    require_self_or_role: 403 unless the caller is the target or holds the role
"""

import base64
import binascii
import json
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

import azure.functions as func

from core.errors import ErrorCode, create_error_response, error_code_for, get_http_status_code
from core.models import DomainModel, Principal
from exceptions import BusinessLogicError, ConfigurationError, ValidationError
from util_logger import (
    ComponentType,
    LogContext,
    LoggerFactory,
    bind_request_context,
    clear_request_context,
)

ADMIN_ROLE = "Admin"
UNKNOWN_USER = "Unknown User"

_NAME_CLAIMS = ("name", "http://schemas.xmlsoap.org/ws/2005/05/identity/claims/name")
_ROLE_CLAIMS = ("roles", "http://schemas.microsoft.com/ws/2008/06/identity/claims/role")
_ID_CLAIMS = (
    "http://schemas.microsoft.com/identity/claims/objectidentifier",
    "oid",
    "http://schemas.xmlsoap.org/ws/2005/05/identity/claims/nameidentifier",
)

_logger = LoggerFactory.create_logger(ComponentType.TRIGGER, "HttpAuth")


@dataclass
class HttpResult:
    """Handler payload with a non-default status code."""
    payload: Any
    status_code: int = 200


Handler = Callable[[func.HttpRequest, Optional[Principal]], Awaitable[Any]]


def _decode_client_principal(encoded: str) -> Dict[str, Any]:
    try:
        document = json.loads(base64.b64decode(encoded))
    except (binascii.Error, ValueError) as e:
        _logger.warning(f"Ignoring malformed X-MS-CLIENT-PRINCIPAL header: {e}")
        return {}
    return document if isinstance(document, dict) else {}


def extract_principal(req: func.HttpRequest) -> Optional[Principal]:
    """
    Build the caller from App Service authentication headers.

    X-MS-CLIENT-PRINCIPAL-ID / -NAME carry the id and name; the base64
    X-MS-CLIENT-PRINCIPAL document supplies roles and fills in whatever
    the plain headers lack. The delegated directory token comes from
    X-MS-TOKEN-AAD-ACCESS-TOKEN, falling back to the bearer header.

    Returns:
        Principal, or None when no caller id is present
    """
    user_id = req.headers.get("X-MS-CLIENT-PRINCIPAL-ID") or ""
    display_name = req.headers.get("X-MS-CLIENT-PRINCIPAL-NAME") or ""
    roles: List[str] = []

    encoded = req.headers.get("X-MS-CLIENT-PRINCIPAL")
    if encoded:
        document = _decode_client_principal(encoded)
        name_type = document.get("name_typ")
        role_type = document.get("role_typ")
        names: Dict[str, str] = {}
        for claim in document.get("claims") or []:
            claim_type = claim.get("typ")
            value = claim.get("val")
            if not value:
                continue
            if claim_type in _ROLE_CLAIMS or claim_type == role_type:
                roles.append(value)
            elif claim_type in _NAME_CLAIMS or claim_type == name_type:
                names.setdefault(claim_type, value)
            elif claim_type in _ID_CLAIMS and not user_id:
                user_id = value
        # The "name" claim is the display name; the NAME header is often the UPN
        display_name = names.get("name") or next(iter(names.values()), "") or display_name

    if not user_id:
        return None

    token = req.headers.get("X-MS-TOKEN-AAD-ACCESS-TOKEN")
    if not token:
        authorization = req.headers.get("Authorization") or ""
        if authorization.lower().startswith("bearer "):
            token = authorization[7:].strip() or None

    return Principal(
        user_id=user_id,
        display_name=display_name or UNKNOWN_USER,
        roles=roles,
        access_token=token,
    )


def require_self_or_role(principal: Principal, target_user_id: str, role: str = ADMIN_ROLE) -> None:
    """
    Raises:
        PermissionError: caller is neither the target user nor in the role
    """
    if principal.user_id != target_user_id and not principal.has_role(role):
        raise PermissionError(f"Requires the {role} role to access another user's data")


def require_role(principal: Principal, role: str = ADMIN_ROLE) -> None:
    if not principal.has_role(role):
        raise PermissionError(f"Requires the {role} role")


def to_payload(data: Any) -> Any:
    """Models to camelCase dicts, recursively through lists and dicts."""
    if isinstance(data, DomainModel):
        return data.to_api()
    if isinstance(data, (list, tuple)):
        return [to_payload(item) for item in data]
    if isinstance(data, dict):
        return {key: to_payload(value) for key, value in data.items()}
    return data


class BaseHttpTrigger:
    """
    Request handling shared by every route of one blueprint.

    Provides consistent infrastructure for authentication, parameter
    extraction, error handling and logging.
    """

    def __init__(self, trigger_name: str):
        """
        Args:
            trigger_name: Name of the trigger group for logging (e.g., "checkins")
        """
        self.trigger_name = trigger_name
        self.logger = LoggerFactory.create_logger(ComponentType.TRIGGER, f"HttpTrigger.{trigger_name}")

    # ========================================================================
    # ENTRY POINT
    # ========================================================================

    async def handle_request(
        self,
        req: func.HttpRequest,
        handler: Handler,
        require_auth: bool = True,
    ) -> func.HttpResponse:
        """
        Authenticate, run the handler and format the result.

        Args:
            req: Azure Functions HTTP request object
            handler: async (req, principal) -> payload
            require_auth: Reject callers without identity headers with 401

        Returns:
            Azure Functions HTTP response with JSON content
        """
        request_id = self._generate_request_id()
        principal = extract_principal(req)
        context_token = bind_request_context(LogContext(
            request_id=request_id,
            user_id=principal.user_id if principal else None,
            operation=f"{req.method} {self.trigger_name}",
        ))
        try:
            return await self._dispatch(req, handler, principal, require_auth, request_id)
        finally:
            clear_request_context(context_token)

    async def _dispatch(
        self,
        req: func.HttpRequest,
        handler: Handler,
        principal: Optional[Principal],
        require_auth: bool,
        request_id: str,
    ) -> func.HttpResponse:
        self.logger.info(f"[{self.trigger_name}] Request {request_id} started: {req.method} {req.url}")

        if require_auth and principal is None:
            self.logger.warning(f"[{self.trigger_name}] Request {request_id} rejected: no authenticated caller")
            return self._create_error_response(
                ErrorCode.UNAUTHENTICATED, "Unauthorized", request_id
            )

        try:
            result = await handler(req, principal)

        except PermissionError as e:
            self.logger.warning(f"[{self.trigger_name}] Forbidden: {e}")
            return self._create_error_response(ErrorCode.FORBIDDEN, str(e), request_id)

        except (BusinessLogicError, ConfigurationError) as e:
            code = error_code_for(e)
            if get_http_status_code(code) >= 500:
                self.logger.error(f"[{self.trigger_name}] {code.value}: {e}")
            else:
                self.logger.warning(f"[{self.trigger_name}] {code.value}: {e}")
            return self._create_error_response(code, str(e), request_id)

        except ValueError as e:
            self.logger.warning(f"[{self.trigger_name}] Bad request: {e}")
            return self._create_error_response(ErrorCode.INVALID_PARAMETER, str(e), request_id)

        except Exception as e:
            self.logger.error(f"[{self.trigger_name}] Internal error: {type(e).__name__}: {e}", exc_info=True)
            return self._create_error_response(
                ErrorCode.UNEXPECTED_ERROR, "An unexpected error occurred", request_id
            )

        if isinstance(result, func.HttpResponse):
            return result
        status_code = 200
        if isinstance(result, HttpResult):
            result, status_code = result.payload, result.status_code

        self.logger.info(f"[{self.trigger_name}] Request {request_id} completed ({status_code})")
        return self._create_success_response(result, status_code, request_id)

    # ========================================================================
    # UTILITY METHODS FOR HANDLERS
    # ========================================================================

    def extract_path_params(self, req: func.HttpRequest, required_params: List[str]) -> Dict[str, str]:
        """
        Raises:
            ValueError: If required parameters are missing
        """
        params = {}
        missing_params = []
        for param_name in required_params:
            value = req.route_params.get(param_name)
            if not value:
                missing_params.append(param_name)
            else:
                params[param_name] = value

        if missing_params:
            raise ValueError(f"Missing required path parameters: {', '.join(missing_params)}")
        return params

    def extract_int_param(
        self,
        req: func.HttpRequest,
        name: str,
        default: Optional[int] = None,
        minimum: int = 1,
        maximum: int = 1000,
    ) -> Optional[int]:
        """
        Optional positive integer query parameter.

        Raises:
            ValueError: Not an integer or outside [minimum, maximum]
        """
        raw = req.params.get(name)
        if raw is None or raw == "":
            return default
        try:
            value = int(raw)
        except ValueError:
            raise ValueError(f"Query parameter {name} must be an integer, got '{raw}'")
        if value < minimum or value > maximum:
            raise ValueError(f"Query parameter {name} must be between {minimum} and {maximum}")
        return value

    def extract_json_body(self, req: func.HttpRequest, required: bool = True) -> Optional[Dict[str, Any]]:
        """
        Parse the JSON object body.

        Raises:
            ValueError: Body missing when required, not JSON, or not an object
        """
        raw = req.get_body()
        if not raw:
            if required:
                raise ValueError("Request body is required")
            return None
        try:
            body = json.loads(raw)
        except ValueError as e:
            raise ValueError(f"Invalid JSON in request body: {e}")
        if not isinstance(body, dict):
            raise ValueError("Request body must be a JSON object")
        return body

    def check_enum_fields(self, body: Dict[str, Any], fields: Dict[str, Type[Enum]]) -> None:
        """
        Reject body values that name no member of the field's enum.

        Stored rows parse leniently, so an unknown value here would
        silently become the default. Matching is case-insensitive on the
        value or member name; absent and null fields pass.

        Raises:
            ValidationError: a value is not a known member
        """
        for key, enum_cls in fields.items():
            value = body.get(key)
            if value is None:
                continue
            text = value.strip().lower() if isinstance(value, str) else None
            if not any(text in (member.value.lower(), member.name.lower()) for member in enum_cls):
                allowed = ", ".join(member.value for member in enum_cls)
                raise ValidationError(f"Unknown {key} '{value}', expected one of: {allowed}")

    # ========================================================================
    # PRIVATE INFRASTRUCTURE METHODS
    # ========================================================================

    def _generate_request_id(self) -> str:
        return str(uuid.uuid4())[:8]

    def _create_success_response(self, data: Any, status_code: int, request_id: str) -> func.HttpResponse:
        return func.HttpResponse(
            json.dumps(to_payload(data), default=str),
            status_code=status_code,
            mimetype="application/json",
            headers={"X-Request-ID": request_id},
        )

    def _create_error_response(self, code: ErrorCode, message: str, request_id: str) -> func.HttpResponse:
        body = create_error_response(
            code,
            message,
            request_id=request_id,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        return func.HttpResponse(
            json.dumps(body),
            status_code=get_http_status_code(code),
            mimetype="application/json",
            headers={"X-Request-ID": request_id},
        )
