"""
Azure Functions entry point for the Safety Check-in service.

Users report whether they are safe or need assistance; responders
acknowledge and resolve requests for help; managers run headcount
campaigns over a set of users. Every mutation is written to an
append-only audit trail.

Architecture:
    HTTP (App Service auth headers) -> Blueprint -> Service -> Repository -> Azure Table Storage
                                                       |
                                                  AuditService (one entry per mutation)

Exports:
    app: Azure Function App instance

Dependencies:
    azure.functions: Azure Functions SDK
    triggers/*_bp: HTTP blueprints
    services: ServiceContainer (built lazily on first request)

Endpoints:
    Check-ins:
        POST /api/checkins
        GET  /api/checkins/latest
        GET  /api/checkins/history?maxResults=
        PUT  /api/checkins/{checkInId}
        POST /api/checkins/{userId}/{checkInId}/acknowledge
        POST /api/checkins/{userId}/{checkInId}/resolve
        GET  /api/checkins/needsassistance
        GET  /api/checkins/user/{userId}?maxResults=

    Headcount:
        POST /api/headcount
        GET  /api/headcount/active
        GET  /api/headcount/mine
        GET  /api/headcount/{campaignId}?initiatorId=
        PUT  /api/headcount/{campaignId}/status
        GET  /api/headcount/{campaignId}/checkins
        POST /api/headcount/{campaignId}/responses

    Preferences:
        GET/PUT /api/preferences
        GET/PUT /api/preferences/{targetUserId}

    Audit (Admin role):
        GET /api/audit/recent?maxResults=
        GET /api/audit/{entityType}/{entityId}

    Diagnostics:
        GET /api/livez
        GET /api/test/storage
        GET /api/test/checkins/recent?maxResults=

Environment Variables:
    AZURE_TABLES_CONNECTION_STRING: Table Storage connection string (Azurite / key auth)
    STORAGE_ACCOUNT_NAME: Storage account for managed identity auth
    CHECKINS_TABLE / PREFERENCES_TABLE / CAMPAIGNS_TABLE / AUDIT_TABLE: Table name overrides
    AUDIT_PARTITION_SCHEME: entity_type (default) or month
    GRAPH_BASE_URL / GRAPH_TIMEOUT_SECONDS: Directory API settings
    CONFLICT_MAX_ATTEMPTS / CONFLICT_BASE_DELAY / CONFLICT_MAX_DELAY: Optimistic concurrency retry
"""

import azure.functions as func

from config import debug_config, get_config
from config.env_validation import log_validation_results
from util_logger import LoggerFactory, ComponentType

from triggers.checkins_bp import bp as checkins_bp
from triggers.headcount_bp import bp as headcount_bp
from triggers.preferences_bp import bp as preferences_bp
from triggers.audit_bp import bp as audit_bp
from triggers.diagnostics_bp import bp as diagnostics_bp

logger = LoggerFactory.create_logger(ComponentType.TRIGGER, "function_app")

# ============================================================================
# STARTUP VALIDATION
# ============================================================================
# Misconfiguration is logged, not raised; /api/livez keeps answering.
_env_ok = log_validation_results(logger)
if _env_ok:
    try:
        _config = get_config()
    except ValueError as e:
        logger.error(f"Configuration failed to load: {e}")
    else:
        logger.info(
            f"Configuration loaded: environment={_config.environment}, "
            f"tables={', '.join(_config.storage.table_names)}, "
            f"audit_partition_scheme={_config.storage.audit_partition_scheme.value}"
        )
        logger.debug(f"Configuration detail: {debug_config()}")

# Initialize function app with HTTP auth level; identity comes from App Service authentication
app = func.FunctionApp(http_auth_level=func.AuthLevel.ANONYMOUS)

# ============================================================================
# BLUEPRINT REGISTRATIONS
# ============================================================================
app.register_functions(checkins_bp)
app.register_functions(headcount_bp)
app.register_functions(preferences_bp)
app.register_functions(audit_bp)
app.register_functions(diagnostics_bp)

logger.info("Blueprints registered: checkins, headcount, preferences, audit, diagnostics")
