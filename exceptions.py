# ============================================================================
# EXCEPTIONS
# ============================================================================
# STATUS: Shared - used by services, infrastructure and triggers
# PURPOSE: Business failure hierarchy mapped to HTTP responses by the triggers
# EXPORTS: BusinessLogicError, ValidationError,
#          ResourceNotFoundError, NotFoundError, InvalidStateError,
#          ConflictError, UpstreamError, ConfigurationError
# DEPENDENCIES: None (standard library only)
# ============================================================================

"""
Custom Exception Hierarchy

Expected runtime failures derive from BusinessLogicError. Programming
errors stay as the builtin TypeError / ValueError. Business failures
are split so the HTTP layer can map each one to a distinct response:
    ValidationError        -> 400 (missing/invalid input)
    ResourceNotFoundError  -> 404 (referenced entity absent)
    InvalidStateError      -> 400 (workflow precondition violated)
    ConflictError          -> 409 (stale concurrency token, retryable)
    UpstreamError          -> 502 (table store / directory failure, retryable)
"""


class BusinessLogicError(Exception):
    """
    Base class for expected runtime business logic failures.

    These are normal failures that occur during system operation
    and should be handled gracefully without crashing.
    """
    pass


class ValidationError(BusinessLogicError):
    """
    Business validation failed.

    Examples:
        - Check-in submitted without a user id
        - Headcount campaign without a title
        - Headcount campaign without targeted users
    """
    pass


class ResourceNotFoundError(BusinessLogicError):
    """
    Requested resource does not exist.

    Raised by mutating operations only. Point lookups return None
    instead, since an absent record is a valid read result.

    Examples:
        - Acknowledging a check-in id that is not in the user's partition
        - Updating the status of an unknown campaign
    """
    pass


# Shorter name used across the service layer
NotFoundError = ResourceNotFoundError


class InvalidStateError(BusinessLogicError):
    """
    Workflow precondition violated.

    Examples:
        - Acknowledging a check-in whose status is OK
        - Acknowledging a check-in that is already acknowledged
        - Resolving a check-in that was never acknowledged
    """
    pass


class ConflictError(BusinessLogicError):
    """
    Optimistic concurrency failure.

    The entity changed between read and write (etag mismatch) or a create
    collided with an existing row. Callers refresh and retry; see
    infrastructure.retry.retry_on_conflict.
    """
    pass


class UpstreamError(BusinessLogicError):
    """
    External dependency failure (table store or directory API).

    Examples:
        - Table service unavailable or throttling
        - Directory API returned 5xx
        - Network timeout
    """
    pass


class ConfigurationError(Exception):
    """
    System configuration error.

    These are typically fatal and indicate misconfiguration
    that prevents the system from operating.

    Examples:
        - Neither a connection string nor a storage account name set
        - Unknown audit partition scheme
    """
    pass
