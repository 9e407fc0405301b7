"""
Service-layer exception hierarchy.

Services raise these types; the DRF exception handler in
``apps.core.handlers`` maps each of them to a single HTTP status so views
never translate errors by hand.

Usage:
    from apps.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError('Plan', plan_id)
    raise ValidationError('O nome do plano é obrigatório.', details={'name': '...'})
"""


class ServiceError(Exception):
    """Base class for every error raised by the service layer."""

    status_code = 400

    def __init__(self, message, details=None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(ServiceError):
    """Input was well-formed but broke a business rule (bad shape, range, transition).

    Maps to HTTP 422.
    """

    status_code = 422


class NotFoundError(ServiceError):
    """The referenced entity does not exist or is not owned by the caller.

    Both cases answer the same way.
    Maps to HTTP 404.
    """

    status_code = 404

    def __init__(self, resource, resource_id=None):
        self.resource = resource
        self.resource_id = resource_id
        message = f'{resource}'
        if resource_id is not None:
            message += f' id={resource_id}'
        message += ' not found'
        super().__init__(message)


class ConflictError(ServiceError):
    """A write lost a race (stale version) or is blocked by dependent rows.

    Maps to HTTP 409.
    """

    status_code = 409


class DataIntegrityError(ServiceError):
    """Joined data is missing an expected relation, e.g. a progress record without its stage.

    Maps to HTTP 500.
    """

    status_code = 500


class BackendUnavailableError(ServiceError):
    """The persistence backend could not be reached.

    Maps to HTTP 503.
    """

    status_code = 503
