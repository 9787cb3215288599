"""Error kinds raised by the service layer.

Each kind carries the HTTP status the entrypoints answer with, so the
API layer can translate them without knowing about individual services.
"""


class LabOpsError(Exception):
    """Base class for all service errors."""
    status_code = 500


class ValidationError(LabOpsError):
    """Payload does not match the expected schema."""
    status_code = 422


class NotFound(LabOpsError):
    """No matching record(s)."""
    status_code = 404


class BadRequest(LabOpsError):
    """Request is well formed but cannot be served as asked."""
    status_code = 400


class ProvisioningExhausted(LabOpsError):
    """No free username could be allocated within the attempt limit."""
    status_code = 500


class InsecureCredential(LabOpsError):
    """A generated password failed the password policy."""
    status_code = 500


class NotificationFailed(LabOpsError):
    """Welcome notification could not be delivered."""
    status_code = 500
