"""Error kinds raised by the services and mapped to HTTP responses by the routes."""


class ExtForgeError(Exception):
    """Base class for all application errors."""

    code = "EF-UNKNOWN-999"


class GenerationError(ExtForgeError):
    """The generation adapter failed: rejected call, malformed or empty response."""

    code = "EF-GENERATION-001"


class CredentialMissingError(GenerationError):
    """No API credential is available to authorize a generation call."""

    code = "EF-CREDENTIAL-002"


class GenerationBusyError(ExtForgeError):
    """A generation round is already in flight."""

    code = "EF-BUSY-003"


class PersistenceError(ExtForgeError):
    """Key-value storage unavailable, locked or full."""

    code = "EF-STORAGE-004"


class TemplateNotFoundError(ExtForgeError):
    code = "EF-TEMPLATE-005"
