"""Exception hierarchy shared by every oasync command."""


class OasyncError(Exception):
    """Base class for all oasync errors."""


class ConfigError(OasyncError):
    """The configuration file could not be loaded."""


class PreconditionError(OasyncError):
    """A required scope parameter (project, region, ...) was not given."""


class AuthenticationError(OasyncError):
    """No usable bearer token could be obtained."""


class TransportError(OasyncError):
    """The request could not be sent or its response could not be read."""


class RemoteRejectionError(OasyncError):
    """The remote catalog answered with a non-success status."""

    def __init__(self, status_code: int, reason: str = "", body: str = ""):
        self.status_code = status_code
        self.reason = reason
        self.body = body
        super().__init__(f"{status_code} {reason}".strip())


class ConflictError(RemoteRejectionError):
    """The resource already exists remotely."""


class LocalIOError(OasyncError):
    """A local catalog document is missing or malformed."""

    def __init__(self, path, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")
