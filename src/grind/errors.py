"""Exceptions raised by the grind client.

Every failure a user can do something about derives from `GrindError`, which
the command-line entry point turns into a log line and a non-zero exit.
Mistakes in calling code (a relative API path, an unknown HTTP method) raise
`ValueError` instead and are left to abort with a traceback.
"""


class GrindError(RuntimeError):
    """Base class for all recoverable-by-the-user grind failures."""


class ConfigError(GrindError):
    """The per-user config file cannot be located, read, or parsed."""


class CookieError(ConfigError):
    """A session cookie is missing its expected ``name=`` prefix."""


class GrindConnectionError(GrindError):
    """The server could not be reached."""


class APIError(GrindError):
    """The server answered with a status the caller did not expect.

    Attributes:
        status_code: HTTP status returned by the server
        url: The full request URL
        body: The response body, as text
    """

    def __init__(self, status_code: int, url: str, body: str = "", reason: str = ""):
        self.status_code = status_code
        self.url = url
        self.body = body
        self.reason = reason
        status = f"{status_code} {reason}".strip()
        super().__init__(f"unexpected status from {url}: {status}")


class ProtocolError(GrindError):
    """The server sent something this client cannot make sense of."""


class VersionError(GrindError):
    """This client is older than the server's minimum supported version."""

    def __init__(self, current: str, required: str):
        self.current = current
        self.required = required
        super().__init__(
            f"this is grind version {current}, but the server requires {required} or higher; "
            "you must upgrade to continue"
        )


class DotFileError(GrindError):
    """A problem-set ``.grind`` file is missing or corrupt."""
