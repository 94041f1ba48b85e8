"""Client/server version compatibility check run before every command."""

from loguru import logger

from grind.client import GrindClient
from grind.errors import ProtocolError, VersionError
from grind.models import ServerVersion
from grind.semver import SemanticVersion


def _parse(text: str, what: str) -> SemanticVersion:
    try:
        return SemanticVersion.parse(text)
    except ValueError as e:
        raise ProtocolError(f"{what} {text!r} is not a valid semantic version") from e


def check_version(client: GrindClient, current: str) -> ServerVersion:
    """Compare this client's version against the server's thresholds.

    Fetches ``/version`` from the server. If the server requires a newer
    release than `current`, nothing else may run; if it only recommends
    one, a warning is logged and the caller continues.

    Args:
        client: Client for the server to check against.
        current: This client's version, e.g. ``"2.1.0"``.

    Returns:
        The version information reported by the server.

    Raises:
        VersionError: If `current` is older than the required version.
        ProtocolError: If any of the versions cannot be parsed.
    """
    server = client.must_get_object("/version", download=ServerVersion.from_dict)
    grind_current = _parse(current, "client version")
    grind_required = _parse(server.grind_version_required, "required version")
    grind_recommended = _parse(server.grind_version_recommended, "recommended version")

    if grind_required > grind_current:
        raise VersionError(current, server.grind_version_required)
    if grind_recommended > grind_current:
        logger.warning(
            f"this is grind version {current}, but the server recommends "
            f"{server.grind_version_recommended} or higher"
        )
        logger.warning("  please upgrade as soon as possible")
    return server
