"""Per-user session configuration stored in the home directory."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from grind.client import GrindClient, check_cookie
from grind.errors import ConfigError
from grind.version_gate import check_version

DEFAULT_HOST = "dorking.cs.dixie.edu"
PER_USER_DOT_FILE = ".codegrinderrc"
HOME_VARIABLES = ("HOME", "USERPROFILE")


@dataclass
class Config:
    """Session state for one invocation of grind.

    Only `host` and `cookie` are stored on disk. The diagnostic flags come
    from the command line every time and do not take part in equality.

    Attributes:
        host: Server address, without scheme
        cookie: Session cookie of the form ``codegrinder=...``, or empty
        api_report: Log every API request
        api_dump: Also log request and response payloads
    """

    host: str = DEFAULT_HOST
    cookie: str = ""
    api_report: bool = field(default=False, compare=False)
    api_dump: bool = field(default=False, compare=False)

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """Create a Config from the stored JSON object.

        Raises:
            ValueError: If `data` does not have the expected shape.
        """
        if not isinstance(data, dict):
            raise ValueError("expected a JSON object")
        host = data.get("host", "")
        cookie = data.get("cookie", "")
        if not isinstance(host, str) or not isinstance(cookie, str):
            raise ValueError("host and cookie must be strings")
        return cls(host=host or DEFAULT_HOST, cookie=cookie)

    def to_dict(self) -> dict:
        return {"host": self.host, "cookie": self.cookie}

    def set_flags(self, api_report: bool = False, api_dump: bool = False) -> None:
        """Merge command-line diagnostic flags; dumping implies reporting."""
        self.api_report = api_report or api_dump
        self.api_dump = api_dump


def config_path(environ: Mapping[str, str] | None = None) -> Path:
    """Get the path of the per-user config file.

    Raises:
        ConfigError: If no home directory can be found.
    """
    if environ is None:
        environ = os.environ
    for variable in HOME_VARIABLES:
        home = environ.get(variable)
        if home:
            return Path(home) / PER_USER_DOT_FILE
    raise ConfigError("Unable to locate home directory, giving up")


def read_config(path: Path) -> Config:
    """Read a config file without contacting the server.

    Raises:
        ConfigError: If the file is missing, unreadable, or corrupt.
    """
    try:
        raw = path.read_bytes()
    except OSError as e:
        logger.debug(f"Cannot read {path}: {e}")
        raise ConfigError('Unable to load config file; try running "grind init"') from e
    try:
        config = Config.from_dict(json.loads(raw.decode("utf-8")))
    except ValueError as e:
        raise ConfigError(
            f"failed to parse {path}: {e}\n"
            'you may wish to try deleting the file and running "grind init" again'
        ) from e
    if config.cookie:
        check_cookie(config.cookie)
    return config


def load_config(
    api_report: bool = False,
    api_dump: bool = False,
    path: Path | None = None,
    current_version: str | None = None,
) -> Config:
    """Load the session config and check version compatibility with the server.

    Args:
        api_report: Log every API request.
        api_dump: Log request and response payloads as well.
        path: Config file to read. Defaults to `config_path()`.
        current_version: Version to check against the server. Defaults to
            this package's version.

    Returns:
        The loaded config, with the diagnostic flags applied.

    Raises:
        ConfigError: If the config cannot be found or parsed.
        VersionError: If this client is too old for the server.
    """
    if path is None:
        path = config_path()
    if current_version is None:
        from grind import __version__ as current_version

    config = read_config(path)
    config.set_flags(api_report=api_report, api_dump=api_dump)
    check_version(GrindClient(config), current_version)
    return config


def save_config(config: Config, path: Path | None = None) -> Path:
    """Write the config as indented JSON, readable only by its owner.

    Any existing file is overwritten in place.

    Returns:
        The path written to.
    """
    if path is None:
        path = config_path()
    raw = json.dumps(config.to_dict(), indent=4) + "\n"
    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(raw)
        os.chmod(path, 0o600)
    except OSError as e:
        raise ConfigError(f"error writing {path}: {e}") from e
    logger.debug(f"Config saved to {path}")
    return path
