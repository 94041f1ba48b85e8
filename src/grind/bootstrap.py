"""First-time session setup: capture a cookie, verify it, then save it."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import TextIO

from loguru import logger

from grind.client import COOKIE_NAME, GrindClient, check_cookie
from grind.config import Config, save_config
from grind.errors import CookieError
from grind.models import User
from grind.version_gate import check_version

INSTRUCTIONS = """Please follow these steps:

1.  Use Canvas to load a CodeGrinder window
2.  Open a new tab in your browser and copy this URL into the address bar:

    https://{host}/v2/users/me/cookie

3.  The browser will display something of the form: {cookie_name}=...
4.  Copy that entire string to the clipboard and paste it below.

Paste here: """


def read_token(stream: TextIO) -> str:
    """Read exactly one whitespace-delimited token from a line of `stream`.

    Raises:
        CookieError: If the line is empty or holds more than one token.
    """
    tokens = stream.readline().split()
    if len(tokens) != 1:
        raise CookieError("failed to read the cookie you pasted; please try again")
    return tokens[0]


def read_cookie(host: str, stdin: TextIO | None = None, stdout: TextIO | None = None) -> str:
    """Print instructions for fetching a cookie and read the user's paste.

    Raises:
        CookieError: If the pasted text is not a single ``codegrinder=...`` token.
    """
    stdin = stdin if stdin is not None else sys.stdin
    stdout = stdout if stdout is not None else sys.stdout
    stdout.write(INSTRUCTIONS.format(host=host, cookie_name=COOKIE_NAME))
    stdout.flush()
    return check_cookie(read_token(stdin))


def init_session(
    config: Config,
    cookie: str,
    current_version: str,
    path: Path | None = None,
) -> User:
    """Verify a freshly pasted cookie against the server and persist it.

    The config is saved only after the server has accepted the cookie, so a
    failure at any step leaves an existing config file as it was.

    Args:
        config: In-memory config; its host must already be set.
        cookie: The pasted ``codegrinder=...`` cookie.
        current_version: This client's version.
        path: Config file to write. Defaults to `config_path()`.

    Returns:
        The user the cookie belongs to.
    """
    config.cookie = check_cookie(cookie)
    client = GrindClient(config)
    check_version(client, current_version)
    user = client.must_get_object("/users/me", download=User.from_dict)
    saved = save_config(config, path)
    logger.info(f"cookie verified and saved to {saved}: welcome {user.name}")
    return user
