"""HTTP client for the CodeGrinder JSON API.

One request per call, no retries, no connection reuse. Every request carries
the session cookie from the loaded `Config`, and every outcome other than a
2xx response (or a 404 the caller explicitly asked to tolerate) raises.
"""

from __future__ import annotations

import json
import sys
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, TextIO

import requests
from loguru import logger

from grind.errors import APIError, CookieError, GrindConnectionError, ProtocolError

if TYPE_CHECKING:
    from grind.config import Config

COOKIE_NAME = "codegrinder"
API_PREFIX = "/v2"
METHODS = ("GET", "POST", "PUT", "DELETE")
BODY_METHODS = ("POST", "PUT")


def as_json(value: Any) -> Any:
    """Download converter that keeps the decoded JSON value as is."""
    return value


def check_cookie(cookie: str) -> str:
    """Return `cookie` unchanged if it has the ``codegrinder=`` prefix.

    Raises:
        CookieError: If the cookie is anything else.
    """
    if not cookie.startswith(COOKIE_NAME + "="):
        raise CookieError(
            f"the cookie must start with {COOKIE_NAME}=; perhaps you copied the wrong thing?"
        )
    return cookie


class GrindClient:
    """Client for the CodeGrinder API of a single host.

    Attributes:
        config: The session config supplying host, cookie and diagnostic flags
        timeout: Seconds to wait for the server, or None for the transport default
        diagnostics: Stream that receives the body of failed responses
    """

    def __init__(
        self,
        config: Config,
        timeout: float | None = None,
        diagnostics: TextIO | None = None,
    ):
        """Initializes the GrindClient."""
        self.config = config
        self.timeout = timeout
        self.diagnostics = diagnostics

    @property
    def base_url(self) -> str:
        return f"https://{self.config.host}{API_PREFIX}"

    def url_for(self, path: str) -> str:
        """Get the full URL for an API path such as ``/users/me``."""
        if not path.startswith("/"):
            raise ValueError(f"API path must start with /: {path!r}")
        return self.base_url + path

    def _headers(self, json_body: bool) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.config.cookie:
            headers["Cookie"] = check_cookie(self.config.cookie)
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    def request(
        self,
        path: str,
        params: Mapping[str, str] | None = None,
        method: str = "GET",
        upload: Any = None,
        download: Callable[[Any], Any] | None = None,
        not_found_ok: bool = False,
    ) -> tuple[bool, Any]:
        """Send one request to the API and decode the response.

        Args:
            path: API path below the version prefix; must start with ``/``.
            params: Query parameters. Their order is not significant.
            method: One of GET, POST, PUT or DELETE.
            upload: Object to send as an indented JSON body (POST and PUT only).
            download: Called with the decoded JSON body to build the result,
                e.g. `as_json` or ``User.from_dict``. If None the body is ignored.
            not_found_ok: Treat a 404 response as an absent result instead of
                an error.

        Returns:
            A ``(found, value)`` pair. `found` is False only for a tolerated
            404; `value` is the result of `download`, or None if nothing was
            downloaded.

        Raises:
            ValueError: If `path` or `method` is malformed, or a body is given
                for a GET or DELETE. These indicate a bug in the caller.
            CookieError: If the stored cookie is malformed.
            GrindConnectionError: If the server cannot be reached.
            APIError: On any other non-2xx status.
            ProtocolError: If the response body is not valid JSON.
        """
        url = self.url_for(path)
        if method not in METHODS:
            raise ValueError(f"request only recognizes {', '.join(METHODS)} methods, not {method!r}")
        if upload is not None and method not in BODY_METHODS:
            raise ValueError(f"{method} requests cannot carry a body")

        data = None
        if upload is not None:
            data = json.dumps(upload, indent=4)
        headers = self._headers(json_body=data is not None)

        if self.config.api_report:
            query = requests.PreparedRequest()
            query.prepare_url(url, dict(params) if params else None)
            logger.info(f"{method} {query.url}")
        if data is not None and self.config.api_dump:
            logger.info(f"Request data: {data}")

        try:
            response = requests.request(
                method,
                url,
                params=dict(params) if params else None,
                data=data.encode("utf-8") if data is not None else None,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise GrindConnectionError(f"error connecting to {self.config.host}: {e}") from e

        with response:
            if not_found_ok and response.status_code == 404:
                logger.debug(f"{method} {url}: not found")
                return False, None
            if not 200 <= response.status_code < 300:
                body = response.text
                stream = self.diagnostics if self.diagnostics is not None else sys.stderr
                stream.write(body)
                if body and not body.endswith("\n"):
                    stream.write("\n")
                raise APIError(response.status_code, url, body=body, reason=response.reason or "")

            if download is None:
                return True, None
            try:
                decoded = response.json()
            except ValueError as e:
                raise ProtocolError(f"failed to parse result object from server: {e}") from e

        if self.config.api_dump:
            logger.info(f"Response data: {json.dumps(decoded, indent=4)}")
        return True, download(decoded)

    def get_object(
        self,
        path: str,
        params: Mapping[str, str] | None = None,
        download: Callable[[Any], Any] = as_json,
    ) -> tuple[bool, Any]:
        """GET an object that may not exist; returns ``(False, None)`` on 404."""
        return self.request(path, params, "GET", download=download, not_found_ok=True)

    def must_get_object(
        self,
        path: str,
        params: Mapping[str, str] | None = None,
        download: Callable[[Any], Any] = as_json,
    ) -> Any:
        return self.request(path, params, "GET", download=download)[1]

    def must_post_object(
        self,
        path: str,
        params: Mapping[str, str] | None = None,
        upload: Any = None,
        download: Callable[[Any], Any] | None = None,
    ) -> Any:
        return self.request(path, params, "POST", upload=upload, download=download)[1]

    def must_put_object(
        self,
        path: str,
        params: Mapping[str, str] | None = None,
        upload: Any = None,
        download: Callable[[Any], Any] | None = None,
    ) -> Any:
        return self.request(path, params, "PUT", upload=upload, download=download)[1]

    def must_delete(self, path: str, params: Mapping[str, str] | None = None) -> None:
        self.request(path, params, "DELETE")
