#!/usr/bin/env python
"""Tests for the client/server version check."""

from unittest.mock import patch

import pytest

from grind.client import GrindClient
from grind.config import Config
from grind.errors import ProtocolError, VersionError
from grind.version_gate import check_version


def _server(required, recommended, version="3.0.0"):
    return {
        "version": version,
        "grindVersionRequired": required,
        "grindVersionRecommended": recommended,
    }


@pytest.fixture
def client():
    return GrindClient(Config(host="grind.example.edu", cookie="codegrinder=abc"))


class TestCheckVersion:
    """Test check_version against various server thresholds."""

    def test_requests_version_endpoint(self, client, make_response):
        """Test that the check fetches /version."""
        with patch("grind.client.requests.request", return_value=make_response(200, _server("1.0.0", "1.0.0"))) as mock_request:
            server = check_version(client, "2.1.0")
        assert mock_request.call_args.args == ("GET", "https://grind.example.edu/v2/version")
        assert server.grind_version_required == "1.0.0"

    def test_required_newer_aborts(self, client, make_response):
        """Test that a client older than the required version is refused."""
        with patch("grind.client.requests.request", return_value=make_response(200, _server("2.0.0", "2.0.0"))):
            with pytest.raises(VersionError) as excinfo:
                check_version(client, "1.9.0")
        assert excinfo.value.required == "2.0.0"
        assert "you must upgrade" in str(excinfo.value)

    def test_recommended_newer_warns(self, client, make_response):
        """Test that an outdated but supported client only gets a warning."""
        with patch("grind.client.requests.request", return_value=make_response(200, _server("2.0.0", "2.2.0"))):
            with patch("grind.version_gate.logger") as mock_logger:
                check_version(client, "2.1.0")
        first = mock_logger.warning.call_args_list[0].args[0]
        assert "2.2.0" in first
        assert "recommends" in first

    @pytest.mark.parametrize(
        "required, recommended, current",
        [("2.1.0", "2.1.0", "2.1.0"), ("1.0.0", "2.0.0", "2.1.0"), ("2.1.0-rc.1", "2.1.0", "2.1.0")],
    )
    def test_up_to_date_is_silent(self, client, make_response, required, recommended, current):
        """Test that equal or older thresholds produce no output."""
        with patch("grind.client.requests.request", return_value=make_response(200, _server(required, recommended))):
            with patch("grind.version_gate.logger") as mock_logger:
                check_version(client, current)
        mock_logger.warning.assert_not_called()

    @pytest.mark.parametrize(
        "required, recommended, current",
        [("two", "2.0.0", "2.1.0"), ("2.0.0", "2.2", "2.1.0"), ("2.0.0", "2.0.0", "dev")],
    )
    def test_unparseable_versions_are_fatal(self, client, make_response, required, recommended, current):
        """Test that any malformed version raises ProtocolError."""
        with patch("grind.client.requests.request", return_value=make_response(200, _server(required, recommended))):
            with pytest.raises(ProtocolError):
                check_version(client, current)

    @pytest.mark.parametrize(
        "payload",
        [
            {"version": "3.0.0"},
            {"grindVersionRequired": "2.0.0"},
            {"grindVersionRecommended": "2.0.0"},
            {"grindVersionRequired": 2, "grindVersionRecommended": "2.0.0"},
        ],
    )
    def test_missing_thresholds_are_fatal(self, client, make_response, payload):
        """Test that a version object without both thresholds is rejected."""
        with patch("grind.client.requests.request", return_value=make_response(200, payload)):
            with pytest.raises(ProtocolError):
                check_version(client, "2.1.0")

    def test_server_version_is_optional(self, client, make_response):
        """Test that the server's own version string may be left out."""
        payload = {"grindVersionRequired": "2.0.0", "grindVersionRecommended": "2.0.0"}
        with patch("grind.client.requests.request", return_value=make_response(200, payload)):
            server = check_version(client, "2.1.0")
        assert server.version == ""
        assert server.grind_version_required == "2.0.0"


class TestOrderingProperties:
    """Test the gate for versions a < b < c."""

    A, B, C = "1.4.2", "1.10.0", "2.0.0-beta"

    def test_required_b_client_a_aborts(self, client, make_response):
        with patch("grind.client.requests.request", return_value=make_response(200, _server(self.B, self.B))):
            with pytest.raises(VersionError):
                check_version(client, self.A)

    def test_required_a_client_b_passes(self, client, make_response):
        with patch("grind.client.requests.request", return_value=make_response(200, _server(self.A, self.A))):
            check_version(client, self.B)

    def test_recommended_c_client_b_warns(self, client, make_response):
        with patch("grind.client.requests.request", return_value=make_response(200, _server(self.A, self.C))):
            with patch("grind.version_gate.logger") as mock_logger:
                check_version(client, self.B)
        assert mock_logger.warning.called
