"""Unit tests for ReleaseClient (simbot_codegen.version_client).

Tests cover:
- ReleaseInfo / ReleaseLookup models
- ReleaseClient.__init__
- fetch_latest_release (success, missing tag, connect error, timeout, HTTP error, unexpected error)
- resolve_version prefix stripping and pinned fallback
- resolve_simbot_version / resolve_selection_versions
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from conftest import make_release_response
from simbot_codegen.catalog import registry
from simbot_codegen.version_client import (
    GITHUB_API_VERSION,
    ReleaseClient,
    ReleaseInfo,
    ReleaseLookup,
    resolve_selection_versions,
    resolve_simbot_version,
    resolve_version,
)


def _ok(tag: str, owner: str = "o", repo: str = "r") -> ReleaseLookup:
    return ReleaseLookup(owner=owner, repo=repo, release=ReleaseInfo(tag=tag))


def _failed(owner: str = "o", repo: str = "r") -> ReleaseLookup:
    return ReleaseLookup(owner=owner, repo=repo, success=False, error=f"{owner}/{repo} down")


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class TestModels:
    @pytest.mark.unit
    def test_lookup_defaults(self):
        lookup = ReleaseLookup(owner="o", repo="r")
        assert lookup.success is True
        assert lookup.release is None
        assert lookup.error is None


# ---------------------------------------------------------------------------
# ReleaseClient.__init__
# ---------------------------------------------------------------------------


class TestReleaseClientInit:
    @pytest.mark.unit
    def test_defaults(self):
        client = ReleaseClient()
        assert client.base_url == "https://api.github.com"
        assert client.timeout == 5.0

    @pytest.mark.unit
    def test_trailing_slash_stripped(self):
        assert ReleaseClient(base_url="https://ghe.example/api/").base_url == "https://ghe.example/api"

    @pytest.mark.unit
    def test_client_headers(self):
        with patch("httpx.AsyncClient") as factory:
            ReleaseClient(timeout=2.0)._client()
        kwargs = factory.call_args.kwargs
        assert kwargs["base_url"] == "https://api.github.com"
        assert kwargs["headers"]["X-GitHub-Api-Version"] == GITHUB_API_VERSION
        assert kwargs["timeout"] == httpx.Timeout(2.0, connect=10.0)


# ---------------------------------------------------------------------------
# fetch_latest_release
# ---------------------------------------------------------------------------


class TestFetchLatestRelease:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_success(self, mock_http_client):
        mock_http_client.get.return_value = make_release_response("v4.6.1")

        with patch("httpx.AsyncClient", return_value=mock_http_client):
            result = await ReleaseClient().fetch_latest_release("simple-robot", "simpler-robot")

        assert result.success is True
        assert result.release.tag == "v4.6.1"
        assert result.release.published_at == "2024-05-01T10:00:00Z"
        mock_http_client.get.assert_awaited_once_with(
            "/repos/simple-robot/simpler-robot/releases/latest"
        )

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_missing_tag(self, mock_http_client):
        response = MagicMock()
        response.json.return_value = {"name": "no tag"}
        response.raise_for_status = MagicMock()
        mock_http_client.get.return_value = response

        with patch("httpx.AsyncClient", return_value=mock_http_client):
            result = await ReleaseClient().fetch_latest_release("o", "r")

        assert result.success is False
        assert "no tag_name" in result.error

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_connect_error(self, mock_http_client):
        mock_http_client.get.side_effect = httpx.ConnectError("Connection refused")

        with patch("httpx.AsyncClient", return_value=mock_http_client):
            result = await ReleaseClient().fetch_latest_release("o", "r")

        assert result.success is False
        assert "Cannot connect" in result.error

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_timeout(self, mock_http_client):
        mock_http_client.get.side_effect = httpx.TimeoutException("timed out")

        with patch("httpx.AsyncClient", return_value=mock_http_client):
            result = await ReleaseClient(timeout=1.5).fetch_latest_release("o", "r")

        assert result.success is False
        assert "timed out after 1.5s" in result.error

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_http_error(self, mock_http_client):
        request = httpx.Request("GET", "https://api.github.com/repos/o/r/releases/latest")
        error_response = httpx.Response(404, request=request, text="Not Found")
        response = MagicMock()
        response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "404", request=request, response=error_response
        )
        mock_http_client.get.return_value = response

        with patch("httpx.AsyncClient", return_value=mock_http_client):
            result = await ReleaseClient().fetch_latest_release("o", "r")

        assert result.success is False
        assert "HTTP 404" in result.error

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unexpected_error(self, mock_http_client):
        mock_http_client.get.side_effect = RuntimeError("boom")

        with patch("httpx.AsyncClient", return_value=mock_http_client):
            result = await ReleaseClient().fetch_latest_release("o", "r")

        assert result.success is False
        assert "boom" in result.error


# ---------------------------------------------------------------------------
# Version resolution
# ---------------------------------------------------------------------------


class TestResolveVersion:
    @pytest.mark.unit
    @pytest.mark.parametrize(("tag", "expected"), [("v4.7.0", "4.7.0"), ("4.7.0", "4.7.0"), ("V1.0", "1.0")])
    def test_prefix_stripped(self, tag, expected):
        assert resolve_version(_ok(tag), pinned="0.0.1") == expected

    @pytest.mark.unit
    def test_failure_falls_back(self):
        assert resolve_version(_failed(), pinned="4.6.0") == "4.6.0"

    @pytest.mark.unit
    def test_bare_v_falls_back(self):
        assert resolve_version(_ok("v"), pinned="4.6.0") == "4.6.0"


class TestResolveSimbotVersion:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_latest(self):
        client = ReleaseClient()
        with patch.object(client, "fetch_latest_release", AsyncMock(return_value=_ok("v4.8.0"))) as fetch:
            version, error = await resolve_simbot_version(client)
        assert (version, error) == ("4.8.0", None)
        fetch.assert_awaited_once_with(registry.SIMBOT_OWNER, registry.SIMBOT_REPO)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_fallback(self):
        client = ReleaseClient()
        with patch.object(client, "fetch_latest_release", AsyncMock(return_value=_failed())):
            version, error = await resolve_simbot_version(client)
        assert version == registry.SIMBOT_VERSION.value
        assert error == "o/r down"


class TestResolveSelectionVersions:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_mixed_results(self):
        async def fake_fetch(owner: str, repo: str) -> ReleaseLookup:
            if repo == registry.COMPONENTS["qq"].repo:
                return _ok("v4.2.0", owner, repo)
            return _failed(owner, repo)

        client = ReleaseClient()
        with patch.object(client, "fetch_latest_release", side_effect=fake_fetch):
            versions, errors = await resolve_selection_versions(client, ["qq", "kook", "telegram"])

        assert versions == {
            "qq": "4.2.0",
            "kook": registry.COMPONENTS["kook"].pinned_version,
        }
        assert errors == ["simple-robot/simbot-component-kook down"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_empty_selection(self):
        client = ReleaseClient()
        with patch.object(client, "fetch_latest_release", AsyncMock()) as fetch:
            versions, errors = await resolve_selection_versions(client, [])
        assert (versions, errors) == ({}, [])
        fetch.assert_not_awaited()
