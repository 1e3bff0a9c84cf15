"""Tests for GitHub response handling."""

import asyncio

import aiohttp
import pytest
from aiohttp import web
from aiohttp import test_utils

from modkeeper.exceptions import (
    APIError,
    APINotFoundError,
    APIRateLimitError,
    APIServerError,
)
from modkeeper.models import AssetInfo, ModSet, ReleaseInfo, RepoAddress
from modkeeper.services import DependencyResolver, GitHubClient, ModResolver

from fakes import make_mod


class _DummyResponse:
    def __init__(self, status):
        self.status = status
        self.url = "https://api.github.com/repos/Owner/Name/releases/latest"


class TestRaiseForStatus:
    @pytest.mark.parametrize(
        "status,error",
        [
            (404, APINotFoundError),
            (403, APIRateLimitError),
            (429, APIRateLimitError),
            (502, APIServerError),
            (400, APIError),
        ],
    )
    def test_error_statuses(self, status, error):
        with pytest.raises(error) as excinfo:
            GitHubClient._raise_for_status(_DummyResponse(status), "url")
        assert excinfo.value.context["status_code"] == status

    def test_success_status(self):
        GitHubClient._raise_for_status(_DummyResponse(200), "url")


class TestHeaders:
    def test_token_is_sent(self):
        headers = GitHubClient(token="abc")._headers("application/octet-stream")
        assert headers["Authorization"] == "Bearer abc"
        assert headers["Accept"] == "application/octet-stream"

    def test_anonymous(self):
        assert "Authorization" not in GitHubClient()._headers("application/json")


class TestReleaseInfo:
    def test_from_github(self):
        release = ReleaseInfo.from_github(
            {
                "name": "SpinCore 1.2",
                "tag_name": "v1.2",
                "assets": [
                    {"name": "plugin.zip", "url": "https://example.invalid/1", "size": 10},
                    {"name": "manifest.json", "url": "https://example.invalid/2"},
                ],
            }
        )
        assert release.tag == "v1.2"
        assert release.find_asset("plugin.zip").size == 10
        assert release.find_asset("manifest.json").size == 0
        assert release.find_asset("other.zip") is None

    def test_missing_fields(self):
        release = ReleaseInfo.from_github({"tag_name": "v1.0"})
        assert release.name == "v1.0"
        assert release.assets == []


class TestTimeouts:
    def test_slow_responses_become_api_errors(self):
        async def slow(request):
            await asyncio.sleep(1)
            return web.json_response({"tag_name": "v1.0"})

        async def run():
            app = web.Application()
            app.router.add_get("/repos/Owner/Slow/releases/latest", slow)
            app.router.add_get("/asset", slow)

            async with test_utils.TestServer(app) as server:
                timeout = aiohttp.ClientTimeout(total=0.2)
                async with aiohttp.ClientSession(timeout=timeout) as session:
                    client = GitHubClient(session=session, base_url=str(server.make_url("")))

                    with pytest.raises(APIError) as excinfo:
                        await client.get_latest_release(RepoAddress("Owner", "Slow"))
                    assert excinfo.value.context["address"] == "Owner/Slow"

                    asset = AssetInfo(name="plugin.zip", url=str(server.make_url("/asset")))
                    with pytest.raises(APIError):
                        await client.download_asset(asset)

                    resolver = DependencyResolver(ModResolver(client))
                    a = make_mod("A", dependencies=[("Slow", "1.0", "Owner/Slow")])
                    closure = await resolver.resolve([a], ModSet())
                    return closure, resolver.failures

        closure, failures = asyncio.run(run())

        assert [mod.name for mod in closure] == ["A"]
        assert [failure.dependency.name for failure in failures] == ["Slow"]
