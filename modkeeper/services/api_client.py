"""
GitHub API 客户端

获取仓库的最新发布信息并下载发布中的资源文件。
"""

import asyncio
from typing import AsyncIterator, Optional

import aiohttp
from loguru import logger

from modkeeper.exceptions import (
    APIError,
    APINotFoundError,
    APIRateLimitError,
    APIServerError,
)
from modkeeper.models import AssetInfo, ReleaseInfo, RepoAddress

GITHUB_BASE_URL = "https://api.github.com"
USER_AGENT = "modkeeper"
CHUNK_SIZE = 8192


class GitHubClient:
    """GitHub API 客户端"""

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        base_url: str = GITHUB_BASE_URL,
        token: Optional[str] = None,
    ):
        self._session = session
        self._owned_session = session is None
        self.base_url = base_url.rstrip("/")
        self.token = token

    @property
    def session(self) -> aiohttp.ClientSession:
        """获取或创建 aiohttp session"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(headers={"User-Agent": USER_AGENT})
        return self._session

    def _headers(self, accept: str) -> dict:
        headers = {"Accept": accept, "User-Agent": USER_AGENT}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    @staticmethod
    def _raise_for_status(response: aiohttp.ClientResponse, url: str):
        """非 2xx 响应转换为对应的 APIError"""
        if 200 <= response.status < 300:
            return

        message = f"GET 请求 {url} 失败 (状态码: {response.status})"
        if response.status == 404:
            raise APINotFoundError(message, response=response)
        if response.status in (403, 429):
            raise APIRateLimitError(message, response=response)
        if response.status >= 500:
            raise APIServerError(message, response=response)
        raise APIError(message, response=response)

    async def get_latest_release(self, address: RepoAddress) -> ReleaseInfo:
        """
        获取仓库的最新发布

        Raises:
            APIError: 请求失败、状态码非 2xx 或响应无法解析
        """
        url = f"{self.base_url}/repos/{address.owner}/{address.name}/releases/latest"
        logger.debug(f"[API] GET {url}")

        try:
            async with self.session.get(
                url, headers=self._headers("application/vnd.github+json")
            ) as response:
                self._raise_for_status(response, url)
                try:
                    data = await response.json(content_type=None)
                except ValueError:
                    raise APIError(
                        f"无法解析 {url} 返回的发布信息",
                        context={"url": url, "address": str(address)},
                    )
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise APIError(
                f"请求 {url} 时发生网络错误: {e!r}",
                context={"url": url, "address": str(address)},
            )

        if not isinstance(data, dict):
            raise APIError(
                f"无法解析 {url} 返回的发布信息",
                context={"url": url, "address": str(address)},
            )

        return ReleaseInfo.from_github(data)

    async def iter_asset(
        self, asset: AssetInfo, chunk_size: int = CHUNK_SIZE
    ) -> AsyncIterator[bytes]:
        """
        以流的方式下载资源文件

        Yields:
            文件内容分块
        """
        try:
            async with self.session.get(
                asset.url, headers=self._headers("application/octet-stream")
            ) as response:
                self._raise_for_status(response, asset.url)
                async for chunk in response.content.iter_chunked(chunk_size):
                    yield chunk
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise APIError(
                f"下载 {asset.name} 时发生网络错误: {e!r}",
                context={"url": asset.url, "asset": asset.name},
            )

    async def download_asset(self, asset: AssetInfo) -> bytes:
        """下载完整的资源文件，解码由调用方负责"""
        chunks = [chunk async for chunk in self.iter_asset(asset)]
        return b"".join(chunks)

    async def close(self):
        """关闭客户端"""
        if self._owned_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
