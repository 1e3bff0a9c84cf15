"""
模组信息服务

根据仓库地址获取最新发布中的 manifest.json，返回标准化的 Mod。
"""

from typing import Dict, Optional

from loguru import logger

from modkeeper.exceptions import AssetNotFoundError
from modkeeper.manifest import MANIFEST_FILENAME, parse_manifest
from modkeeper.models import Mod, RepoAddress
from modkeeper.services.api_client import GitHubClient


class ModResolver:
    """最新模组信息解析器"""

    def __init__(self, client: GitHubClient, use_cache: bool = False):
        self.client = client
        self.use_cache = use_cache
        self._cache: Dict[RepoAddress, Mod] = {}

    async def get_latest_mod_info(self, address: RepoAddress) -> Mod:
        """
        获取仓库最新发布对应的模组信息

        Raises:
            APIError: 获取发布或下载 manifest 失败
            AssetNotFoundError: 发布中没有 manifest.json
            ManifestError: manifest 内容无效
        """
        if self.use_cache and address in self._cache:
            return self._cache[address]

        release = await self.client.get_latest_release(address)
        asset = release.find_asset(MANIFEST_FILENAME)
        if asset is None:
            raise AssetNotFoundError(
                f"发布 {release.name} 中没有 {MANIFEST_FILENAME} 文件",
                context={"address": str(address), "release": release.name},
            )

        mod = parse_manifest(await self.client.download_asset(asset))
        logger.debug(f"[信息] {address} 的最新版本为 {mod}")

        if self.use_cache:
            self._cache[address] = mod
        return mod

    def cached(self, address: RepoAddress) -> Optional[Mod]:
        return self._cache.get(address)

    def clear_cache(self):
        """清除缓存"""
        self._cache.clear()
