"""
主协调器

整合服务层与下载层组件，实现刷新、检查更新、下载与更新流程编排。
"""

import asyncio
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from loguru import logger

from modkeeper.download import (
    DownloadManager,
    DownloadRequest,
    DownloadResult,
    ModInstaller,
)
from modkeeper.exceptions import ModKeeperError, ModNotFoundError
from modkeeper.models import Dependency, Mod, ModKeeperConfig, RepoAddress
from modkeeper.services import (
    DependencyResolver,
    GitHubClient,
    ModResolver,
    ModStore,
)


@dataclass
class UpdateCheck:
    """单个模组的更新检查结果"""

    mod: Mod
    latest: Optional[Mod] = None
    missing_dependencies: List[Dependency] = field(default_factory=list)
    error: Optional[ModKeeperError] = None

    @property
    def is_outdated(self) -> bool:
        return self.latest is not None and self.latest.version > self.mod.version

    @property
    def up_to_date(self) -> bool:
        return self.error is None and not self.is_outdated and not self.missing_dependencies


class ModKeeperOrchestrator:
    """ModKeeper 主协调器"""

    def __init__(self, config: ModKeeperConfig, client: Optional[GitHubClient] = None):
        self.config = config
        self.client = client or GitHubClient(
            base_url=config.api_base_url, token=config.github_token
        )
        self.store = ModStore()
        self.mod_resolver = ModResolver(self.client)
        self.dep_resolver = DependencyResolver(
            self.mod_resolver, max_rounds=config.max_resolve_rounds
        )
        self.installer = ModInstaller(self.client)
        self.download_manager = DownloadManager(
            self.installer,
            self.store,
            self.plugins_directory,
            max_concurrent=config.max_concurrent,
        )

    @property
    def plugins_directory(self) -> str:
        return self.config.plugins_directory

    def refresh(self) -> List[Mod]:
        """重新扫描插件目录中已安装的模组"""
        mods = self.store.refresh(self.plugins_directory)
        logger.debug(f"在 {self.plugins_directory} 中找到 {len(mods)} 个模组")
        return mods

    def get_installed_mods(self) -> List[Mod]:
        return self.store.mods()

    def get_mod(self, name: str) -> Mod:
        """
        按名称获取已安装模组

        Raises:
            ModNotFoundError: 没有该名称的模组
        """
        mod = self.store.get(name.strip())
        if mod is None:
            raise ModNotFoundError(f"找不到模组 {name}", context={"mod": name})
        return mod

    def get_missing_dependencies(self, name: str) -> List[Dependency]:
        return list(self.store.get_missing_dependencies(self.get_mod(name)))

    async def check_for_update(self, name: str) -> UpdateCheck:
        """检查单个模组是否有新版本或缺失依赖"""
        return await self._check(self.get_mod(name))

    async def check_all_for_updates(self) -> List[UpdateCheck]:
        """并发检查所有已安装模组"""
        mods = self.store.mods()
        return list(await asyncio.gather(*(self._check(mod) for mod in mods)))

    async def _check(self, mod: Mod) -> UpdateCheck:
        try:
            latest = await self.mod_resolver.get_latest_mod_info(mod.address)
        except ModKeeperError as e:
            logger.error(f"[错误] 无法获取 {mod} 的最新版本: {e}")
            return UpdateCheck(mod=mod, error=e)

        return UpdateCheck(
            mod=mod,
            latest=latest,
            missing_dependencies=list(self.store.get_missing_dependencies(mod)),
        )

    async def download(
        self, repository: str, resolve_dependencies: bool = False
    ) -> List[DownloadResult]:
        """
        下载仓库最新发布中的模组

        Args:
            repository: "owner/name"，只给出名称时使用默认所有者
            resolve_dependencies: 是否同时下载缺失的依赖

        Raises:
            AddressParseError: 仓库地址无效
        """
        address = RepoAddress.parse(repository, default_owner=self.config.default_owner)
        return await self.download_manager.run(
            [DownloadRequest(address, resolve_dependencies)]
        )

    async def update(
        self, name: str, resolve_dependencies: bool = False
    ) -> List[DownloadResult]:
        """更新单个模组"""
        requests = await self._plan_updates([self.get_mod(name)], resolve_dependencies)
        return await self.download_manager.run(requests)

    async def update_all(self, resolve_dependencies: bool = False) -> List[DownloadResult]:
        """更新所有已安装模组"""
        requests = await self._plan_updates(self.store.mods(), resolve_dependencies)
        return await self.download_manager.run(requests)

    async def _plan_updates(
        self, mods: List[Mod], resolve_dependencies: bool
    ) -> List[DownloadRequest]:
        """
        计算需要下载的请求

        不解析依赖时只下载有新版本的模组；解析依赖时以（较新的）模组为起点计算依赖闭包，
        闭包中所有尚未被已安装版本满足的模组都会被下载。
        """
        results = await asyncio.gather(
            *(self.mod_resolver.get_latest_mod_info(mod.address) for mod in mods),
            return_exceptions=True,
        )

        requests: Dict[RepoAddress, DownloadRequest] = {}
        seeds: List[Mod] = []
        for mod, result in zip(mods, results):
            if isinstance(result, ModKeeperError):
                logger.error(f"[错误] 无法检查 {mod} 的更新: {result}")
                seeds.append(mod)
            elif isinstance(result, BaseException):
                raise result
            elif result.version > mod.version:
                logger.info(f"{mod} 有新版本 {result.version}")
                requests[mod.address] = DownloadRequest(mod.address, resolve_dependencies)
                seeds.append(result)
            else:
                logger.info(f"{mod} 已是最新版本")
                seeds.append(mod)

        if not resolve_dependencies:
            return list(requests.values())

        installed = self.store.snapshot()
        closure = await self.dep_resolver.resolve(seeds, installed)
        for member in closure:
            if installed.contains(member.name, member.version):
                continue
            requests.setdefault(member.address, DownloadRequest(member.address, True))

        if self.dep_resolver.failures:
            logger.warning(f"{len(self.dep_resolver.failures)} 个依赖无法解析")
        return list(requests.values())

    async def close(self):
        await self.client.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
