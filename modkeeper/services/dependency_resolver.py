"""
依赖解析服务

按轮次计算一组模组的传递依赖闭包。
每一轮内对未知依赖按来源地址去重后并发查询，整轮完成后才进入下一轮；
轮数有上限，用于在循环依赖或过深的依赖链上终止。
"""

import asyncio
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from loguru import logger

from modkeeper.exceptions import ModKeeperError
from modkeeper.models import Dependency, DependencySet, Mod, ModSet, RepoAddress
from modkeeper.services.mod_resolver import ModResolver

MAX_RESOLVE_ROUNDS = 8


@dataclass
class DependencyFailure:
    """单个依赖的解析失败"""

    dependency: Dependency
    reason: str

    def __str__(self) -> str:
        return f"{self.dependency.name} ({self.dependency.source}): {self.reason}"


class DependencyResolver:
    """依赖解析器"""

    def __init__(self, mod_resolver: ModResolver, max_rounds: int = MAX_RESOLVE_ROUNDS):
        self.mod_resolver = mod_resolver
        self.max_rounds = max_rounds
        self.failures: List[DependencyFailure] = []
        self.truncated = False
        self.rounds = 0

    async def resolve(self, seeds: Iterable[Mod], installed: ModSet) -> ModSet:
        """
        解析依赖闭包

        Args:
            seeds: 起始模组
            installed: 已安装模组的快照，满足版本要求时直接使用而不发起请求

        Returns:
            包含起始模组在内的完整闭包
        """
        self.failures = []
        self.truncated = False
        self.rounds = 0

        frontier = ModSet(seeds)
        closed = ModSet()
        pending = DependencySet()

        while frontier and self.rounds < self.max_rounds:
            self.rounds += 1

            for mod in frontier:
                closed.add(mod)
                pending.update(mod.dependencies)
            frontier.clear()

            lookups: Dict[RepoAddress, List[Dependency]] = {}
            for dependency in pending:
                if closed.contains(dependency.name, dependency.min_version):
                    continue

                local = installed.get(dependency.name, dependency.min_version)
                if local is not None:
                    frontier.add(local)
                else:
                    lookups.setdefault(dependency.source, []).append(dependency)
            pending.clear()

            if lookups:
                logger.debug(
                    f"[解析] 第 {self.rounds} 轮查询 {len(lookups)} 个依赖: "
                    f"{', '.join(str(address) for address in lookups)}"
                )
            for mod in await self._fetch_all(lookups):
                if closed.get(mod.name) != mod:
                    frontier.add(mod)

        if frontier:
            self.truncated = True
            logger.warning(
                f"[解析] 已达到 {self.max_rounds} 轮上限，以下模组的依赖未被解析: "
                f"{', '.join(str(mod) for mod in frontier)}"
            )

        return closed

    async def _fetch_all(
        self, lookups: Dict[RepoAddress, List[Dependency]]
    ) -> List[Mod]:
        """
        并发获取本轮所有依赖的最新信息，单个失败不影响其他依赖

        获取成功的模组总会加入闭包；同一地址上没有被它满足的依赖记录为失败。
        """
        if not lookups:
            return []

        items: List[Tuple[RepoAddress, List[Dependency]]] = list(lookups.items())
        results = await asyncio.gather(
            *(self.mod_resolver.get_latest_mod_info(address) for address, _ in items),
            return_exceptions=True,
        )

        mods: List[Mod] = []
        for (address, dependencies), result in zip(items, results):
            if isinstance(result, ModKeeperError):
                for dependency in dependencies:
                    self._fail(dependency, result.message)
                continue
            if isinstance(result, BaseException):
                raise result

            mods.append(result)
            for dependency in dependencies:
                if result.name != dependency.name:
                    self._unsatisfied(
                        dependency, f"仓库 {address} 提供的模组是 {result.name}"
                    )
                elif result.version < dependency.min_version:
                    self._unsatisfied(
                        dependency,
                        f"最新版本 {result.version} 低于所需的 {dependency.min_version}",
                    )
        return mods

    def _fail(self, dependency: Dependency, reason: str):
        self.failures.append(DependencyFailure(dependency, reason))
        logger.error(f"[错误] 无法获取 {dependency.name} 的最新版本: {reason}")

    def _unsatisfied(self, dependency: Dependency, reason: str):
        self.failures.append(DependencyFailure(dependency, reason))
        logger.warning(f"[解析] 依赖 {dependency} 未被满足: {reason}")
