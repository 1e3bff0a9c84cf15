"""
下载管理器

由工作协程池消费可自我扩展的下载队列：安装成功且需要解析依赖时，
把新模组缺失的依赖重新放回队列。队列按地址去重，因此一定会终止。
"""

import asyncio
from dataclasses import dataclass
from typing import Iterable, List, Optional

from loguru import logger

from modkeeper.download.installer import ModInstaller
from modkeeper.download.queue import DownloadQueue, DownloadRequest, DownloadResult
from modkeeper.exceptions import InstallError, ModKeeperError
from modkeeper.services.mod_store import ModStore


@dataclass
class DownloadStats:
    """下载统计"""

    total: int = 0
    completed: int = 0
    failed: int = 0
    skipped: int = 0


class DownloadManager:
    """下载管理器"""

    def __init__(
        self,
        installer: ModInstaller,
        store: ModStore,
        target_dir: str,
        max_concurrent: int = 5,
    ):
        self.installer = installer
        self.store = store
        self.target_dir = target_dir
        self.max_concurrent = max_concurrent
        self.queue: Optional[DownloadQueue] = None
        self.stats = DownloadStats()
        self.results: List[DownloadResult] = []
        self._workers: List[asyncio.Task] = []

    def enqueue(self, request: DownloadRequest) -> bool:
        """添加下载请求，同一次运行中重复的地址会被忽略"""
        added = self.queue.put(request)
        if added:
            self.stats.total += 1
            logger.debug(f"[队列] '{request.address}' 已加入下载队列")
        else:
            self.stats.skipped += 1
            logger.debug(f"[跳过] '{request.address}' 已在本次下载中处理")
        return added

    async def run(self, requests: Iterable[DownloadRequest]) -> List[DownloadResult]:
        """
        处理所有请求直到队列（包括运行中追加的依赖）清空

        Returns:
            每个被处理的地址对应一个结果
        """
        self.queue = DownloadQueue()
        self.stats = DownloadStats()
        self.results = []

        for request in requests:
            self.enqueue(request)

        if self.queue.empty():
            return []

        logger.info(f"[启动] 下载器启动，最大并发数: {self.max_concurrent}")
        self._workers = [
            asyncio.create_task(self._worker(), name=f"installer-{i}")
            for i in range(self.max_concurrent)
        ]
        try:
            await self.queue.join()
        finally:
            await self._stop()

        logger.info(
            f"下载完成: {self.stats.completed} 成功, {self.stats.failed} 失败, "
            f"{self.stats.skipped} 跳过"
        )
        return list(self.results)

    async def _process(self, request: DownloadRequest):
        """安装单个地址，并在需要时把缺失的依赖加入队列"""
        address = request.address
        logger.info(f"[开始] 下载 {address}")

        try:
            mod = await self.installer.install(address, self.target_dir)
        except ModKeeperError as e:
            self._record_failure(request, e)
            return

        self.store.replace(mod)
        self.stats.completed += 1
        self.results.append(DownloadResult(address=address, mod=mod))
        logger.success(f"[完成] 已下载 {mod}")

        if not request.resolve_dependencies:
            return

        missing = self.store.get_missing_dependencies(mod)
        if missing:
            logger.info(f"{mod} 缺少 {len(missing)} 个依赖: {', '.join(map(str, missing))}")
        for dependency in missing:
            self.enqueue(DownloadRequest(dependency.source, resolve_dependencies=True))

    def _record_failure(self, request: DownloadRequest, error: ModKeeperError):
        self.stats.failed += 1
        self.results.append(DownloadResult(address=request.address, error=error))
        logger.error(f"[错误] 下载 {request.address} 的模组失败: {error}")

    async def _worker(self):
        """下载工作协程"""
        while True:
            request = await self.queue.get()
            try:
                await self._process(request)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                # 单个请求的意外错误不能终止工作协程
                logger.exception(f"[错误] 处理 {request.address} 时发生意外错误: {e}")
                self._record_failure(
                    request,
                    InstallError(f"意外错误: {e}", context={"error": repr(e)}),
                )
            finally:
                self.queue.task_done()

    async def _stop(self):
        for worker in self._workers:
            worker.cancel()
        if self._workers:
            await asyncio.gather(*self._workers, return_exceptions=True)
            self._workers.clear()

    def get_stats(self) -> DownloadStats:
        """获取下载统计"""
        return self.stats

    def get_failed(self) -> List[DownloadResult]:
        """获取失败的下载列表"""
        return [result for result in self.results if not result.success]
