"""
下载任务队列

实现按仓库地址去重的任务队列：一次运行中每个地址最多安装一次。
"""

import asyncio
from dataclasses import dataclass
from typing import Optional, Set

from modkeeper.exceptions import ModKeeperError
from modkeeper.models import Mod, RepoAddress


@dataclass(frozen=True)
class DownloadRequest:
    """下载请求"""

    address: RepoAddress
    resolve_dependencies: bool = False


@dataclass
class DownloadResult:
    """下载结果"""

    address: RepoAddress
    mod: Optional[Mod] = None
    error: Optional[ModKeeperError] = None

    @property
    def success(self) -> bool:
        return self.error is None and self.mod is not None

    def __str__(self) -> str:
        if self.success:
            return f"{self.address}: {self.mod}"
        return f"{self.address}: {self.error}"


class DownloadQueue:
    """下载队列"""

    def __init__(self):
        self._queue: asyncio.Queue = asyncio.Queue()
        self._seen: Set[str] = set()
        self._total_queued = 0

    def put(self, request: DownloadRequest) -> bool:
        """
        添加请求到队列

        Returns:
            True 如果请求是新添加的，False 如果该地址本次运行中已经出现过
        """
        key = str(request.address)
        if key in self._seen:
            return False

        self._seen.add(key)
        self._queue.put_nowait(request)
        self._total_queued += 1
        return True

    async def get(self) -> DownloadRequest:
        """获取下一个请求"""
        return await self._queue.get()

    def task_done(self):
        """标记请求完成"""
        self._queue.task_done()

    def qsize(self) -> int:
        return self._queue.qsize()

    def empty(self) -> bool:
        return self._queue.empty()

    async def join(self):
        """等待所有请求（包括运行中追加的请求）完成"""
        await self._queue.join()

    def is_duplicate(self, address: RepoAddress) -> bool:
        """检查地址是否已经入队过"""
        return str(address) in self._seen

    def get_stats(self) -> dict:
        """获取队列统计"""
        return {
            "pending": self.qsize(),
            "total_queued": self._total_queued,
        }
