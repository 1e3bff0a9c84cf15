"""
ModKeeper 下载层

包含模组安装、去重任务队列与下载管理。
"""

from modkeeper.download.installer import PACKAGE_ASSET_NAME, ModInstaller
from modkeeper.download.manager import DownloadManager, DownloadStats
from modkeeper.download.queue import DownloadQueue, DownloadRequest, DownloadResult

__all__ = [
    "PACKAGE_ASSET_NAME",
    "ModInstaller",
    "DownloadManager",
    "DownloadStats",
    "DownloadQueue",
    "DownloadRequest",
    "DownloadResult",
]
