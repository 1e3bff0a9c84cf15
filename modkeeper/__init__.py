"""
ModKeeper - 游戏模组下载与依赖管理工具

从 GitHub 发布下载模组，解析传递依赖并原子化地安装到插件目录。
"""

__version__ = "0.1.0"

from modkeeper.exceptions import ModKeeperError
from modkeeper.logger import setup_logger

__all__ = ["__version__", "ModKeeperError", "setup_logger"]
