"""
ModKeeper 数据模型包

包含标识符、模组、集合、配置与 API 模型定义。
"""

from modkeeper.models.identifiers import RepoAddress, Ver
from modkeeper.models.mod import Dependency, Mod
from modkeeper.models.collections import (
    ModSet,
    DependencySet,
    get_dependencies,
    get_missing_dependencies,
)
from modkeeper.models.config import ModKeeperConfig
from modkeeper.models.api import AssetInfo, ReleaseInfo

__all__ = [
    # 标识符
    "RepoAddress",
    "Ver",
    # 模组模型
    "Dependency",
    "Mod",
    "ModSet",
    "DependencySet",
    "get_dependencies",
    "get_missing_dependencies",
    # 配置模型
    "ModKeeperConfig",
    # API 模型
    "AssetInfo",
    "ReleaseInfo",
]
