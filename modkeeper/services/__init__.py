"""
ModKeeper 服务层

包含业务逻辑服务：GitHub 客户端、模组信息查询、依赖解析、已安装模组存储。
"""

from modkeeper.services.api_client import GitHubClient
from modkeeper.services.mod_resolver import ModResolver
from modkeeper.services.dependency_resolver import (
    MAX_RESOLVE_ROUNDS,
    DependencyFailure,
    DependencyResolver,
)
from modkeeper.services.mod_store import ModStore

__all__ = [
    "GitHubClient",
    "ModResolver",
    "DependencyResolver",
    "DependencyFailure",
    "MAX_RESOLVE_ROUNDS",
    "ModStore",
]
