"""
API 数据模型

定义 GitHub 发布相关的数据类。
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class AssetInfo:
    """发布中的资源文件"""

    name: str
    url: str
    size: int = 0


@dataclass
class ReleaseInfo:
    """
    仓库的最新发布信息。
    """

    name: str
    tag: str
    assets: List[AssetInfo] = field(default_factory=list)

    def find_asset(self, name: str) -> Optional[AssetInfo]:
        """按文件名精确查找资源"""
        for asset in self.assets:
            if asset.name == name:
                return asset
        return None

    @classmethod
    def from_github(cls, data: dict) -> "ReleaseInfo":
        """
        将 GitHub API 返回的发布信息转换为 ReleaseInfo 对象。
        """
        assets = [
            AssetInfo(
                name=asset.get("name", ""),
                url=asset.get("url", ""),
                size=asset.get("size", 0) or 0,
            )
            for asset in data.get("assets") or []
        ]

        return cls(
            name=data.get("name") or data.get("tag_name") or "",
            tag=data.get("tag_name") or "",
            assets=assets,
        )
