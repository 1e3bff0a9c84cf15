"""
模组数据模型
"""

from dataclasses import dataclass, field
from typing import Tuple

from modkeeper.models.identifiers import RepoAddress, Ver


@dataclass(frozen=True)
class Dependency:
    """依赖: 需要 name 的版本 >= min_version，可从 source 获取"""

    name: str
    min_version: Ver
    source: RepoAddress

    @classmethod
    def from_mod(cls, mod: "Mod") -> "Dependency":
        """以模组当前版本构造一个精确依赖"""
        return cls(name=mod.name, min_version=mod.version, source=mod.address)

    def __str__(self) -> str:
        return f"{self.name} {self.min_version}"


@dataclass(frozen=True)
class Mod:
    """
    模组信息。

    只通过 manifest 解析流程构造，构造后不可变。
    """

    name: str
    description: str
    version: Ver
    address: RepoAddress
    dependencies: Tuple[Dependency, ...] = field(default_factory=tuple)

    def __str__(self) -> str:
        return f"{self.name} {self.version}"
