"""
标识符模型

仓库地址 (owner/name) 与可排序的版本号。
"""

import re
from dataclasses import dataclass
from functools import total_ordering
from typing import Optional, Tuple

from modkeeper.exceptions import AddressParseError, VersionParseError

# 版本号结尾的数字与点
_TRAILING_VERSION = re.compile(r"[0-9.]+$")

MIN_VERSION_PARTS = 2
MAX_VERSION_PARTS = 4


@dataclass(frozen=True)
class RepoAddress:
    """GitHub 仓库地址"""

    owner: str
    name: str

    def __str__(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def parse(cls, text: Optional[str], default_owner: Optional[str] = None) -> "RepoAddress":
        """
        解析 "owner/name" 形式的仓库地址

        Args:
            text: 待解析的字符串
            default_owner: 当字符串不含 "/" 时使用的默认所有者

        Returns:
            RepoAddress

        Raises:
            AddressParseError: 斜杠数量不是 1，或 owner/name 去空白后为空
        """
        if not isinstance(text, str) or not text.strip():
            raise AddressParseError("仓库地址为空", context={"address": text})

        slashes = text.count("/")
        if slashes == 0 and default_owner:
            return cls.parse(f"{default_owner}/{text.strip()}")
        if slashes != 1:
            raise AddressParseError(
                f"{text} 不是有效的仓库地址", context={"address": text}
            )

        owner, _, name = text.partition("/")
        owner, name = owner.strip(), name.strip()
        if not owner or not name:
            raise AddressParseError(
                f"{text} 不是有效的仓库地址", context={"address": text}
            )

        return cls(owner=owner, name=name)

    @classmethod
    def try_parse(cls, text: Optional[str]) -> Optional["RepoAddress"]:
        """解析失败时返回 None"""
        try:
            return cls.parse(text)
        except AddressParseError:
            return None


@total_ordering
@dataclass(frozen=True, eq=False)
class Ver:
    """
    版本号 major.minor[.build[.revision]]

    比较时缺失的分量视为 0，因此 1.2 == 1.2.0。
    """

    parts: Tuple[int, ...]

    def _key(self) -> Tuple[int, ...]:
        return self.parts + (0,) * (MAX_VERSION_PARTS - len(self.parts))

    def __eq__(self, other) -> bool:
        if not isinstance(other, Ver):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other) -> bool:
        if not isinstance(other, Ver):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        return ".".join(str(part) for part in self.parts)

    def __repr__(self) -> str:
        return f"Ver('{self}')"

    @classmethod
    def parse(cls, text: Optional[str]) -> "Ver":
        """
        从标签或版本字符串中解析版本号

        从末尾向前取最长的数字与点组成的片段，其前面的内容（如 "v"、"release-"）被丢弃。

        Raises:
            VersionParseError: 没有有效的结尾数字片段
        """
        if not isinstance(text, str):
            raise VersionParseError("版本号为空", context={"version": text})

        match = _TRAILING_VERSION.search(text.strip())
        run = match.group(0).lstrip(".") if match else ""
        if not run:
            raise VersionParseError(
                f"{text} 不包含有效的版本号", context={"version": text}
            )

        pieces = run.split(".")
        if (
            not MIN_VERSION_PARTS <= len(pieces) <= MAX_VERSION_PARTS
            or any(not piece for piece in pieces)
        ):
            raise VersionParseError(
                f"{text} 不包含有效的版本号", context={"version": text}
            )

        return cls(tuple(int(piece) for piece in pieces))

    @classmethod
    def try_parse(cls, text: Optional[str]) -> Optional["Ver"]:
        """解析失败时返回 None"""
        try:
            return cls.parse(text)
        except VersionParseError:
            return None
