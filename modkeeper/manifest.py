"""
Manifest 解析流程

把 manifest.json 文档转换为经过校验的 Mod 对象。
任何必需字段缺失或格式错误都会抛出对应的 ManifestError 子类，第一个错误即终止。
"""

import json
from pathlib import Path
from typing import Any, List, Union

import aiofiles

from modkeeper.exceptions import (
    AddressParseError,
    ManifestDecodeError,
    ManifestDependencyError,
    ManifestNameError,
    ManifestRepositoryError,
    ManifestVersionError,
    VersionParseError,
)
from modkeeper.models import Dependency, Mod, RepoAddress, Ver

MANIFEST_FILENAME = "manifest.json"


def decode_manifest(data: Union[bytes, str]) -> dict:
    """反序列化 manifest 文档"""
    try:
        if isinstance(data, bytes):
            data = data.decode("utf-8-sig")
        document = json.loads(data.lstrip("\ufeff"))
    except (UnicodeDecodeError, ValueError) as e:
        raise ManifestDecodeError(
            "无法反序列化 manifest 文件", context={"error": str(e)}
        )

    if not isinstance(document, dict):
        raise ManifestDecodeError("manifest 文件必须是 JSON 对象")

    return document


def _parse_dependency(mod_name: str, raw: Any) -> Dependency:
    if not isinstance(raw, dict):
        raise ManifestDependencyError(
            f"模组 {mod_name} 的 manifest 包含无效依赖",
            context={"mod": mod_name, "dependency": raw},
        )

    name = raw.get("name")
    context = {"mod": mod_name, "dependency": name}
    if not isinstance(name, str) or not name.strip():
        raise ManifestDependencyError(
            f"模组 {mod_name} 的 manifest 包含没有名称的依赖", context=context
        )

    try:
        version = Ver.parse(raw.get("version"))
        source = RepoAddress.parse(raw.get("repository"))
    except (VersionParseError, AddressParseError) as e:
        context["reason"] = e.message
        raise ManifestDependencyError(
            f"模组 {mod_name} 的 manifest 包含无效依赖 {name}: {e.message}",
            context=context,
        )

    return Dependency(name=name.strip(), min_version=version, source=source)


def create_mod(document: dict) -> Mod:
    """
    根据 manifest 字段创建 Mod

    Raises:
        ManifestNameError: 名称缺失
        ManifestVersionError: 版本无法解析
        ManifestRepositoryError: 仓库地址无法解析
        ManifestDependencyError: 任一依赖无效
    """
    name = document.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ManifestNameError(
            f"模组 {name} 的 manifest 缺少名称", context={"mod": name}
        )
    name = name.strip()

    version_text = document.get("version")
    version = Ver.try_parse(version_text if isinstance(version_text, str) else None)
    if version is None:
        raise ManifestVersionError(
            f"模组 {name} 的 manifest 没有有效的版本号",
            context={"mod": name, "version": version_text},
        )

    repository = document.get("repository")
    address = RepoAddress.try_parse(repository if isinstance(repository, str) else None)
    if address is None:
        raise ManifestRepositoryError(
            f"模组 {name} 的 manifest 没有有效的仓库地址",
            context={"mod": name, "repository": repository},
        )

    raw_dependencies = document.get("dependencies")
    if raw_dependencies is None:
        raw_dependencies = []
    if not isinstance(raw_dependencies, list):
        raise ManifestDependencyError(
            f"模组 {name} 的 manifest 依赖列表格式错误", context={"mod": name}
        )

    dependencies: List[Dependency] = [
        _parse_dependency(name, raw) for raw in raw_dependencies
    ]

    description = document.get("description")
    return Mod(
        name=name,
        description=description if isinstance(description, str) else "",
        version=version,
        address=address,
        dependencies=tuple(dependencies),
    )


def parse_manifest(data: Union[bytes, str]) -> Mod:
    """解析 manifest 文档并返回 Mod"""
    return create_mod(decode_manifest(data))


def load_manifest(path: Union[str, Path]) -> Mod:
    """同步读取并解析 manifest 文件"""
    return parse_manifest(Path(path).read_bytes())


async def read_manifest(path: Union[str, Path]) -> Mod:
    """异步读取并解析 manifest 文件"""
    async with aiofiles.open(path, "rb") as f:
        return parse_manifest(await f.read())
