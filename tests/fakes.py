"""测试用的假 GitHub 客户端、安装器与构造辅助函数"""

import asyncio
import io
import json
import zipfile
from typing import Dict, Iterable, List, Optional, Tuple

from modkeeper.exceptions import APINotFoundError, APIServerError
from modkeeper.manifest import MANIFEST_FILENAME, create_mod
from modkeeper.models import AssetInfo, Mod, ReleaseInfo, RepoAddress

DependencyEntry = Tuple[str, str, str]


def make_manifest(
    name: str,
    version: str = "1.0",
    repository: Optional[str] = None,
    dependencies: Iterable[DependencyEntry] = (),
    description: str = "",
) -> dict:
    return {
        "name": name,
        "description": description,
        "version": version,
        "repository": repository or f"Owner/{name}",
        "dependencies": [
            {"name": dep_name, "version": dep_version, "repository": dep_repository}
            for dep_name, dep_version, dep_repository in dependencies
        ],
    }


def make_mod(
    name: str,
    version: str = "1.0",
    repository: Optional[str] = None,
    dependencies: Iterable[DependencyEntry] = (),
) -> Mod:
    return create_mod(make_manifest(name, version, repository, dependencies))


def make_zip(files: Dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in files.items():
            archive.writestr(name, content)
    return buffer.getvalue()


class FakeGitHubClient:
    """以字典保存发布与资源的 GitHubClient 替身"""

    def __init__(self):
        self.releases: Dict[str, ReleaseInfo] = {}
        self.assets: Dict[str, bytes] = {}
        self.release_calls: List[str] = []
        self.failing: Dict[str, Exception] = {}

    def add_release(self, repository: str, tag: str, files: Dict[str, bytes]):
        assets = []
        for name, content in files.items():
            url = f"https://example.invalid/{repository}/{tag}/{name}"
            self.assets[url] = content
            assets.append(AssetInfo(name=name, url=url, size=len(content)))
        self.releases[repository] = ReleaseInfo(name=tag, tag=tag, assets=assets)

    def publish(
        self,
        name: str,
        version: str = "1.0",
        repository: Optional[str] = None,
        dependencies: Iterable[DependencyEntry] = (),
        tag: Optional[str] = None,
        package_files: Optional[Dict[str, bytes]] = None,
        with_manifest_in_package: bool = True,
    ) -> str:
        """发布一个带 manifest.json 与 plugin.zip 的模组，返回仓库地址"""
        repository = repository or f"Owner/{name}"
        manifest = json.dumps(
            make_manifest(name, version, repository, dependencies)
        ).encode("utf-8")

        package = dict(package_files or {f"{name}.dll": b"binary"})
        if with_manifest_in_package:
            package[MANIFEST_FILENAME] = manifest

        self.add_release(
            repository,
            tag or f"v{version}",
            {MANIFEST_FILENAME: manifest, "plugin.zip": make_zip(package)},
        )
        return repository

    def fail(self, repository: str, error: Optional[Exception] = None):
        self.failing[repository] = error or APIServerError(f"{repository} 服务不可用")

    async def get_latest_release(self, address: RepoAddress) -> ReleaseInfo:
        key = str(address)
        self.release_calls.append(key)
        await asyncio.sleep(0)
        if key in self.failing:
            raise self.failing[key]
        if key not in self.releases:
            raise APINotFoundError(f"找不到 {key} 的发布", context={"address": key})
        return self.releases[key]

    async def iter_asset(self, asset: AssetInfo, chunk_size: int = 8192):
        data = self.assets[asset.url]
        for start in range(0, len(data), chunk_size):
            await asyncio.sleep(0)
            yield data[start:start + chunk_size]

    async def download_asset(self, asset: AssetInfo) -> bytes:
        return self.assets[asset.url]

    async def close(self):
        pass


class RecordingInstaller:
    """记录安装调用并返回预设结果的 ModInstaller 替身"""

    def __init__(self, mods: Optional[Dict[str, Mod]] = None):
        self.mods: Dict[str, Mod] = dict(mods or {})
        self.failing: Dict[str, Exception] = {}
        self.calls: List[str] = []

    async def install(self, address: RepoAddress, target_dir: str) -> Mod:
        key = str(address)
        self.calls.append(key)
        await asyncio.sleep(0)
        if key in self.failing:
            raise self.failing[key]
        return self.mods[key]
