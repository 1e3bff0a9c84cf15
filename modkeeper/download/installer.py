"""
模组安装器

下载发布中的 plugin.zip，解压到临时目录，校验 manifest 后整体移动到安装目录。
临时目录在任何退出路径上都会被清理，安装目录要么被完整替换，要么保持不变。
"""

import asyncio
import itertools
import os
import shutil
import zipfile
from typing import Tuple

import aiofiles
from loguru import logger

from modkeeper.exceptions import (
    AssetNotFoundError,
    DirectoryNotFoundError,
    InstallFileError,
    ManifestNotFoundError,
    VersionMismatchError,
)
from modkeeper.manifest import MANIFEST_FILENAME, read_manifest
from modkeeper.models import AssetInfo, Mod, RepoAddress, Ver
from modkeeper.services.api_client import GitHubClient
from modkeeper.services.mod_store import TEMP_DIR_SUFFIX

PACKAGE_ASSET_NAME = "plugin.zip"


class ModInstaller:
    """模组安装器"""

    def __init__(self, client: GitHubClient):
        self.client = client
        self._counter = itertools.count(1)

    async def install(self, address: RepoAddress, target_dir: str) -> Mod:
        """
        安装仓库最新发布中的模组

        Args:
            address: 仓库地址
            target_dir: 安装目录，每个模组占用其中一个以模组名称命名的子目录

        Returns:
            安装完成的模组

        Raises:
            DirectoryNotFoundError: 安装目录不存在
            APIError: 获取发布或下载失败
            AssetNotFoundError: 发布中没有 plugin.zip
            ManifestNotFoundError: 压缩包根目录没有 manifest.json
            ManifestError: manifest 无效
            VersionMismatchError: manifest 版本与发布标签不一致
            InstallFileError: 文件操作失败
        """
        if not os.path.isdir(target_dir):
            raise DirectoryNotFoundError(
                f"找不到目录 {target_dir}", context={"directory": target_dir}
            )

        release = await self.client.get_latest_release(address)
        asset = release.find_asset(PACKAGE_ASSET_NAME)
        if asset is None:
            raise AssetNotFoundError(
                f"发布 {release.name} 中没有 {PACKAGE_ASSET_NAME} 文件",
                context={"address": str(address), "release": release.name},
            )

        temp_dir, archive_path = self._reserve_temp_paths(target_dir, asset.name)
        try:
            await self._download(asset, archive_path)
            await asyncio.to_thread(self._extract, archive_path, temp_dir)

            manifest_path = os.path.join(temp_dir, MANIFEST_FILENAME)
            if not os.path.isfile(manifest_path):
                raise ManifestNotFoundError(
                    f"{address} 的模组没有 {MANIFEST_FILENAME} 文件",
                    context={"address": str(address)},
                )

            mod = await read_manifest(manifest_path)
            self._check_version(mod, release.tag, address)

            mod_dir = self._mod_directory(target_dir, mod)
            await asyncio.to_thread(self._finalize, temp_dir, mod_dir)
            logger.debug(f"[安装] {mod} -> {mod_dir}")
            return mod

        except (OSError, zipfile.BadZipFile) as e:
            raise InstallFileError(
                f"安装 {address} 时发生 I/O 错误: {e}",
                context={"address": str(address), "error": str(e)},
            ) from e
        finally:
            self._cleanup(temp_dir, archive_path)

    def _reserve_temp_paths(self, target_dir: str, asset_name: str) -> Tuple[str, str]:
        """创建唯一的临时目录，返回 (临时目录, 压缩包路径)"""
        while True:
            temp_name = f"{asset_name}_{next(self._counter)}{TEMP_DIR_SUFFIX}"
            temp_dir = os.path.join(target_dir, temp_name)
            archive_path = f"{temp_dir}.download"
            if os.path.exists(archive_path):
                continue
            try:
                os.mkdir(temp_dir)
            except FileExistsError:
                continue
            except OSError as e:
                raise InstallFileError(
                    f"无法创建临时目录 {temp_dir}: {e}", context={"directory": temp_dir}
                ) from e
            return temp_dir, archive_path

    async def _download(self, asset: AssetInfo, archive_path: str):
        """流式下载资源到本地文件"""
        if asset.size:
            logger.info(f"[下载] {asset.name} ({asset.size / (1024 * 1024):.2f} MB)")
        else:
            logger.info(f"[下载] {asset.name}")

        downloaded = 0
        async with aiofiles.open(archive_path, "wb") as f:
            async for chunk in self.client.iter_asset(asset):
                await f.write(chunk)
                downloaded += len(chunk)

        logger.debug(f"[下载] {asset.name} 共 {downloaded} 字节")

    @staticmethod
    def _extract(archive_path: str, temp_dir: str):
        """解压到临时目录，拒绝指向目录之外的条目"""
        root = os.path.realpath(temp_dir)
        with zipfile.ZipFile(archive_path) as archive:
            for member in archive.infolist():
                path = os.path.realpath(os.path.join(root, member.filename))
                if path != root and not path.startswith(root + os.sep):
                    raise InstallFileError(
                        f"压缩包条目 {member.filename} 位于安装目录之外",
                        context={"entry": member.filename},
                    )
            archive.extractall(root)

    @staticmethod
    def _check_version(mod: Mod, tag: str, address: RepoAddress):
        release_version = Ver.try_parse(tag)
        if release_version is None or release_version != mod.version:
            raise VersionMismatchError(
                f"{mod.name} 的 manifest 版本 {mod.version} 与发布标签 {tag} 不一致",
                context={
                    "mod": mod.name,
                    "address": str(address),
                    "manifest_version": str(mod.version),
                    "tag": tag,
                },
            )

    @staticmethod
    def _mod_directory(target_dir: str, mod: Mod) -> str:
        if (
            mod.name in (".", "..")
            or os.path.basename(mod.name) != mod.name
            or "/" in mod.name
            or mod.name.endswith(TEMP_DIR_SUFFIX)
        ):
            raise InstallFileError(
                f"模组名称 {mod.name} 不能作为目录名", context={"mod": mod.name}
            )
        return os.path.join(target_dir, mod.name)

    @staticmethod
    def _finalize(temp_dir: str, mod_dir: str):
        """删除旧目录后把临时目录整体改名为模组目录"""
        if os.path.isdir(mod_dir):
            shutil.rmtree(mod_dir)
        elif os.path.exists(mod_dir):
            os.remove(mod_dir)
        os.rename(temp_dir, mod_dir)

    @staticmethod
    def _cleanup(temp_dir: str, archive_path: str):
        if os.path.isdir(temp_dir):
            shutil.rmtree(temp_dir, ignore_errors=True)
        try:
            os.remove(archive_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"[清理] 无法删除 {archive_path}: {e}")
