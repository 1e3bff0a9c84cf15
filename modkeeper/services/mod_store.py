"""
已安装模组存储

持有长期存在的已安装 ModSet，所有修改都在同一把锁内完成。
需要在锁外做网络请求的读取方一律拿到快照副本，活动集合从不外泄。
"""

import os
import threading
from typing import List, Optional

from loguru import logger

from modkeeper.exceptions import DirectoryNotFoundError, ModKeeperError
from modkeeper.manifest import MANIFEST_FILENAME, load_manifest
from modkeeper.models import DependencySet, Mod, ModSet, get_missing_dependencies

# 安装器解压用的临时目录后缀
TEMP_DIR_SUFFIX = ".tmp"


class ModStore:
    """已安装模组存储"""

    def __init__(self, mods: Optional[ModSet] = None):
        self._lock = threading.Lock()
        self._mods = mods.copy() if mods is not None else ModSet()

    def snapshot(self) -> ModSet:
        """在锁内复制当前集合"""
        with self._lock:
            return self._mods.copy()

    def mods(self) -> List[Mod]:
        with self._lock:
            return list(self._mods)

    def get(self, name: str) -> Optional[Mod]:
        with self._lock:
            return self._mods.get(name)

    def add(self, mod: Mod) -> bool:
        with self._lock:
            return self._mods.add(mod)

    def replace(self, mod: Mod) -> None:
        """记录刚安装到磁盘上的模组，不论版本高低"""
        with self._lock:
            self._mods.remove(mod.name)
            self._mods.add(mod)

    def clear(self) -> None:
        with self._lock:
            self._mods.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._mods)

    def get_missing_dependencies(self, mod: Mod) -> DependencySet:
        """返回当前已安装集合中没有满足的依赖"""
        return get_missing_dependencies(mod, self.snapshot())

    def refresh(self, directory: str) -> List[Mod]:
        """
        重新扫描安装目录

        每个子目录中的 manifest.json 对应一个模组，无效的 manifest 与安装中的临时目录会被跳过。

        Raises:
            DirectoryNotFoundError: 安装目录不存在
        """
        if not os.path.isdir(directory):
            raise DirectoryNotFoundError(
                f"找不到目录 {directory}", context={"directory": directory}
            )

        found = ModSet()
        for entry in sorted(os.listdir(directory)):
            if entry.endswith(TEMP_DIR_SUFFIX):
                continue
            manifest_path = os.path.join(directory, entry, MANIFEST_FILENAME)
            if not os.path.isfile(manifest_path):
                continue
            try:
                found.add(load_manifest(manifest_path))
            except (ModKeeperError, OSError) as e:
                logger.warning(f"[跳过] 无法读取 {manifest_path}: {e}")

        with self._lock:
            self._mods = found
            return list(self._mods)
