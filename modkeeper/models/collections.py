"""
模组集合与依赖集合

两者都以名称为键（区分大小写），每个名称只保留一项，按名称排序迭代。
插入时保留最高版本：版本严格低于已有项的插入会被拒绝。
"""

from typing import Dict, Generic, Iterable, Iterator, List, Optional, TypeVar, Union

from modkeeper.models.identifiers import Ver
from modkeeper.models.mod import Dependency, Mod

T = TypeVar("T", Mod, Dependency)


class _VersionedSet(Generic[T]):
    """按名称去重、带版本比较的有序集合"""

    def __init__(self, items: Optional[Iterable[T]] = None):
        self._items: Dict[str, T] = {}
        if items is not None:
            for item in items:
                self.add(item)

    @staticmethod
    def _version_of(item: T) -> Ver:
        raise NotImplementedError

    def add(self, item: T) -> bool:
        """
        插入一项

        Returns:
            False 表示已有更高版本的同名项，插入被拒绝
        """
        existing = self._items.get(item.name)
        if existing is not None and self._version_of(item) < self._version_of(existing):
            return False

        self._items[item.name] = item
        return True

    def update(self, items: Iterable[T]) -> None:
        for item in items:
            self.add(item)

    def contains(self, name: str, min_version: Optional[Ver] = None) -> bool:
        """是否存在该名称，且（给定时）版本 >= min_version"""
        return self.get(name, min_version) is not None

    def get(self, name: str, min_version: Optional[Ver] = None) -> Optional[T]:
        item = self._items.get(name)
        if item is None:
            return None
        if min_version is not None and self._version_of(item) < min_version:
            return None
        return item

    def remove(self, name: str) -> Optional[T]:
        return self._items.pop(name, None)

    def names(self) -> List[str]:
        return sorted(self._items)

    def clear(self) -> None:
        self._items.clear()

    def copy(self):
        clone = self.__class__()
        clone._items = dict(self._items)
        return clone

    def __contains__(self, name: object) -> bool:
        return name in self._items

    def __iter__(self) -> Iterator[T]:
        return iter([self._items[name] for name in sorted(self._items)])

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({[str(item) for item in self]})"


class ModSet(_VersionedSet[Mod]):
    """模组集合"""

    @staticmethod
    def _version_of(item: Mod) -> Ver:
        return item.version


class DependencySet(_VersionedSet[Dependency]):
    """尚未满足的依赖需求集合"""

    @staticmethod
    def _version_of(item: Dependency) -> Ver:
        return item.min_version


def get_dependencies(mods: Iterable[Mod]) -> DependencySet:
    """汇总所有模组声明的依赖"""
    dependencies = DependencySet()
    for mod in mods:
        dependencies.update(mod.dependencies)
    return dependencies


def get_missing_dependencies(
    mods: Union[Mod, Iterable[Mod]], mod_set: ModSet
) -> DependencySet:
    """返回 mod_set 中没有满足版本要求的依赖"""
    if isinstance(mods, Mod):
        mods = [mods]

    missing = DependencySet()
    for mod in mods:
        for dependency in mod.dependencies:
            if not mod_set.contains(dependency.name, dependency.min_version):
                missing.add(dependency)
    return missing
