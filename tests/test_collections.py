"""Tests for ModSet, DependencySet and missing-dependency detection."""

from modkeeper.models import (
    Dependency,
    DependencySet,
    ModSet,
    RepoAddress,
    Ver,
    get_dependencies,
    get_missing_dependencies,
)

from fakes import make_mod


class TestModSetInsertion:
    def test_higher_version_replaces(self):
        mods = ModSet([make_mod("SpinCore", "1.0")])
        assert mods.add(make_mod("SpinCore", "1.1")) is True
        assert mods.get("SpinCore").version == Ver.parse("1.1")

    def test_lower_version_is_rejected(self):
        mods = ModSet([make_mod("SpinCore", "1.1")])
        assert mods.add(make_mod("SpinCore", "1.0")) is False
        assert mods.get("SpinCore").version == Ver.parse("1.1")

    def test_equal_version_replaces(self):
        original = make_mod("SpinCore", "1.0", "Group/SpinCore")
        newer_source = make_mod("SpinCore", "1.0.0", "Fork/SpinCore")
        mods = ModSet([original])
        assert mods.add(newer_source) is True
        assert mods.get("SpinCore").address == RepoAddress("Fork", "SpinCore")

    def test_keeps_highest_regardless_of_order(self):
        versions = ["1.2", "1.10", "1.3", "0.9"]
        mods = ModSet(make_mod("SpinCore", version) for version in versions)
        assert len(mods) == 1
        assert mods.get("SpinCore").version == Ver.parse("1.10")

    def test_names_are_case_sensitive(self):
        mods = ModSet([make_mod("spincore"), make_mod("SpinCore")])
        assert len(mods) == 2

    def test_iteration_is_sorted_by_name(self):
        mods = ModSet([make_mod("b"), make_mod("c"), make_mod("a")])
        assert [mod.name for mod in mods] == ["a", "b", "c"]
        assert mods.names() == ["a", "b", "c"]

    def test_copy_is_independent(self):
        mods = ModSet([make_mod("a")])
        clone = mods.copy()
        clone.add(make_mod("b"))
        mods.remove("a")
        assert "a" in clone and "b" in clone
        assert len(mods) == 0


class TestContains:
    def test_contains_checks_minimum_version(self):
        mods = ModSet([make_mod("SpinCore", "1.2")])
        assert mods.contains("SpinCore")
        assert mods.contains("SpinCore", Ver.parse("1.2"))
        assert mods.contains("SpinCore", Ver.parse("1.1.9"))
        assert not mods.contains("SpinCore", Ver.parse("1.2.1"))
        assert not mods.contains("Other")


class TestDependencySet:
    def test_keeps_highest_requirement(self):
        source = RepoAddress("Group", "SpinCore")
        dependencies = DependencySet(
            [
                Dependency("SpinCore", Ver.parse("1.3"), source),
                Dependency("SpinCore", Ver.parse("1.1"), source),
            ]
        )
        assert dependencies.get("SpinCore").min_version == Ver.parse("1.3")

    def test_get_dependencies_merges_mods(self):
        a = make_mod("A", dependencies=[("C", "1.0", "Owner/C")])
        b = make_mod("B", dependencies=[("C", "2.0", "Owner/C"), ("D", "1.0", "Owner/D")])
        dependencies = get_dependencies([a, b])
        assert dependencies.names() == ["C", "D"]
        assert dependencies.get("C").min_version == Ver.parse("2.0")


class TestMissingDependencies:
    def test_returns_unsatisfied_dependencies(self):
        mod = make_mod(
            "Chroma",
            dependencies=[
                ("SpinCore", "1.2", "Group/SpinCore"),
                ("Lib", "1.0", "Group/Lib"),
                ("Absent", "1.0", "Group/Absent"),
            ],
        )
        installed = ModSet([make_mod("SpinCore", "1.1"), make_mod("Lib", "1.5")])

        missing = get_missing_dependencies(mod, installed)

        assert missing.names() == ["Absent", "SpinCore"]

    def test_no_dependencies(self):
        assert len(get_missing_dependencies(make_mod("A"), ModSet())) == 0

    def test_accepts_several_mods(self):
        a = make_mod("A", dependencies=[("C", "1.0", "Owner/C")])
        b = make_mod("B", dependencies=[("A", "1.0", "Owner/A")])
        missing = get_missing_dependencies([a, b], ModSet([a]))
        assert missing.names() == ["C"]
