"""Tests for repository addresses and version numbers."""

import pytest

from modkeeper.exceptions import AddressParseError, VersionParseError
from modkeeper.models import RepoAddress, Ver


class TestRepoAddress:
    def test_parse_owner_and_name(self):
        address = RepoAddress.parse("Owner/Name")
        assert address == RepoAddress("Owner", "Name")
        assert str(address) == "Owner/Name"

    def test_parse_trims_whitespace(self):
        assert RepoAddress.parse("  Owner / Name ") == RepoAddress("Owner", "Name")

    @pytest.mark.parametrize("text", ["a/b/c", "", "   ", "/name", "owner/", "name"])
    def test_invalid_addresses(self, text):
        with pytest.raises(AddressParseError):
            RepoAddress.parse(text)
        assert RepoAddress.try_parse(text) is None

    def test_default_owner_applies_without_slash(self):
        address = RepoAddress.parse("SpinCore", default_owner="SRXDModdingGroup")
        assert address == RepoAddress("SRXDModdingGroup", "SpinCore")

    def test_default_owner_ignored_with_slash(self):
        address = RepoAddress.parse("Other/SpinCore", default_owner="SRXDModdingGroup")
        assert address.owner == "Other"

    def test_non_string_fails(self):
        with pytest.raises(AddressParseError):
            RepoAddress.parse(None)

    def test_error_code(self):
        with pytest.raises(AddressParseError) as excinfo:
            RepoAddress.parse("a/b/c")
        assert excinfo.value.code == "E201"
        assert str(excinfo.value).startswith("[E201]")


class TestVer:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("v1.2.3", (1, 2, 3)),
            ("release-10.0", (10, 0)),
            ("1.0.0.4", (1, 0, 0, 4)),
            (" 2.5 ", (2, 5)),
            ("build.3.1", (3, 1)),
        ],
    )
    def test_parse(self, text, expected):
        assert Ver.parse(text).parts == expected

    @pytest.mark.parametrize("text", ["nightly", "", "v1", "1.2.", "1.2.3.4.5", "1..2"])
    def test_invalid_versions(self, text):
        with pytest.raises(VersionParseError):
            Ver.parse(text)
        assert Ver.try_parse(text) is None

    def test_non_string_fails(self):
        assert Ver.try_parse(None) is None
        with pytest.raises(VersionParseError):
            Ver.parse(12)

    def test_numeric_ordering(self):
        assert Ver.parse("1.2.3") < Ver.parse("1.10.0")
        assert Ver.parse("2.0") > Ver.parse("1.99.99.99")

    def test_missing_components_are_zero(self):
        assert Ver.parse("1.2") == Ver.parse("1.2.0.0")
        assert hash(Ver.parse("1.2")) == hash(Ver.parse("1.2.0"))
        assert Ver.parse("1.2") < Ver.parse("1.2.0.1")

    def test_str_keeps_original_parts(self):
        assert str(Ver.parse("v1.2.0")) == "1.2.0"
