"""
Tests for pkgscout.schema module.
"""

import dataclasses

import pytest

from pkgscout.schema import (
    InstallerType,
    InstallStatus,
    IterationResult,
    PackageDefinition,
    PackageResult,
    make_dedup_key,
)


def sample_package(**overrides):
    fields = {
        "name": "Visual Studio Code",
        "package_id": "Microsoft.VisualStudioCode",
        "installer_type": InstallerType.WINGET,
        "source_script": "dev-tools.ps1",
        "scope": "machine",
    }
    fields.update(overrides)
    return PackageDefinition(**fields)


class TestInstallerType:
    """Tests for the InstallerType enum."""

    def test_values(self):
        """Verify the serialized installer names."""
        assert [t.value for t in InstallerType] == [
            "winget",
            "winget-store",
            "choco",
            "scoop",
            "ps-module",
            "sideload",
            "unknown",
        ]

    def test_str(self):
        """Test that str() gives the serialized value."""
        assert str(InstallerType.WINGET_STORE) == "winget-store"


class TestPackageDefinition:
    """Tests for PackageDefinition."""

    def test_defaults(self):
        """Test default scope and additional args."""
        package = PackageDefinition("git", "git", InstallerType.CHOCO, "a.ps1")
        assert package.scope == ""
        assert package.additional_args == ""

    def test_dedup_key(self):
        """Test that the key combines installer and identity."""
        assert sample_package().dedup_key == "winget:Microsoft.VisualStudioCode"
        assert make_dedup_key(InstallerType.PS_MODULE, "Pester") == "ps-module:Pester"

    def test_dedup_key_ignores_name_and_script(self):
        """Test that label and source do not affect identity."""
        other = sample_package(name="VS Code", source_script="other.ps1")
        assert other.dedup_key == sample_package().dedup_key

    def test_frozen(self):
        """Test that emitted records cannot be mutated."""
        with pytest.raises(dataclasses.FrozenInstanceError):
            sample_package().name = "changed"

    def test_to_dict(self):
        """Test serialization key order and values."""
        data = sample_package().to_dict()

        assert list(data) == [
            "name",
            "package_id",
            "installer_type",
            "source_script",
            "scope",
            "additional_args",
        ]
        assert data["installer_type"] == "winget"


class TestIterationResult:
    """Tests for IterationResult."""

    def test_default_scope(self):
        """Test that the scope defaults to machine."""
        result = IterationResult(InstallerType.CHOCO)
        assert result.scope == "machine"
        assert not result.is_unknown

    def test_unknown(self):
        """Test the unknown classification."""
        assert IterationResult(InstallerType.UNKNOWN).is_unknown


class TestPackageResult:
    """Tests for PackageResult."""

    def test_to_dict_adds_status(self):
        """Test that the result dict extends the package dict."""
        result = PackageResult(sample_package(), InstallStatus.UNTESTED, "no hardware")
        data = result.to_dict()

        assert data["status"] == "untested"
        assert data["message"] == "no hardware"
        assert data["package_id"] == "Microsoft.VisualStudioCode"

    def test_default_status(self):
        """Test that new results are pending."""
        assert PackageResult(sample_package()).status == InstallStatus.PENDING
