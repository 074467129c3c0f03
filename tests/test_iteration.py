"""
Tests for pkgscout.extractors.iteration module.

Tests classification of the installer consuming a container.
"""

from pkgscout.extractors.base import ExtractionOptions
from pkgscout.extractors.iteration import classify_iteration, parse_scope
from pkgscout.schema import InstallerType


CONTAINER = "$Apps = @{ 'a' = @{ Name = 'A'; Id = 'Vendor.A' } }\n"


class TestParseScope:
    """Tests for parse_scope()."""

    def test_scope_present(self):
        """Test reading an explicit scope."""
        assert parse_scope("--id X.Y --scope user") == "user"

    def test_scope_default(self):
        """Test the default when no scope flag is present."""
        assert parse_scope("--id X.Y") == "machine"
        assert parse_scope("--id X.Y", default="user") == "user"


class TestClassifyIteration:
    """Tests for classify_iteration()."""

    def test_no_consumer(self):
        """Test that a container nobody iterates over is unknown."""
        result = classify_iteration("Apps", CONTAINER)

        assert result.installer_type == InstallerType.UNKNOWN
        assert result.scope == "machine"
        assert result.is_unknown

    def test_winget_default_scope(self):
        """Test standard winget classification without a scope flag."""
        text = CONTAINER + "$Apps.Values | ForEach-Object { winget install --id $_.Id -e }\n"
        result = classify_iteration("Apps", text)

        assert result.installer_type == InstallerType.WINGET
        assert result.scope == "machine"

    def test_winget_scope_override(self):
        """Test that a scope flag overrides the default."""
        text = CONTAINER + "$Apps.Values | ForEach-Object { winget install --id $_.Id --scope user }\n"
        result = classify_iteration("Apps", text)

        assert result.installer_type == InstallerType.WINGET
        assert result.scope == "user"

    def test_store_variant(self):
        """Test that the msstore source selects the store variant and ignores scope."""
        text = (
            CONTAINER
            + "$Apps.Values | ForEach-Object {\n"
            + "    winget install --id $_.Id --source msstore --scope user\n"
            + "}\n"
        )
        result = classify_iteration("Apps", text)

        assert result.installer_type == InstallerType.WINGET_STORE
        assert result.scope == "machine"

    def test_choco(self):
        """Test Chocolatey classification."""
        text = CONTAINER + "$Apps.Values | ForEach-Object { choco install $_.Id -y }\n"
        assert classify_iteration("Apps", text).installer_type == InstallerType.CHOCO

    def test_scoop(self):
        """Test Scoop classification."""
        text = CONTAINER + "$Apps.Values | ForEach-Object { scoop install $_.Id }\n"
        assert classify_iteration("Apps", text).installer_type == InstallerType.SCOOP

    def test_winget_preferred_over_choco(self):
        """Test that winget wins when both installers appear in the window."""
        text = (
            CONTAINER
            + "$Apps.Values | ForEach-Object {\n"
            + "    choco install $_.Id -y\n"
            + "    winget install --id $_.Id\n"
            + "}\n"
        )
        assert classify_iteration("Apps", text).installer_type == InstallerType.WINGET

    def test_case_insensitive(self):
        """Test that variable and command names match case-insensitively."""
        text = CONTAINER + "$apps.values | foreach-object { WINGET INSTALL --id $_.Id }\n"
        assert classify_iteration("Apps", text).installer_type == InstallerType.WINGET

    def test_other_variable_ignored(self):
        """Test that a pipeline over a different variable does not count."""
        text = CONTAINER + "$AppsExtra.Values | ForEach-Object { winget install --id $_.Id }\n"
        assert classify_iteration("Apps", text).is_unknown

    def test_consumer_without_installer(self):
        """Test that a pipeline without an install invocation is unknown."""
        text = CONTAINER + "$Apps.Values | ForEach-Object { Write-Host $_.Name }\n"
        assert classify_iteration("Apps", text).is_unknown

    def test_lookahead_window_bounds_search(self):
        """Test that an invocation beyond the window is not attributed."""
        filler = "    # keep going\n" * 60
        text = (
            CONTAINER
            + "$Apps.Values | ForEach-Object {\n"
            + filler
            + "    winget install --id $_.Id\n"
            + "}\n"
        )

        assert classify_iteration("Apps", text).is_unknown

        wide = ExtractionOptions(iteration_lookahead=5000)
        assert classify_iteration("Apps", text, wide).installer_type == InstallerType.WINGET

    def test_comments_between_definition_and_consumer(self):
        """Test that blank lines and comments before the pipeline are tolerated."""
        text = (
            CONTAINER
            + "\n# Install everything above\n\n"
            + "$Apps.Values | ForEach-Object { scoop install $_.Id }\n"
        )
        assert classify_iteration("Apps", text).installer_type == InstallerType.SCOOP
