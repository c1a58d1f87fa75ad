"""Unit tests for the package locator."""

from pathlib import Path

import pytest
from structlog.testing import capture_logs

from buildid.core.config import LocatorConfig
from buildid.core.exceptions import ValidationError
from buildid.services.locator import ArchiveSource, PackageLocator, resolve_first


def _touch(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"PK")
    return path


class TestPackageLocator:
    """Tests for filesystem lookup."""

    def test_android_install_layout(self, install_root):
        apk = _touch(install_root / "com.example.app-Qm9vYmFy==" / "base.apk")
        locator = PackageLocator(LocatorConfig(search_paths=[install_root]))
        assert locator.find_archives("com.example.app") == [apk]
        assert locator.resolve("com.example.app") == apk

    def test_plain_layouts(self, install_root):
        nested = _touch(install_root / "com.example.app" / "base.apk")
        flat = _touch(install_root / "com.example.app.apk")
        locator = PackageLocator(LocatorConfig(search_paths=[install_root]))
        assert locator.find_archives("com.example.app") == [nested, flat]

    def test_other_packages_ignored(self, install_root):
        _touch(install_root / "com.example.other-1" / "base.apk")
        _touch(install_root / "com.example.application.apk")
        locator = PackageLocator(LocatorConfig(search_paths=[install_root]))
        assert locator.find_archives("com.example.app") == []

    @pytest.mark.parametrize("app_id", ["com.*", "com.?ictim.app", "com.[v]ictim.app"])
    def test_wildcards_match_literally(self, install_root, app_id):
        """Glob characters in an identifier never match other packages."""
        _touch(install_root / "com.victim.app-1" / "base.apk")
        locator = PackageLocator(LocatorConfig(search_paths=[install_root]))
        assert locator.find_archives(app_id) == []

    def test_identifier_with_brackets(self, install_root):
        apk = _touch(install_root / "com.[odd].app-1" / "base.apk")
        locator = PackageLocator(LocatorConfig(search_paths=[install_root]))
        assert locator.find_archives("com.[odd].app") == [apk]

    def test_roots_in_order(self, temp_dir):
        first = _touch(temp_dir / "one" / "com.example.app.apk")
        second = _touch(temp_dir / "two" / "com.example.app-1" / "base.apk")
        locator = PackageLocator(LocatorConfig(search_paths=[temp_dir / "two", temp_dir / "one"]))
        assert locator.find_archives("com.example.app") == [second, first]

    def test_duplicate_roots_collapsed(self, install_root):
        apk = _touch(install_root / "com.example.app.apk")
        locator = PackageLocator(LocatorConfig(search_paths=[install_root, install_root]))
        assert locator.find_archives("com.example.app") == [apk]

    def test_missing_root_skipped(self, temp_dir, install_root):
        apk = _touch(install_root / "com.example.app.apk")
        locator = PackageLocator(LocatorConfig(search_paths=[temp_dir / "absent", install_root]))
        assert locator.find_archives("com.example.app") == [apk]

    def test_custom_archive_name(self, install_root):
        apk = _touch(install_root / "com.example.app-1" / "split_config.apk")
        locator = PackageLocator(LocatorConfig(search_paths=[install_root], archive_name="split_config.apk"))
        assert locator.find_archives("com.example.app") == [apk]

    def test_not_found_logs_error(self, install_root):
        locator = PackageLocator(LocatorConfig(search_paths=[install_root]))
        with capture_logs() as logs:
            assert locator.resolve("com.example.app") is None
        assert [entry["log_level"] for entry in logs] == ["error"]

    def test_ambiguous_warns_and_uses_first(self, install_root):
        first = _touch(install_root / "com.example.app-1" / "base.apk")
        _touch(install_root / "com.example.app-2" / "base.apk")
        locator = PackageLocator(LocatorConfig(search_paths=[install_root]))
        with capture_logs() as logs:
            assert locator.resolve("com.example.app") == first
        warnings = [entry for entry in logs if entry["log_level"] == "warning"]
        assert len(warnings) == 1
        assert warnings[0]["count"] == 2

    @pytest.mark.parametrize("app_id", ["", "../etc", "com/example", "..", "a\\b"])
    def test_invalid_app_id(self, install_root, app_id):
        locator = PackageLocator(LocatorConfig(search_paths=[install_root]))
        with pytest.raises(ValidationError):
            locator.find_archives(app_id)

    def test_is_archive_source(self):
        assert isinstance(PackageLocator(), ArchiveSource)


class TestResolveFirst:
    """Tests for the first-candidate policy on arbitrary sources."""

    class StaticSource:
        def __init__(self, paths):
            self.paths = paths

        def find_archives(self, app_id):
            return list(self.paths)

    def test_none(self):
        assert resolve_first(self.StaticSource([]), "com.example.app") is None

    def test_single(self):
        assert resolve_first(self.StaticSource(["/x/base.apk"]), "com.example.app") == Path("/x/base.apk")

    def test_many(self):
        source = self.StaticSource(["/a/base.apk", "/b/base.apk"])
        assert resolve_first(source, "com.example.app") == Path("/a/base.apk")
