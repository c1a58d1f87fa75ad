"""Test configuration for BuildID."""

import io
import tempfile
import zipfile
from pathlib import Path

import pytest

from buildid.core.config import Config, ExtractorConfig, LocatorConfig

WELL_FORMED_MANIFEST = (
    "Manifest-Version: 1.0\r\n"
    "Created-By: 1.0 (Android)\r\n"
    "\r\n"
    "Name: res/layout/activity_main.xml\r\n"
    "SHA1-Digest: q2yvs0kd3K5cnhV6lZ1vQ3b4jRw=\r\n"
    "\r\n"
    "Name: classes.dex\r\n"
    "SHA1-Digest: AbCdEf123==\r\n"
    "\r\n"
)


class FakeStream(io.BytesIO):
    """Manifest stream that counts closes and can fail on read or close.

    ``fail_after`` is a line count: reads succeed up to the end of that many
    lines and raise afterwards.
    """

    def __init__(self, lines, fail_after=None, fail_close=False):
        data = [line.encode("utf-8") for line in lines]
        super().__init__(b"".join(data))
        self.fail_at = None if fail_after is None else sum(len(line) for line in data[:fail_after])
        self.fail_close = fail_close
        self.close_calls = 0

    def _limit(self, size):
        if self.fail_at is None:
            return size
        remaining = self.fail_at - self.tell()
        if remaining <= 0:
            raise OSError("read failed")
        return remaining if size is None or size < 0 else min(size, remaining)

    def read(self, size=-1):
        return super().read(self._limit(size))

    def read1(self, size=-1):
        return super().read1(self._limit(size))

    def close(self):
        self.close_calls += 1
        super().close()
        if self.fail_close:
            raise OSError("stream close failed")


class FakeArchive:
    """Archive holding fake streams, counting closes."""

    def __init__(self, entries=None, fail_close=False):
        self.entries = entries or {}
        self.fail_close = fail_close
        self.close_calls = 0
        self.opened = []

    def open(self, name):
        self.opened.append(name)
        if name not in self.entries:
            raise KeyError(f"There is no item named {name!r} in the archive")
        return self.entries[name]

    def close(self):
        self.close_calls += 1
        if self.fail_close:
            raise OSError("archive close failed")


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests.

    Yields:
        Path: A Path object pointing to the temporary directory.
            The directory is automatically cleaned up after the test.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def make_apk(temp_dir):
    """Build APK-like zip archives.

    Returns:
        Callable taking the manifest text (or None for no manifest) and an
        optional file name, returning the archive path.
    """

    def _make(manifest=WELL_FORMED_MANIFEST, name="app.apk", directory=None):
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as zf:
            zf.writestr("AndroidManifest.xml", b'<?xml version="1.0"?><manifest/>')
            zf.writestr("classes.dex", b"dex\n035\x00")
            if manifest is not None:
                data = manifest if isinstance(manifest, bytes) else manifest.encode("utf-8")
                zf.writestr("META-INF/MANIFEST.MF", data)

        target_dir = directory or temp_dir
        target_dir.mkdir(parents=True, exist_ok=True)
        apk_path = target_dir / name
        apk_path.write_bytes(buffer.getvalue())
        return apk_path

    return _make


@pytest.fixture
def sample_apk(make_apk):
    """A well-formed archive whose dex digest is ``AbCdEf123==``."""
    return make_apk()


@pytest.fixture
def install_root(temp_dir):
    """Directory laid out like an Android app install root."""
    root = temp_dir / "data" / "app"
    root.mkdir(parents=True)
    return root


@pytest.fixture
def config(install_root):
    """Configuration searching only the test install root."""
    return Config(
        extractor=ExtractorConfig(),
        locator=LocatorConfig(search_paths=[install_root]),
    )


@pytest.fixture
def fake_stream():
    """The FakeStream class."""
    return FakeStream


@pytest.fixture
def fake_archive():
    """The FakeArchive class."""
    return FakeArchive


@pytest.fixture
def well_formed_manifest():
    """Manifest text with a ``classes.dex`` section and CRLF line endings."""
    return WELL_FORMED_MANIFEST
