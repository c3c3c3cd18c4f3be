"""Unit tests for services.archive_service."""

import os
import shutil
import subprocess
import time
import zipfile

import pytest

from conftest import A_DATA, B_DATA
from romsetzip.services import archive_service
from romsetzip.services.archive_service import ExternalZipBackend, InternalZipBackend
from romsetzip.services.exceptions import ArchiveError, ArchiverNotFoundError

# An even number of seconds: ZIP timestamps have two-second resolution.
FIXED_MTIME = time.mktime((2020, 1, 2, 3, 4, 6, 0, 0, -1))


def test_archive_name(alpha):
    assert archive_service.archive_name(alpha) == "Alpha.zip"


def test_get_backend():
    assert isinstance(archive_service.get_backend("internal"), InternalZipBackend)
    assert isinstance(archive_service.get_backend("external"), ExternalZipBackend)


def test_get_backend_unknown():
    with pytest.raises(ArchiveError):
        archive_service.get_backend("rar")


class TestInternalZipBackend:
    """Tests for the zipfile backend."""

    def test_entries_named_by_base_name_in_order(self, files_in, tmp_path):
        archive = tmp_path / "out" / "Alpha.zip"
        archive.parent.mkdir()

        result = InternalZipBackend().build(archive, files_in("b.bin", "a.bin"))

        assert result == archive
        with zipfile.ZipFile(archive) as zf:
            assert zf.namelist() == ["b.bin", "a.bin"]
            assert zf.read("a.bin") == A_DATA
            assert zf.read("b.bin") == B_DATA
            assert all(info.compress_type == zipfile.ZIP_DEFLATED for info in zf.infolist())

    def test_preserves_mtime_and_mode(self, files_in, tmp_path):
        source = files_in("a.bin")[0]
        os.chmod(source, 0o640)
        os.utime(source, (FIXED_MTIME, FIXED_MTIME))
        archive = tmp_path / "Alpha.zip"

        InternalZipBackend().build(archive, [source])

        with zipfile.ZipFile(archive) as zf:
            info = zf.getinfo("a.bin")
        assert info.date_time == time.localtime(FIXED_MTIME)[:6]
        assert (info.external_attr >> 16) & 0o777 == 0o640

    def test_overwrites_existing_archive(self, files_in, tmp_path):
        archive = tmp_path / "Alpha.zip"
        archive.write_bytes(b"not a zip")

        InternalZipBackend().build(archive, files_in("a.bin"))

        with zipfile.ZipFile(archive) as zf:
            assert zf.namelist() == ["a.bin"]

    def test_failure_removes_partial_archive(self, files_in, tmp_path):
        archive = tmp_path / "Alpha.zip"
        files = files_in("a.bin") + [tmp_path / "vanished.bin"]

        with pytest.raises(ArchiveError):
            InternalZipBackend().build(archive, files)

        assert not archive.exists()

    def test_unwritable_destination(self, files_in, tmp_path):
        with pytest.raises(ArchiveError):
            InternalZipBackend().build(tmp_path / "no-such-dir" / "Alpha.zip", files_in("a.bin"))


class TestExternalZipBackend:
    """Tests for the external zip executable backend."""

    @pytest.fixture
    def fake_run(self, monkeypatch):
        calls = []

        def run(cmd, **kwargs):
            calls.append((cmd, kwargs))
            return subprocess.CompletedProcess(cmd, 0, stderr="")

        monkeypatch.setattr(archive_service.subprocess, "run", run)
        return calls

    def test_argument_list(self, fake_run, files_in, tmp_path, monkeypatch):
        monkeypatch.delenv(archive_service.ZIP_EXECUTABLE_ENV, raising=False)
        archive = tmp_path / "Alpha.zip"
        files = files_in("a.bin", "b.bin")

        ExternalZipBackend().build(archive, files)

        cmd, kwargs = fake_run[0]
        assert cmd == ["zip", str(archive), str(files[0]), str(files[1])]
        assert kwargs["shell"] is False
        assert "stdout" not in kwargs

    def test_executable_from_environment(self, fake_run, files_in, tmp_path, monkeypatch):
        monkeypatch.setenv(archive_service.ZIP_EXECUTABLE_ENV, "/opt/infozip/bin/zip")

        ExternalZipBackend().build(tmp_path / "Alpha.zip", files_in("a.bin"))

        assert fake_run[0][0][0] == "/opt/infozip/bin/zip"

    def test_missing_executable(self, files_in, tmp_path):
        backend = ExternalZipBackend(str(tmp_path / "no-such-zip"))

        with pytest.raises(ArchiverNotFoundError):
            backend.build(tmp_path / "Alpha.zip", files_in("a.bin"))

    def test_non_zero_exit_removes_new_archive(self, files_in, tmp_path, monkeypatch):
        archive = tmp_path / "Alpha.zip"

        def run(cmd, **kwargs):
            archive.write_bytes(b"truncated")
            return subprocess.CompletedProcess(cmd, 12, stderr="zip error: Nothing to do!")

        monkeypatch.setattr(archive_service.subprocess, "run", run)

        with pytest.raises(ArchiveError, match="Nothing to do"):
            ExternalZipBackend("zip").build(archive, files_in("a.bin"))
        assert not archive.exists()

    def test_non_zero_exit_keeps_preexisting_archive(self, files_in, tmp_path, monkeypatch):
        archive = tmp_path / "Alpha.zip"
        archive.write_bytes(b"older archive")

        monkeypatch.setattr(
            archive_service.subprocess,
            "run",
            lambda cmd, **kwargs: subprocess.CompletedProcess(cmd, 2, stderr="boom"),
        )

        with pytest.raises(ArchiveError):
            ExternalZipBackend("zip").build(archive, files_in("a.bin"))
        assert archive.read_bytes() == b"older archive"


@pytest.mark.skipif(shutil.which("zip") is None, reason="Info-ZIP not installed")
def test_backends_produce_equivalent_entries(rom_dir, tmp_path, monkeypatch):
    monkeypatch.chdir(rom_dir)
    monkeypatch.delenv(archive_service.ZIP_EXECUTABLE_ENV, raising=False)
    files = [rom_dir / "a.bin", rom_dir / "b.bin"]
    relative = [path.relative_to(rom_dir) for path in files]

    internal = InternalZipBackend().build(tmp_path / "internal.zip", files)
    external = ExternalZipBackend().build(tmp_path / "external.zip", relative)

    def entries(archive):
        with zipfile.ZipFile(archive) as zf:
            return {name: zf.read(name) for name in zf.namelist()}

    assert entries(internal) == entries(external) == {"a.bin": A_DATA, "b.bin": B_DATA}


@pytest.mark.parametrize(
    "name, safe",
    [
        ("Alpha", True),
        ("Alpha (USA) (Rev 1)", True),
        ("..", False),
        (".", False),
        ("", False),
        ("../escaped", False),
        ("A/B", False),
        ("A\\B", False),
        ("/abs", False),
    ],
)
def test_is_safe_name(name, safe):
    assert archive_service.is_safe_name(name) is safe
