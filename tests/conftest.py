"""Pytest configuration and fixtures."""

import hashlib

import pytest

from romsetzip.models.catalog import Game, RomEntry
from romsetzip.services.dat_service import Catalog

A_DATA = b"alpha rom a contents"
B_DATA = b"alpha rom b contents, slightly longer"
C_DATA = b"nobody knows this file"


def sha1(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()


@pytest.fixture
def make_game():
    """Build a Game from a {file name: content} mapping."""

    def _make(name, files):
        roms = tuple(
            RomEntry(name=rom_name, game=name, size=len(data), sha1=sha1(data))
            for rom_name, data in files.items()
        )
        return Game(name=name, roms=roms)

    return _make


@pytest.fixture
def alpha(make_game):
    return make_game("Alpha", {"a.bin": A_DATA, "b.bin": B_DATA})


@pytest.fixture
def catalog(alpha):
    return Catalog([alpha])


@pytest.fixture
def rom_dir(tmp_path):
    """Directory with a.bin and b.bin matching Alpha, plus an unknown c.bin."""
    directory = tmp_path / "roms"
    directory.mkdir()
    (directory / "a.bin").write_bytes(A_DATA)
    (directory / "b.bin").write_bytes(B_DATA)
    (directory / "c.bin").write_bytes(C_DATA)
    return directory


@pytest.fixture
def dat_file(tmp_path):
    """Logiqx DAT describing Alpha (a.bin, b.bin) and Beta (a.bin, z.bin)."""
    path = tmp_path / "test.dat"
    path.write_text(
        f"""<?xml version="1.0"?>
<!DOCTYPE datafile PUBLIC "-//Logiqx//DTD ROM Management Datafile//EN" "http://www.logiqx.com/Dats/datafile.dtd">
<datafile>
  <header>
    <name>Test System</name>
    <description>Test System</description>
  </header>
  <game name="Alpha">
    <description>Alpha (USA)</description>
    <rom name="a.bin" size="{len(A_DATA)}" crc="00000000" sha1="{sha1(A_DATA).upper()}"/>
    <rom name="b.bin" size="{len(B_DATA)}" crc="00000001" sha1="{sha1(B_DATA)}"/>
  </game>
  <game name="Beta">
    <description>Beta (Japan)</description>
    <rom name="a.bin" size="{len(A_DATA)}" sha1="{sha1(A_DATA)}"/>
    <rom name="z.bin" size="3" sha1="{sha1(b'zzz')}"/>
  </game>
</datafile>
""",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def files_in(rom_dir):
    def _files(*names):
        return [rom_dir / name for name in names]

    return _files
