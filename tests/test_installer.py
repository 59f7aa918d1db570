"""Tests for archive download, extraction checks and file placement."""

import pytest

from mcp_ffmpeg_deps.binaries.installer import (
    install_from_online_archive,
    resolve_template,
    strip_archive_extension,
)
from mcp_ffmpeg_deps.errors import ArchiveStructureError, EmptyArchiveError
from mcp_ffmpeg_deps.types import TemplateVar

from conftest import FakeArchiveHost, LINUX_LAYOUT


@pytest.mark.parametrize(
    "filename,expected",
    [
        ("ffmpeg-release-amd64-static.tar.xz", "ffmpeg-release-amd64-static"),
        ("ffmpeg-release-full.7z", "ffmpeg-release-full"),
        ("ffmpeg-7.0.2-essentials_build.zip", "ffmpeg-7.0.2-essentials_build"),
        ("node-v20.10.0-linux-x64.tar.gz", "node-v20.10.0-linux-x64"),
        ("FFMPEG.TGZ", "FFMPEG"),
        ("ffmpeg-7.0.2", "ffmpeg-7.0.2"),
        ("ffmpeg", "ffmpeg"),
    ],
)
def test_strip_archive_extension(filename, expected):
    """Only known compression extensions are removed"""
    assert strip_archive_extension(filename) == expected


def test_resolve_template():
    """Both tokens are substituted"""
    values = {TemplateVar.ROOT_FILE: "root", TemplateVar.ARCHIVE_NAME: "pkg-1.0"}

    assert resolve_template("{rootFile}/bin/ffmpeg.exe", values) == "root/bin/ffmpeg.exe"
    assert resolve_template("{archiveName}/ffmpeg", values) == "pkg-1.0/ffmpeg"
    assert resolve_template("ffmpeg", values) == "ffmpeg"


def test_resolve_template_missing_value():
    """A token without a value is an error, not left in the path"""
    with pytest.raises(ValueError, match="archiveName"):
        resolve_template("{archiveName}/ffmpeg", {TemplateVar.ROOT_FILE: "root"})


@pytest.mark.asyncio
async def test_install_moves_mapped_files(linux_host, data_dir):
    """Mapped files end up in the data directory under their new names"""
    utils = linux_host.utils(data_dir, "Linux")

    placed = await install_from_online_archive(
        "https://example.invalid/ffmpeg.tar.xz",
        {"{rootFile}/ffmpeg": "ffmpeg", "{rootFile}/ffprobe": "ffprobe"},
        utils,
    )

    assert placed == [data_dir / "ffmpeg", data_dir / "ffprobe"]
    assert (data_dir / "ffmpeg").read_bytes() == b"ffmpeg"
    assert (data_dir / "ffprobe").read_bytes() == b"ffprobe"
    assert not (data_dir / "readme.txt").exists()
    assert linux_host.stages == ["downloading", "extracting"]
    assert linux_host.messages[0] == "url: https://example.invalid/ffmpeg.tar.xz"
    assert linux_host.progress_values == [0.5, 1.0]


@pytest.mark.asyncio
async def test_install_archive_name_token(work_dir, data_dir):
    """{archiveName} resolves to the download name without extension"""
    host = FakeArchiveHost(
        work_dir, "ffmpeg-7.0.2.tar.xz", {"ffmpeg-7.0.2/ffmpeg": b"ffmpeg"}
    )

    await install_from_online_archive(
        "https://example.invalid/ffmpeg-7.0.2.tar.xz",
        {"{archiveName}/ffmpeg": "ffmpeg"},
        host.utils(data_dir, "Linux"),
    )

    assert (data_dir / "ffmpeg").exists()


@pytest.mark.asyncio
async def test_install_runs_hook_before_copy(linux_host, data_dir):
    """The pre-copy hook runs after extraction and before any move"""
    order = []
    utils = linux_host.utils(data_dir, "Linux")

    async def before_copy():
        order.append(("hook", (data_dir / "ffmpeg").exists()))

    await install_from_online_archive(
        "https://example.invalid/ffmpeg.tar.xz",
        {"{rootFile}/ffmpeg": "ffmpeg"},
        utils,
        on_before_copy=before_copy,
    )

    assert order == [("hook", False)]
    assert (data_dir / "ffmpeg").exists()


@pytest.mark.asyncio
async def test_empty_archive(work_dir, data_dir):
    """Zero extracted entries is an empty-archive failure"""
    host = FakeArchiveHost(work_dir, "empty.7z", {}, entries=[])
    hook_calls = []

    async def before_copy():
        hook_calls.append(True)

    with pytest.raises(EmptyArchiveError):
        await install_from_online_archive(
            "https://example.invalid/empty.7z",
            {"{rootFile}/ffmpeg": "ffmpeg"},
            host.utils(data_dir, "Linux"),
            on_before_copy=before_copy,
        )
    assert hook_calls == []


@pytest.mark.asyncio
async def test_multiple_root_entries(work_dir, data_dir):
    """More than one top-level entry is a structure mismatch"""
    host = FakeArchiveHost(
        work_dir, "two.zip", {"a/ffmpeg": b"1", "b/ffprobe": b"2"}
    )

    with pytest.raises(ArchiveStructureError) as exc_info:
        await install_from_online_archive(
            "https://example.invalid/two.zip",
            {"{rootFile}/ffmpeg": "ffmpeg"},
            host.utils(data_dir, "Linux"),
        )
    assert exc_info.value.details["entries"] == ["a", "b"]


@pytest.mark.asyncio
async def test_missing_source_is_structure_mismatch(linux_host, data_dir):
    """A mapped file absent from the archive is not a raw filesystem error"""
    with pytest.raises(ArchiveStructureError) as exc_info:
        await install_from_online_archive(
            "https://example.invalid/ffmpeg.tar.xz",
            {"{rootFile}/ffmpeg": "ffmpeg", "{rootFile}/ffplay": "ffplay"},
            linux_host.utils(data_dir, "Linux"),
        )

    assert isinstance(exc_info.value.__cause__, FileNotFoundError)
    assert "ffplay" in exc_info.value.details["missing"]


@pytest.mark.asyncio
async def test_download_errors_propagate(linux_host, data_dir):
    """Host download failures pass through unchanged"""
    async def failing_download(url, dest_dir, on_progress=None):
        raise ConnectionResetError("peer went away")

    linux_host.download = failing_download

    with pytest.raises(ConnectionResetError):
        await install_from_online_archive(
            "https://example.invalid/ffmpeg.tar.xz",
            {"{rootFile}/ffmpeg": "ffmpeg"},
            linux_host.utils(data_dir, "Linux"),
        )
    assert linux_host.extractions == []


@pytest.mark.asyncio
async def test_creates_missing_data_directory(work_dir, tmp_path):
    """Data directory is created on first install"""
    host = FakeArchiveHost(work_dir, "static.tar.xz", LINUX_LAYOUT)
    data_dir = tmp_path / "fresh" / "bin"

    await install_from_online_archive(
        "https://example.invalid/static.tar.xz",
        {"{rootFile}/ffprobe": "ffprobe"},
        host.utils(data_dir, "Linux"),
    )

    assert (data_dir / "ffprobe").exists()
