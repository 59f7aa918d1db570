import shutil
from pathlib import Path

import pytest

from mcp_ffmpeg_deps.types import InstallUtils, LoadUtils


class FakeRunner:
    """Stands in for running `<binary> -version`.

    Existing files print an ffmpeg-style banner named after the file stem;
    missing files fail to spawn. `outputs` overrides the result per path;
    an exception there is raised instead of returned.
    """

    def __init__(self, outputs=None):
        self.outputs = outputs or {}
        self.calls = []

    async def __call__(self, *args):
        self.calls.append(args)
        path = Path(args[0])
        if str(path) in self.outputs:
            result = self.outputs[str(path)]
            if isinstance(result, Exception):
                raise result
            return result
        if not path.exists():
            raise FileNotFoundError(2, "No such file or directory", str(path))
        return 0, f"{path.stem} version 7.0.2 Copyright (c) 2000-2024 the FFmpeg developers\n", ""


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeArchiveHost:
    """Host capabilities that serve one prepared archive layout.

    `layout` maps paths relative to the temp directory to file contents;
    extraction writes them and reports their top-level entries.
    """

    def __init__(self, tmp_path: Path, filename: str, layout: dict, entries=None):
        self.tmp_path = tmp_path
        self.filename = filename
        self.layout = layout
        self.entries = entries
        self.events = []
        self.downloads = []
        self.extractions = []
        self.cleanups = []
        self.stages = []
        self.messages = []
        self.progress_values = []

    async def download(self, url, dest_dir, on_progress=None):
        self.events.append("download")
        self.downloads.append(url)
        (dest_dir / self.filename).write_bytes(b"archive")
        if on_progress:
            on_progress(0.5)
            on_progress(1.0)
        return self.filename

    async def extract(self, archive_path):
        self.events.append("extract")
        self.extractions.append(archive_path)
        entries = []
        for rel, content in self.layout.items():
            target = self.tmp_path / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
            root = rel.split("/")[0]
            if root not in entries:
                entries.append(root)
        return list(self.entries) if self.entries is not None else entries

    async def cleanup(self, path):
        self.events.append("cleanup")
        self.cleanups.append(path)
        if path.exists():
            for item in path.iterdir():
                if item.is_dir():
                    shutil.rmtree(item)
                else:
                    item.unlink()

    def utils(self, data_path: Path, system: str, runner=None, search=None) -> InstallUtils:
        return InstallUtils(
            data_path=data_path,
            tmp_path=self.tmp_path,
            system=system,
            run_command=runner or FakeRunner(),
            search_path=search or (lambda name: None),
            download=self.download,
            extract=self.extract,
            cleanup=self.cleanup,
            progress=self.progress_values.append,
            stage=self.stages.append,
            log=self.messages.append,
        )


WINDOWS_LAYOUT = {
    "ffmpeg-7.0.2-full_build/bin/ffmpeg.exe": b"ffmpeg",
    "ffmpeg-7.0.2-full_build/bin/ffprobe.exe": b"ffprobe",
    "ffmpeg-7.0.2-full_build/bin/ffplay.exe": b"ffplay",
    "ffmpeg-7.0.2-full_build/README.txt": b"readme",
}

LINUX_LAYOUT = {
    "ffmpeg-7.0.2-amd64-static/ffmpeg": b"ffmpeg",
    "ffmpeg-7.0.2-amd64-static/ffprobe": b"ffprobe",
    "ffmpeg-7.0.2-amd64-static/readme.txt": b"readme",
}


@pytest.fixture
def data_dir(tmp_path):
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def work_dir(tmp_path):
    path = tmp_path / "tmp"
    path.mkdir()
    return path


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def load_utils(data_dir, runner):
    """Linux load utils with nothing on the system search path"""
    return LoadUtils(
        data_path=data_dir, system="Linux", run_command=runner, search_path=lambda name: None
    )


@pytest.fixture
def windows_host(work_dir):
    return FakeArchiveHost(work_dir, "ffmpeg-release-full.7z", WINDOWS_LAYOUT)


@pytest.fixture
def linux_host(work_dir):
    return FakeArchiveHost(work_dir, "ffmpeg-release-amd64-static.tar.xz", LINUX_LAYOUT)
