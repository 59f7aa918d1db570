"""Download sources and provisioning constants."""

DEPENDENCY_NAMES = ("ffmpeg", "ffprobe", "ffplay")

# The binary whose presence stands in for the whole shared archive
PRIMARY_BINARY = "ffmpeg"

WINDOWS_ARCHIVE_URL = "https://www.gyan.dev/ffmpeg/builds/ffmpeg-release-full.7z"
LINUX_ARCHIVE_URL = (
    "https://johnvansickle.com/ffmpeg/releases/ffmpeg-release-amd64-static.tar.xz"
)
DARWIN_ARCHIVE_URL_TEMPLATE = "https://evermeet.cx/ffmpeg/getrelease/{name}/7z"

THROTTLE_WINDOW_SECONDS = 5 * 60

# Longest first so ".tar.gz" wins over ".gz"
ARCHIVE_EXTENSIONS = (
    ".tar.bz2",
    ".tar.gz",
    ".tar.xz",
    ".tar",
    ".tgz",
    ".txz",
    ".zip",
    ".bz2",
    ".7z",
    ".gz",
    ".xz",
)

DOWNLOAD_CHUNK_SIZE = 8192
