# -*- coding: utf-8 -*-

"""Core constants shared across the crx-extract package."""

# CRX container format
CRX_MAGIC = 0x34327243  # "Cr24" read as u32 little-endian
CRX_MAGIC_BYTES = b"Cr24"
CRX_VERSION_2 = 2
CRX_VERSION_3 = 3
CRX_MIN_LENGTH = 8  # magic + version

# Chrome Web Store
EXTENSION_ID_PATTERN = r"[a-z]{32}"
CHROME_WEBSTORE_URL_BASE = "https://chromewebstore.google.com/detail/"
CRX_DOWNLOAD_URL_BASE = "https://clients2.google.com/service/update2/crx"
CRX_PRODUCT_VERSION = "120.0"
CRX_ACCEPT_FORMAT = "crx3"
DOWNLOAD_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
)

# Default limits
DEFAULT_MAX_FILE_SIZE = 500 * 1024 * 1024  # 500 MiB
DEFAULT_DOWNLOAD_TIMEOUT_MS = 30000
DEFAULT_MAX_EXTRACTION_RATIO = 100.0
DEFAULT_MAX_EXTRACTED_FILES = 10000
DEFAULT_MAX_EXTRACTED_SIZE = 1024 * 1024 * 1024  # 1 GiB
DEFAULT_ALLOWED_OUTPUT_PATHS: tuple[str, ...] = (".",)
DEFAULT_EXTENSIONS_DIR = "_extensions"

# Filesystem layout
STAGED_ARCHIVE_NAME = "archive.zip"
STAGED_CONTENTS_DIRNAME = "contents"
STAGING_DIR_PREFIX = ".tmp_"
FALLBACK_ARCHIVE_NAME = "failed_extraction.zip"
MANIFEST_FILENAME = "manifest.json"
CRX_SUFFIX = ".crx"

# Names
MAX_NAME_LENGTH = 200
UNNAMED_PLACEHOLDER = "unnamed"
LOCAL_EXTENSION_ID = "local"
LOCAL_EXTENSION_NAME = "local_extension"
UNKNOWN_EXTENSION_NAME = "unknown_extension"

# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
