"""Common literal values used across godoc_snapshot.

These constants keep default options, the wget crawl bounds, and the naming
scheme of renamed files in one place so the CLI, the pipeline stages, and the
tests agree on them.

Examples
--------
>>> from godoc_snapshot import _constants
>>> _constants.ENTRY_POINT_TEMPLATE.format(base="godoc")
'godoc-root.html'
>>> _constants.PAGE_TEMPLATE.format(base="godoc", index=3)
'godoc.3.html'
"""

DEFAULT_BUILD_PATH = "zdocs/source/_static"
DEFAULT_GODOC_HOST = "localhost:6161"
DEFAULT_HTML_BASE_NAME = "godoc"
DEFAULT_CONFIG_FILE = "godoc-snapshot.yaml"

ENTRY_POINT_TEMPLATE = "{base}-root.html"
PAGE_TEMPLATE = "{base}.{index}.html"

# godoc serves package docs under /pkg/; the listing page doubles as the
# readiness endpoint.
PACKAGE_PATH_PREFIX = "/pkg/"

READINESS_DEADLINE_SECONDS = 10.0
READINESS_INTERVAL_SECONDS = 1.0
READINESS_REQUEST_TIMEOUT_SECONDS = 1.0

# wget needs a finite -l value; 50 is far deeper than any godoc tree.
MAX_CRAWL_DEPTH = 50
MIRROR_ASSET_EXTENSIONS = (".css", ".png", ".js")
STYLESHEET_MARKER = "style.css"
RESERVED_INDEX_FILE = "index.html"
