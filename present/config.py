import os
import re


# ----------------------------
# Remote control
# ----------------------------
REMOTE_PORT = 9123
READ_LIMIT = 8192

# ----------------------------
# Presentation state
# ----------------------------
ZOOM_STEP = 0.1
ZOOM_MIN = 0.3
ZOOM_MAX = 5.0
ZOOM_DEFAULT = 1.0

# ----------------------------
# Client protocol
# ----------------------------
# Finger travel (px) to page scroll (px). Earlier builds shipped 2x, current ships 3x.
SCROLL_SENSITIVITY = 3
SCROLL_FLUSH_MS = 50
STATUS_POLL_MS = 1000

# ----------------------------
# Files
# ----------------------------
CONFIG_PATH = os.environ.get("PRESENT_CONFIG", "~/.present.yml")
DEFAULT_STATE_PATH = "~/.present_state.json"
LOG_LEVEL = os.environ.get("PRESENT_LOG_LEVEL", "INFO").upper()


_SWITCH_OFF = ("off", "false", "no", "0")


def _unquote(val):
    if len(val) >= 2 and val[0] == val[-1] and val[0] in "'\"":
        return val[1:-1]
    return val


def read_config(path=None):
    """
    Parse the flat ``key: value`` settings file into a dict.

    Blank lines, ``#`` comments and lines without a colon are skipped. A key
    given twice keeps its first value. A missing file reads as empty.
    """
    path = os.path.expanduser(path or CONFIG_PATH)
    settings = {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            lines = f.read().splitlines()
    except FileNotFoundError:
        return settings
    for line in lines:
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, val = line.partition(":")
        key, val = key.strip(), val.strip()
        if not sep or not val or not re.fullmatch(r"[\w.-]+", key):
            continue
        settings.setdefault(key, _unquote(val))
    return settings


def read_state_path(path=None, settings=None):
    if settings is None:
        settings = read_config(path)
    return os.path.expanduser(settings.get("state_file") or DEFAULT_STATE_PATH)


def remote_enabled(path=None, settings=None):
    if settings is None:
        settings = read_config(path)
    val = settings.get("remote")
    return val is None or val.lower() not in _SWITCH_OFF
