from present.config import SCROLL_FLUSH_MS, SCROLL_SENSITIVITY, STATUS_POLL_MS
from present.remote_page import REMOTE_HTML


def test_constants_substituted():
    assert "@" + "SCROLL" not in REMOTE_HTML
    assert f"const SCROLL_SENSITIVITY = {SCROLL_SENSITIVITY};" in REMOTE_HTML
    assert f"const SCROLL_FLUSH_MS = {SCROLL_FLUSH_MS};" in REMOTE_HTML
    assert f"const STATUS_POLL_MS = {STATUS_POLL_MS};" in REMOTE_HTML


def test_page_speaks_the_wire_protocol():
    for path in ("'/prev'", "'/next'", "'/stop'", "'/play'", "'/zoomin'", "'/zoomout'", "'/status'", "'/scroll?dy='"):
        assert path in REMOTE_HTML
    assert "setInterval(poll, STATUS_POLL_MS)" in REMOTE_HTML
    assert "'Disconnected'" in REMOTE_HTML
    assert "setTimeout(flushScroll, SCROLL_FLUSH_MS)" in REMOTE_HTML
    assert "clearTimeout(flushTimer)" in REMOTE_HTML
    assert "Math.round(pendingDelta)" in REMOTE_HTML
