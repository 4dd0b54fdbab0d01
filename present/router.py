import json
import logging
import math
from dataclasses import dataclass, field
from typing import Dict
from urllib.parse import parse_qsl, urlsplit

from present.bus import Play, ScrollBy, Stop
from present.remote_page import REMOTE_HTML
from present.snapshot import build_snapshot, status_body

log = logging.getLogger(__name__)

OK_BODY = json.dumps({"status": "ok"}, separators=(",", ":")).encode("utf-8")
JSON_TYPE = "application/json"
HTML_TYPE = "text/html; charset=utf-8"


# ----------------------------
# Request / response
# ----------------------------
@dataclass(frozen=True)
class Request:
    method: str
    target: str
    path: str
    query: Dict[str, str] = field(default_factory=dict)


@dataclass
class Response:
    status_code: int
    headers: Dict[str, str]
    body: bytes

    def to_bytes(self):
        lines = [f"HTTP/1.1 {self.status_code} OK"]
        for k, v in self.headers.items():
            lines.append(f"{k}: {v}")
        head = "\r\n".join(lines) + "\r\n\r\n"
        return head.encode("latin-1") + self.body


def make_response(body, content_type):
    return Response(
        status_code=200,
        headers={
            "Content-Type": content_type,
            "Content-Length": str(len(body)),
            "Connection": "close",
        },
        body=body,
    )


def parse_request(raw):
    # Only the request line matters; method and version are kept but never checked.
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else str(raw)
    first_line = text.split("\r\n", 1)[0]
    parts = first_line.split()
    method = parts[0] if parts else ""
    target = parts[1] if len(parts) >= 2 else "/"

    u = urlsplit(target)
    path = u.path or "/"
    query = dict(parse_qsl(u.query, keep_blank_values=True))
    return Request(method=method, target=target, path=path, query=query)


def parse_scroll_delta(query):
    raw = query.get("dy")
    if raw is None:
        return None
    try:
        dy = float(raw)
    except ValueError:
        return None
    if not math.isfinite(dy):
        return None
    return dy


# ----------------------------
# Router
# ----------------------------
class Router:
    """
    Maps a request to a side effect and a response body.

    Navigation and zoom are applied to the state directly; anything that
    needs a window (play, stop, scroll) goes out on the bus instead.
    Must be called on the thread that owns the state.
    """

    def __init__(self, state, bus):
        self.state = state
        self.bus = bus
        self._actions = {
            "/next": self.state.go_to_next,
            "/prev": self.state.go_to_previous,
            "/play": lambda: self.bus.publish(Play()),
            "/stop": lambda: self.bus.publish(Stop()),
            "/zoomin": self.state.zoom_in,
            "/zoomout": self.state.zoom_out,
        }

    def handle(self, raw):
        return self.route(parse_request(raw))

    def route(self, request):
        path = request.path
        log.debug("%s %s", request.method or "-", request.target)

        action = self._actions.get(path)
        if action is not None:
            action()
            return make_response(OK_BODY, JSON_TYPE)

        if path.startswith("/scroll"):
            dy = parse_scroll_delta(request.query)
            if dy is not None:
                self.bus.publish(ScrollBy(dy))
            return make_response(OK_BODY, JSON_TYPE)

        if path == "/status":
            return make_response(status_body(build_snapshot(self.state)), JSON_TYPE)

        return make_response(REMOTE_HTML.encode("utf-8"), HTML_TYPE)
