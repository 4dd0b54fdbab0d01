import json
import logging
import math
import sys
import threading
import time
import urllib.error
import urllib.request
from typing import Callable, Optional

from present.config import REMOTE_PORT, SCROLL_FLUSH_MS, SCROLL_SENSITIVITY, STATUS_POLL_MS
from present.snapshot import PresentationSnapshot

log = logging.getLogger(__name__)


# ----------------------------
# HTTP remote
# ----------------------------
class RemoteClient:
    def __init__(self, host, port=REMOTE_PORT, timeout=5.0):
        self.base_url = f"http://{host}:{port}"
        self.timeout = timeout

    def get(self, path):
        req = urllib.request.Request(self.base_url + path, headers={"User-Agent": "present-remote/1.0"})
        with urllib.request.urlopen(req, timeout=self.timeout) as resp:
            return resp.read()

    def _action(self, path):
        return json.loads(self.get(path).decode("utf-8"))

    def next(self):
        return self._action("/next")

    def prev(self):
        return self._action("/prev")

    def play(self):
        return self._action("/play")

    def stop(self):
        return self._action("/stop")

    def zoom_in(self):
        return self._action("/zoomin")

    def zoom_out(self):
        return self._action("/zoomout")

    def scroll(self, dy):
        return self._action(f"/scroll?dy={dy}")

    def status(self) -> PresentationSnapshot:
        return PresentationSnapshot.from_status(self._action("/status"))


def fire_and_forget(client):
    """Return a send(dy) that issues /scroll on a throwaway thread and ignores failures."""

    def send(dy):
        def worker():
            try:
                client.scroll(dy)
            except (OSError, ValueError) as exc:
                log.debug("scroll %s dropped: %s", dy, exc)

        threading.Thread(target=worker, name="remote-scroll", daemon=True).start()

    return send


# ----------------------------
# Scroll coalescing
# ----------------------------
class ScrollCoalescer:
    """
    Touch-drag to /scroll coalescing, same machine as the served page.

    touch_start() arms a gesture, touch_move() accumulates scaled deltas and
    arms a one-shot flush timer if none is pending, touch_end() cancels the
    timer and flushes at once. At most one send per flush window.
    """

    def __init__(
        self,
        send: Callable[[int], None],
        *,
        sensitivity: float = SCROLL_SENSITIVITY,
        flush_interval: float = SCROLL_FLUSH_MS / 1000.0,
    ):
        self._send = send
        self.sensitivity = sensitivity
        self.flush_interval = float(flush_interval)
        self._lock = threading.Lock()
        self._last_y: Optional[float] = None
        self._pending = 0.0
        self._timer: Optional[threading.Timer] = None

    @property
    def active(self):
        return self._last_y is not None

    @property
    def pending_delta(self):
        return self._pending

    def touch_start(self, y):
        with self._lock:
            self._last_y = float(y)
            self._pending = 0.0

    def touch_move(self, y):
        with self._lock:
            if self._last_y is None:
                return
            y = float(y)
            self._pending += (y - self._last_y) * self.sensitivity
            self._last_y = y
            if self._timer is None:
                timer = threading.Timer(self.flush_interval, lambda: self._timer_fired(timer))
                timer.daemon = True
                self._timer = timer
                timer.start()

    def touch_end(self):
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._last_y = None
        self.flush()

    def _timer_fired(self, timer):
        # a timer cancelled too late must not clear its successor
        with self._lock:
            if self._timer is not timer:
                return
            self._timer = None
        self.flush()

    def flush(self):
        with self._lock:
            if self._pending == 0:
                return
            # same rounding as Math.round in the page
            dy = math.floor(self._pending + 0.5)
            self._pending = 0.0
        self._send(dy)


# ----------------------------
# Status polling
# ----------------------------
class StatusPoller:
    """Polls /status at a fixed interval forever; no backoff on failure."""

    def __init__(self, client, on_status, on_disconnect=None, interval=STATUS_POLL_MS / 1000.0):
        self.client = client
        self.on_status = on_status
        self.on_disconnect = on_disconnect
        self.interval = float(interval)
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self):
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="status-poll", daemon=True)
        self._thread.start()

    def stop(self):
        self._stop.set()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=2.0)

    def poll_once(self):
        try:
            snap = self.client.status()
        except (OSError, ValueError) as exc:
            log.debug("status poll failed: %s", exc)
            if self.on_disconnect:
                self.on_disconnect(exc)
            return None
        self.on_status(snap)
        return snap

    def _loop(self):
        while not self._stop.is_set():
            started = time.monotonic()
            self.poll_once()
            self._stop.wait(max(0.0, self.interval - (time.monotonic() - started)))


# ----------------------------
# CLI
# ----------------------------
USAGE = (
    "usage: present-remote HOST[:PORT] COMMAND [ARG]\n"
    "commands: next prev play stop zoomin zoomout status scroll DY watch"
)


def _format_status(snap):
    state = "presenting" if snap.is_presenting else "idle"
    return f"Slide {snap.slide_index + 1} / {snap.total_slides} ({state}) {snap.current_url}".rstrip()


def main(argv=None):
    argv = list(sys.argv[1:] if argv is None else argv)
    if len(argv) < 2:
        print(USAGE, file=sys.stderr)
        return 2

    host, cmd, args = argv[0], argv[1], argv[2:]
    port = REMOTE_PORT
    if ":" in host:
        host, _, p = host.rpartition(":")
        try:
            port = int(p)
        except ValueError:
            print(USAGE, file=sys.stderr)
            return 2
    client = RemoteClient(host, port)

    actions = {
        "next": client.next,
        "prev": client.prev,
        "play": client.play,
        "stop": client.stop,
        "zoomin": client.zoom_in,
        "zoomout": client.zoom_out,
    }

    try:
        if cmd in actions:
            actions[cmd]()
            return 0
        if cmd == "scroll":
            try:
                dy = float(args[0]) if args else None
            except ValueError:
                dy = None
            if dy is None:
                print(USAGE, file=sys.stderr)
                return 2
            client.scroll(dy)
            return 0
        if cmd == "status":
            print(_format_status(client.status()))
            return 0
        if cmd == "watch":
            poller = StatusPoller(
                client,
                on_status=lambda s: print(_format_status(s), flush=True),
                on_disconnect=lambda e: print("Disconnected", flush=True),
            )
            poller.start()
            try:
                while True:
                    time.sleep(3600)
            except KeyboardInterrupt:
                poller.stop()
            return 0
    except urllib.error.URLError as exc:
        print(f"present-remote: {exc.reason}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"present-remote: {exc}", file=sys.stderr)
        return 1

    print(USAGE, file=sys.stderr)
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
