import logging
import socketserver
import threading
from concurrent.futures import Future

from PyQt6.QtCore import QObject, Qt, pyqtSignal, pyqtSlot

from present.config import READ_LIMIT, REMOTE_PORT
from present.router import Router

log = logging.getLogger(__name__)


class BindError(OSError):
    """The remote-control port could not be bound."""


# ----------------------------
# Serial execution context
# ----------------------------
class SerialContext(QObject):
    """
    Runs callables on the Qt thread this object was created on.

    Worker threads hand work over with submit()/call(); the job is queued on
    the owning event loop, so everything it touches is only ever touched
    from that one thread.
    """

    _submitted = pyqtSignal(object)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._owner = threading.get_ident()
        self._submitted.connect(self._run, Qt.ConnectionType.QueuedConnection)

    def is_current(self):
        return threading.get_ident() == self._owner

    def submit(self, fn) -> Future:
        fut = Future()
        if self.is_current():
            self._run((fn, fut))
        else:
            self._submitted.emit((fn, fut))
        return fut

    def call(self, fn):
        return self.submit(fn).result()

    @pyqtSlot(object)
    def _run(self, job):
        fn, fut = job
        if not fut.set_running_or_notify_cancel():
            return
        try:
            fut.set_result(fn())
        except BaseException as exc:
            fut.set_exception(exc)


# ----------------------------
# Listener + connection handler
# ----------------------------
class ConnectionHandler(socketserver.BaseRequestHandler):
    """
    One request per connection.

    A single recv() of at most READ_LIMIT bytes; only the request line is
    looked at. Requests longer than that, or split across segments, are
    answered from whatever the first read returned. socketserver closes the
    socket once handle() returns.
    """

    def handle(self):
        try:
            data = self.request.recv(READ_LIMIT)
        except OSError as exc:
            log.debug("Read from %s failed: %s", self.client_address[0], exc)
            return
        if not data:
            log.debug("Empty request from %s, closing", self.client_address[0])
            return

        router = self.server.router
        try:
            response = self.server.context.call(lambda: router.handle(data))
        except Exception:
            log.exception("Routing failed for %s", self.client_address[0])
            return

        try:
            self.request.sendall(response.to_bytes())
        except OSError as exc:
            log.debug("Write to %s failed: %s", self.client_address[0], exc)


class _RemoteTCPServer(socketserver.ThreadingTCPServer):
    daemon_threads = True
    allow_reuse_address = True

    def __init__(self, address, router, context):
        self.router = router
        self.context = context
        super().__init__(address, ConnectionHandler)


class RemoteServer:
    def __init__(self, state, bus, context, host="0.0.0.0"):
        self.host = host
        self.context = context
        self.router = Router(state, bus)
        self._httpd = None
        self._thread = None

    @property
    def running(self):
        return self._httpd is not None

    @property
    def port(self):
        if self._httpd is None:
            return None
        return self._httpd.server_address[1]

    def start(self, port=REMOTE_PORT):
        if self._httpd is not None:
            return self
        try:
            httpd = _RemoteTCPServer((self.host, port), self.router, self.context)
        except OSError as exc:
            raise BindError(f"cannot listen on {self.host}:{port}: {exc}") from exc

        self._httpd = httpd
        self._thread = threading.Thread(
            target=httpd.serve_forever,
            name="remote-accept",
            daemon=True,
        )
        self._thread.start()
        log.info("Remote control listening on %s:%s", self.host, self.port)
        return self

    def stop(self):
        httpd, self._httpd = self._httpd, None
        if httpd is None:
            return
        httpd.shutdown()
        httpd.server_close()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=2.0)
        self._thread = None
        log.info("Remote control stopped")


def start_remote_server(state, bus, context, port=REMOTE_PORT, host="0.0.0.0"):
    server = RemoteServer(state, bus, context, host=host)
    try:
        return server.start(port)
    except BindError as exc:
        log.error("Remote control disabled: %s", exc)
        return None
