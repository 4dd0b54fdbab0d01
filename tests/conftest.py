import os
import socket
import time
from concurrent.futures import ThreadPoolExecutor

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt6.QtWidgets import QApplication

from present.bus import NotificationBus
from present.server import RemoteServer, SerialContext
from present.state import PresentationState


@pytest.fixture(scope="session")
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


def pump_until(app, predicate, timeout=5.0):
    """Spin the Qt event loop on this thread until predicate() holds."""
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("timed out waiting for condition")
        app.processEvents()
        time.sleep(0.002)


@pytest.fixture
def state():
    s = PresentationState()
    s.replace_slides(["https://a.example", "https://b.example", "https://c.example"])
    return s


@pytest.fixture
def bus():
    return NotificationBus()


@pytest.fixture
def pool():
    ex = ThreadPoolExecutor(max_workers=4)
    yield ex
    ex.shutdown(wait=False)


@pytest.fixture
def remote(qapp, state, bus):
    server = RemoteServer(state, bus, SerialContext(), host="127.0.0.1")
    server.start(0)
    yield server
    server.stop()


def raw_exchange(port, payload, timeout=5.0):
    """Send payload on a fresh connection and read until the server closes it."""
    with socket.create_connection(("127.0.0.1", port), timeout=timeout) as s:
        if payload:
            s.sendall(payload)
        else:
            s.shutdown(socket.SHUT_WR)
        chunks = []
        while True:
            data = s.recv(65536)
            if not data:
                break
            chunks.append(data)
    return b"".join(chunks)


def split_response(raw):
    head, _, body = raw.partition(b"\r\n\r\n")
    lines = head.decode("latin-1").split("\r\n")
    headers = {}
    for line in lines[1:]:
        k, _, v = line.partition(":")
        headers[k.strip()] = v.strip()
    return lines[0], headers, body


@pytest.fixture
def exchange(qapp, remote, pool):
    """Run one request against the live server while pumping the Qt loop."""

    def run(payload):
        fut = pool.submit(raw_exchange, remote.port, payload)
        pump_until(qapp, fut.done)
        return fut.result()

    return run
