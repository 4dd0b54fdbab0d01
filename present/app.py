import logging
import socket
import sys

from present.config import LOG_LEVEL

if not logging.getLogger().handlers:
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QKeySequence, QShortcut
from PyQt6.QtWidgets import (
    QApplication,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from present.bus import NotificationBus
from present.config import REMOTE_PORT, read_config, read_state_path, remote_enabled
from present.server import SerialContext, start_remote_server
from present.state import PresentationState
from present.window import PresentationController

log = logging.getLogger("present")


def get_ipv4_addrs():
    """Addresses a phone on the LAN could reach us at, loopback last resort."""
    addrs = {"127.0.0.1"}
    # a UDP connect sends nothing but picks the outbound interface
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
            s.connect(("192.0.2.1", 9))
            addrs.add(s.getsockname()[0])
    except OSError:
        pass
    try:
        _, _, ips = socket.gethostbyname_ex(socket.gethostname())
        addrs.update(ip for ip in ips if not ip.startswith("127."))
    except OSError:
        pass
    addrs.discard("0.0.0.0")
    return sorted(addrs)


# ----------------------------
# Slide list editor
# ----------------------------
class SlideListWindow(QWidget):
    def __init__(self, state, controller):
        super().__init__()
        self.state = state
        self.controller = controller
        self._syncing = False

        self.setWindowTitle("Present")
        self.resize(520, 420)

        self.list = QListWidget(self)
        self.list.setDragDropMode(QListWidget.DragDropMode.InternalMove)
        self.list.currentRowChanged.connect(self._row_selected)
        self.list.itemChanged.connect(self._item_edited)
        self.list.model().rowsMoved.connect(self._rows_moved)

        add_btn = QPushButton("+", self)
        add_btn.clicked.connect(lambda: self.state.add_slide())
        self.remove_btn = QPushButton("-", self)
        self.remove_btn.clicked.connect(lambda: self._remove_selected())
        self.play_btn = QPushButton("Play", self)
        self.play_btn.clicked.connect(lambda: self.controller.open())
        self.remote_label = QLabel("", self)
        self.remote_label.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse)

        buttons = QHBoxLayout()
        buttons.addWidget(add_btn)
        buttons.addWidget(self.remove_btn)
        buttons.addStretch(1)
        buttons.addWidget(self.play_btn)

        layout = QVBoxLayout(self)
        layout.addWidget(self.list)
        layout.addLayout(buttons)
        layout.addWidget(self.remote_label)

        QShortcut(QKeySequence("Ctrl+O"), self, activated=self.open_file)
        QShortcut(QKeySequence("Ctrl+S"), self, activated=self.save_file)
        QShortcut(QKeySequence("Ctrl+="), self, activated=self.state.zoom_in)
        QShortcut(QKeySequence("Ctrl+-"), self, activated=self.state.zoom_out)
        QShortcut(QKeySequence("Ctrl+0"), self, activated=self.state.zoom_reset)
        QShortcut(QKeySequence("Ctrl+Shift+P"), self, activated=self.controller.open)

        self.state.changed.connect(self.sync_from_state)
        self.sync_from_state()

    def set_remote_urls(self, urls):
        self.remote_label.setText("Remote: " + "  ".join(urls) if urls else "Remote control off")

    def sync_from_state(self):
        self._syncing = True
        try:
            urls = [s.url for s in self.state.slides]
            if len(urls) == self.list.count():
                for i, url in enumerate(urls):
                    if self.list.item(i).text() != url:
                        self.list.item(i).setText(url)
            else:
                self.list.clear()
                for url in urls:
                    item = QListWidgetItem(url)
                    item.setFlags(item.flags() | Qt.ItemFlag.ItemIsEditable)
                    self.list.addItem(item)
            if self.state.slide_count:
                self.list.setCurrentRow(self.state.current_index)
            self.remove_btn.setEnabled(self.state.slide_count > 0)
            self.play_btn.setEnabled(self.state.slide_count > 0 and not self.state.is_presenting)
        finally:
            self._syncing = False

    def _row_selected(self, row):
        if self._syncing or row < 0:
            return
        if row != self.state.current_index:
            self.state.set_current_index(row)

    def _item_edited(self, item):
        if self._syncing:
            return
        self.state.update_slide(self.list.row(item), item.text().strip())

    def _rows_moved(self, parent, start, end, dest, row):
        if self._syncing:
            return
        self.state.move_slide(start, row if row < start else row - 1)

    def _remove_selected(self):
        row = self.list.currentRow()
        if row >= 0:
            self.state.remove_slide(row)

    def open_file(self):
        path, _ = QFileDialog.getOpenFileName(self, "Open", "", "Text files (*.txt);;All files (*)")
        if path and not self.state.load_from_file(path):
            log.warning("No slides loaded from %s", path)

    def save_file(self):
        path, _ = QFileDialog.getSaveFileName(self, "Save As", "presentation.txt", "Text files (*.txt)")
        if path:
            self.state.save_to_file(path)


def main(argv=None):
    argv = list(sys.argv if argv is None else argv)

    app = QApplication(argv)
    settings = read_config()
    state = PresentationState(state_path=read_state_path(settings=settings))
    state.load_state()
    if len(argv) > 1 and not state.load_from_file(argv[1]):
        log.warning("Could not load slides from %s", argv[1])
    if state.slide_count == 0:
        state.add_slide()

    bus = NotificationBus()
    context = SerialContext()
    controller = PresentationController(state, bus)
    controller.attach()

    w = SlideListWindow(state, controller)
    w.show()

    server = None
    if remote_enabled(settings=settings):
        server = start_remote_server(state, bus, context, port=REMOTE_PORT)
    if server:
        urls = [f"http://{ip}:{server.port}/" for ip in get_ipv4_addrs()]
        w.set_remote_urls(urls)
        log.info("Remote URLs: %s", ", ".join(urls))
    else:
        w.set_remote_urls([])

    def shutdown():
        if server:
            server.stop()
        controller.detach()
        state.save_state()

    app.aboutToQuit.connect(shutdown)
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
