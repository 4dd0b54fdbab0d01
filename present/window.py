import logging
import os
from urllib.parse import unquote, urlparse

from PIL import Image, ImageOps
from PIL.ImageQt import ImageQt

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QFont, QKeySequence, QPixmap, QShortcut
from PyQt6.QtWidgets import QLabel, QScrollArea, QWidget

from present.bus import Play, ScrollBy, Stop

log = logging.getLogger(__name__)

IMAGE_EXTS = (".png", ".gif", ".jpg", ".jpeg", ".webp", ".svg")
TEXT_POINT_SIZE = 28


# ----------------------------
# Slide helpers
# ----------------------------
def is_image_url(url):
    lower = (url or "").lower().split("?", 1)[0]
    return lower.endswith(IMAGE_EXTS)


def resolve_url(raw):
    if urlparse(raw).scheme:
        return raw
    return "https://" + raw


def local_image_path(url):
    if not is_image_url(url):
        return None
    p = urlparse(url)
    if p.scheme == "file":
        path = unquote(p.path)
    elif not p.scheme:
        path = os.path.expanduser(url)
    else:
        return None
    return path if os.path.isfile(path) else None


def fit_width(pil_img, target_w):
    iw, ih = pil_img.size
    if target_w <= 0 or iw <= 0 or ih <= 0:
        return pil_img
    nh = max(1, int(round(ih * target_w / iw)))
    return pil_img.resize((target_w, nh), Image.Resampling.LANCZOS)


def pil_to_qpixmap(pil_img):
    if pil_img.mode != "RGBA":
        pil_img = pil_img.convert("RGBA")
    return QPixmap.fromImage(ImageQt(pil_img))


def load_pixmap_fit_width(path, target_w):
    try:
        img = Image.open(path)
        img = ImageOps.exif_transpose(img)
        img = img.convert("RGB")
        return pil_to_qpixmap(fit_width(img, target_w))
    except Exception as exc:
        log.warning("Cannot load image %s: %s", path, exc)
        return None


# ----------------------------
# Fullscreen presentation
# ----------------------------
class PresentationView(QWidget):
    def __init__(self, state, on_exit=None):
        super().__init__()
        self.state = state
        self.on_exit = on_exit
        self.margin = 12
        self._shown_key = None
        self._dismissed = False

        self.setWindowTitle("Present")
        self.setWindowFlags(Qt.WindowType.FramelessWindowHint | Qt.WindowType.WindowStaysOnTopHint)
        self.setStyleSheet("background: black;")

        self.scroll = QScrollArea(self)
        self.scroll.setFrameShape(QScrollArea.Shape.NoFrame)
        self.scroll.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.scroll.setVerticalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self.scroll.setAlignment(Qt.AlignmentFlag.AlignHCenter | Qt.AlignmentFlag.AlignTop)

        self.content = QLabel()
        self.content.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.content.setWordWrap(True)
        self.content.setStyleSheet("color: white; background: black;")
        self.scroll.setWidget(self.content)

        self.counter = QLabel(self)
        self.counter.setFont(QFont("DejaVu Sans", 11))
        self.counter.setStyleSheet(
            "color: rgba(255,255,255,180);"
            "background-color: rgba(0,0,0,128);"
            "border-radius: 6px;"
            "padding: 4px 10px;"
        )

        QShortcut(QKeySequence("Left"), self, activated=self.state.go_to_previous)
        QShortcut(QKeySequence("Right"), self, activated=self.state.go_to_next)
        QShortcut(QKeySequence("Esc"), self, activated=self.request_exit)
        QShortcut(QKeySequence("Ctrl+="), self, activated=self.state.zoom_in)
        QShortcut(QKeySequence("Ctrl++"), self, activated=self.state.zoom_in)
        QShortcut(QKeySequence("Ctrl+-"), self, activated=self.state.zoom_out)
        QShortcut(QKeySequence("Ctrl+0"), self, activated=self.state.zoom_reset)

        self.state.changed.connect(self.refresh)
        self.refresh()

    def request_exit(self):
        if self.on_exit:
            self.on_exit()
        else:
            self.close()

    def dismiss(self):
        """Close without reporting back through on_exit."""
        if self._dismissed:
            return
        self._dismissed = True
        self.close()

    def resizeEvent(self, event):
        self.scroll.setGeometry(self.rect())
        self._shown_key = None
        self.refresh()
        super().resizeEvent(event)

    def closeEvent(self, event):
        try:
            self.state.changed.disconnect(self.refresh)
        except TypeError:
            pass
        # closed by the window manager or a plain close(): let the owner tidy up
        if not self._dismissed:
            self._dismissed = True
            if self.on_exit:
                self.on_exit()
        super().closeEvent(event)

    def refresh(self):
        slide = self.state.current_slide
        key = (slide.id if slide else None, slide.url if slide else None,
               self.state.zoom_level, self.width())
        if key != self._shown_key:
            self._shown_key = key
            self._show_slide(slide)
        self._layout_counter()

    def _show_slide(self, slide):
        target_w = max(1, self.scroll.viewport().width())
        self.content.clear()
        if slide is None:
            self._show_text("No slides")
            return

        path = local_image_path(slide.url)
        if path:
            pix = load_pixmap_fit_width(path, target_w)
            if pix is not None:
                self.content.setPixmap(pix)
                self.content.resize(pix.size())
                self.scroll.verticalScrollBar().setValue(0)
                return

        self._show_text(resolve_url(slide.url))

    def _show_text(self, text):
        font = QFont("DejaVu Sans")
        font.setPointSizeF(TEXT_POINT_SIZE * self.state.zoom_level)
        self.content.setFont(font)
        self.content.setText(text)
        self.content.resize(max(1, self.scroll.viewport().width()), max(1, self.scroll.viewport().height()))
        self.scroll.verticalScrollBar().setValue(0)

    def _layout_counter(self):
        if self.state.slide_count == 0:
            self.counter.hide()
            return
        self.counter.setText(f"{self.state.current_index + 1} / {self.state.slide_count}")
        self.counter.adjustSize()
        self.counter.move(
            self.width() - self.counter.width() - self.margin,
            self.height() - self.counter.height() - self.margin,
        )
        self.counter.show()
        self.counter.raise_()

    def scroll_offset(self):
        return self.scroll.verticalScrollBar().value()

    def scroll_by(self, dy):
        bar = self.scroll.verticalScrollBar()
        bar.setValue(bar.value() + int(round(dy)))


class PresentationController:
    """
    Owns the fullscreen view and reacts to Play, Stop and ScrollBy.

    attach() subscribes, detach() disposes those subscriptions once.
    Bus delivery happens on the Qt thread, so handlers touch widgets directly.
    """

    def __init__(self, state, bus):
        self.state = state
        self.bus = bus
        self.view = None
        self._subs = []

    def attach(self):
        if self._subs:
            return
        self._subs = [
            self.bus.subscribe(Play, self._on_play),
            self.bus.subscribe(Stop, self._on_stop),
            self.bus.subscribe(ScrollBy, self._on_scroll),
        ]

    def detach(self):
        subs, self._subs = self._subs, []
        for sub in subs:
            sub.dispose()

    def _on_play(self, event):
        if not self.state.is_presenting:
            self.open()

    def _on_stop(self, event):
        if self.state.is_presenting:
            self.close()

    def _on_scroll(self, event):
        if self.view is not None:
            self.view.scroll_by(event.dy)

    def open(self):
        if self.view is not None:
            return
        self.view = PresentationView(self.state, on_exit=self.close)
        self.view.showFullScreen()
        self.state.set_presenting(True)
        log.info("Presentation started")

    def close(self):
        view, self.view = self.view, None
        if view is not None:
            view.dismiss()
            view.deleteLater()
        self.state.set_presenting(False)
        log.info("Presentation stopped")
