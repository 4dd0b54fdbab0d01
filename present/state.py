import json
import logging
import os
import time
from dataclasses import dataclass, field
from typing import List, Optional
from uuid import uuid4

from PyQt6.QtCore import QObject, pyqtSignal

from present.config import ZOOM_DEFAULT, ZOOM_MAX, ZOOM_MIN, ZOOM_STEP

log = logging.getLogger(__name__)

DEFAULT_SLIDE_URL = "https://example.com"


@dataclass
class Slide:
    url: str = DEFAULT_SLIDE_URL
    id: str = field(default_factory=lambda: uuid4().hex)


class PresentationState(QObject):
    """
    Slide list plus the cursor, zoom and presenting flag.

    Owned by the Qt main thread: the remote server reaches it only through
    SerialContext, so there is no locking here. Slide-list changes are written
    to the JSON state file when one is configured.
    """

    changed = pyqtSignal()

    def __init__(self, state_path=None, parent=None):
        super().__init__(parent)
        self.state_path = os.path.expanduser(state_path) if state_path else None
        self.slides: List[Slide] = []
        self.current_index = 0
        self.is_presenting = False
        self.zoom_level = ZOOM_DEFAULT

    # --- read surface -------------------------------------------------
    @property
    def slide_count(self):
        return len(self.slides)

    @property
    def current_slide(self) -> Optional[Slide]:
        if not self.slides or not (0 <= self.current_index < len(self.slides)):
            return None
        return self.slides[self.current_index]

    @property
    def current_url(self):
        slide = self.current_slide
        return slide.url if slide else ""

    # --- navigation ---------------------------------------------------
    def go_to_next(self):
        if not self.slides:
            return
        self.current_index = (self.current_index + 1) % len(self.slides)
        self.changed.emit()

    def go_to_previous(self):
        if not self.slides:
            return
        self.current_index = (self.current_index - 1) % len(self.slides)
        self.changed.emit()

    def set_current_index(self, index):
        if not self.slides:
            self.current_index = 0
        else:
            self.current_index = max(0, min(int(index), len(self.slides) - 1))
        self.changed.emit()

    # --- zoom ---------------------------------------------------------
    def zoom_in(self):
        self._set_zoom(self.zoom_level + ZOOM_STEP)

    def zoom_out(self):
        self._set_zoom(self.zoom_level - ZOOM_STEP)

    def zoom_reset(self):
        self._set_zoom(ZOOM_DEFAULT)

    def _set_zoom(self, value):
        self.zoom_level = max(ZOOM_MIN, min(ZOOM_MAX, round(value, 2)))
        self.changed.emit()

    def set_presenting(self, presenting):
        self.is_presenting = bool(presenting)
        self.changed.emit()

    # --- slide list ---------------------------------------------------
    def add_slide(self, url=DEFAULT_SLIDE_URL):
        slide = Slide(url=url)
        self.slides.append(slide)
        self.current_index = len(self.slides) - 1
        self._slides_changed()
        return slide

    def remove_slide(self, index):
        if not (0 <= index < len(self.slides)):
            return
        del self.slides[index]
        if not self.slides:
            self.current_index = 0
        else:
            self.current_index = min(index, len(self.slides) - 1)
        self._slides_changed()

    def update_slide(self, index, url):
        if not (0 <= index < len(self.slides)):
            return
        self.slides[index].url = url
        self._slides_changed()

    def move_slide(self, src, dst):
        if not (0 <= src < len(self.slides)):
            return
        slide = self.slides.pop(src)
        dst = max(0, min(dst, len(self.slides)))
        self.slides.insert(dst, slide)
        self._slides_changed()

    def replace_slides(self, urls):
        self.slides = [Slide(url=u) for u in urls]
        self.current_index = 0
        self._slides_changed()

    def _slides_changed(self):
        self.save_state()
        self.changed.emit()

    # --- persistence --------------------------------------------------
    def load_state(self):
        if not self.state_path:
            return False
        try:
            with open(self.state_path, "r", encoding="utf-8") as f:
                d = json.load(f)
        except FileNotFoundError:
            return False
        except Exception as exc:
            log.warning("Ignoring unreadable state file %s: %s", self.state_path, exc)
            return False
        if not isinstance(d, dict) or not isinstance(d.get("urls", []), list):
            log.warning("Ignoring state file %s: unexpected layout", self.state_path)
            return False

        urls = [u for u in d.get("urls", []) if isinstance(u, str) and u.strip()]
        if not urls:
            return False
        self.slides = [Slide(url=u) for u in urls]
        self.current_index = 0
        self.changed.emit()
        return True

    def save_state(self):
        if not self.state_path:
            return
        tmp = {
            "urls": [s.url for s in self.slides],
            "saved_at": int(time.time()),
        }
        try:
            with open(self.state_path, "w", encoding="utf-8") as f:
                json.dump(tmp, f, indent=2)
        except OSError as exc:
            log.warning("Could not save state to %s: %s", self.state_path, exc)

    def load_from_file(self, path):
        try:
            with open(os.path.expanduser(path), "r", encoding="utf-8") as f:
                contents = f.read()
        except (OSError, UnicodeDecodeError) as exc:
            log.warning("Could not read %s: %s", path, exc)
            return False
        urls = [line.strip() for line in contents.splitlines() if line.strip()]
        if not urls:
            return False
        self.replace_slides(urls)
        return True

    def save_to_file(self, path):
        contents = "\n".join(s.url for s in self.slides) + "\n"
        try:
            with open(os.path.expanduser(path), "w", encoding="utf-8") as f:
                f.write(contents)
            return True
        except OSError as exc:
            log.warning("Could not write %s: %s", path, exc)
            return False
