import json
from dataclasses import dataclass


@dataclass(frozen=True)
class PresentationSnapshot:
    slide_index: int
    total_slides: int
    is_presenting: bool
    current_url: str

    def to_status(self):
        return {
            "slide": self.slide_index + 1,
            "total": self.total_slides,
            "presenting": self.is_presenting,
            "url": self.current_url,
        }

    @classmethod
    def from_status(cls, d):
        return cls(
            slide_index=max(0, int(d.get("slide", 1)) - 1),
            total_slides=int(d.get("total", 0)),
            is_presenting=bool(d.get("presenting", False)),
            current_url=str(d.get("url") or ""),
        )


def build_snapshot(state):
    total = state.slide_count
    if total <= 0:
        return PresentationSnapshot(0, 0, bool(state.is_presenting), "")
    index = max(0, min(state.current_index, total - 1))
    return PresentationSnapshot(index, total, bool(state.is_presenting), state.current_url or "")


def status_body(snapshot):
    # compact separators keep the body byte-identical to what remotes expect
    return json.dumps(snapshot.to_status(), separators=(",", ":")).encode("utf-8")
