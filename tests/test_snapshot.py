import json

from present.snapshot import PresentationSnapshot, build_snapshot, status_body
from present.state import PresentationState


def make_state(urls, index=0, presenting=False):
    s = PresentationState()
    s.replace_slides(urls)
    s.set_current_index(index)
    s.set_presenting(presenting)
    return s


def test_status_body_exact_bytes():
    s = make_state(["a", "b", "https://x.com", "d", "e"], index=2, presenting=True)
    body = status_body(build_snapshot(s))
    assert body == b'{"slide":3,"total":5,"presenting":true,"url":"https://x.com"}'


def test_empty_state_snapshot():
    snap = build_snapshot(PresentationState())
    assert snap == PresentationSnapshot(0, 0, False, "")
    assert json.loads(status_body(snap)) == {"slide": 1, "total": 0, "presenting": False, "url": ""}


def test_quotes_in_url_are_escaped():
    s = make_state(['https://x.com/?q="hi"\\'])
    body = status_body(build_snapshot(s))
    assert b'\\"hi\\"' in body
    assert json.loads(body)["url"] == 'https://x.com/?q="hi"\\'


def test_snapshot_is_fresh_per_call():
    s = make_state(["a", "b"])
    first = build_snapshot(s)
    s.go_to_next()
    second = build_snapshot(s)
    assert first.slide_index == 0
    assert second.slide_index == 1


def test_from_status_inverts_to_status():
    snap = PresentationSnapshot(4, 9, True, "https://y.example")
    assert PresentationSnapshot.from_status(snap.to_status()) == snap
