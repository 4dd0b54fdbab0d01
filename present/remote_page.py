from present.config import SCROLL_FLUSH_MS, SCROLL_SENSITIVITY, STATUS_POLL_MS

# Served for every path the router does not recognise, "/" included.
# The script half is the wire contract remotes rely on:
#   - GET status every STATUS_POLL_MS, no backoff, "Disconnected" on failure
#   - touch deltas coalesced into at most one /scroll per SCROLL_FLUSH_MS
_TEMPLATE = r"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1, maximum-scale=1, user-scalable=no">
<title>Present Remote</title>
<style>
  * { box-sizing: border-box; margin: 0; padding: 0; }
  html { touch-action: manipulation; }
  body {
    font-family: -apple-system, BlinkMacSystemFont, system-ui, sans-serif;
    background: #1a1a2e; color: #eee;
    display: flex; flex-direction: column; align-items: center;
    height: 100dvh; padding: 20px; gap: 16px;
    -webkit-user-select: none; user-select: none;
  }
  #status { font-size: 1.6rem; font-weight: 600; text-align: center; min-height: 2em; }
  #status.bad { color: #e94560; }
  #url { font-size: 0.85rem; opacity: 0.4; word-break: break-all; text-align: center; max-width: 90vw; }
  .row { display: flex; gap: 16px; width: 100%; max-width: 400px; }
  button {
    flex: 1; padding: 24px 10px; font-size: 1.5rem; font-weight: 600;
    border: none; border-radius: 14px; cursor: pointer;
    transition: transform 0.1s, opacity 0.1s;
    min-height: 80px;
  }
  button:active { transform: scale(0.95); opacity: 0.8; }
  .btn-prev { background: #16213e; color: #e94560; }
  .btn-next { background: #16213e; color: #53d8fb; }
  .btn-play { background: #0f3460; color: #53d8fb; }
  .btn-stop { background: #e94560; color: #fff; }
  .play-row { flex: 1; min-height: 0; }
  .play-row button { min-height: 0; height: auto; }
  .scroll-strip {
    width: 50px; flex-shrink: 0; background: #16213e; border-radius: 14px;
    display: flex; align-items: center; justify-content: center;
    color: #555; font-size: 1.2rem; touch-action: none; cursor: grab;
  }
  .scroll-strip:active { cursor: grabbing; background: #1a2740; }
  .btn-zoom { background: #16213e; color: #aaa; font-size: 1.3rem; min-height: 60px; }
</style>
</head>
<body>
  <div id="status">Connecting...</div>
  <div class="row">
    <button class="btn-prev" onclick="send('/prev')">&lsaquo; Prev</button>
    <button class="btn-next" onclick="send('/next')">Next &rsaquo;</button>
  </div>
  <div class="row play-row">
    <button id="playBtn" class="btn-play" onclick="togglePlay()">&#9654; Start</button>
    <div class="scroll-strip" id="scrollStrip">&#8597;</div>
  </div>
  <div class="row">
    <button class="btn-zoom" onclick="send('/zoomout')">A-</button>
    <button class="btn-zoom" onclick="send('/zoomin')">A+</button>
  </div>
  <div id="url"></div>
<script>
const SCROLL_SENSITIVITY = @SCROLL_SENSITIVITY@;
const SCROLL_FLUSH_MS = @SCROLL_FLUSH_MS@;
const STATUS_POLL_MS = @STATUS_POLL_MS@;

let presenting = false;

function send(path) {
  fetch(path).catch(() => {});
}
function togglePlay() {
  send(presenting ? '/stop' : '/play');
}

function poll() {
  const status = document.getElementById('status');
  fetch('/status').then(r => r.json()).then(d => {
    status.textContent = 'Slide ' + d.slide + ' / ' + d.total;
    status.classList.remove('bad');
    document.getElementById('url').textContent = d.url || '';
    presenting = d.presenting;
    const btn = document.getElementById('playBtn');
    if (presenting) {
      btn.textContent = '■ Stop';
      btn.className = 'btn-stop';
    } else {
      btn.textContent = '▶ Start';
      btn.className = 'btn-play';
    }
  }).catch(() => {
    status.textContent = 'Disconnected';
    status.classList.add('bad');
  });
}
setInterval(poll, STATUS_POLL_MS);
poll();

// IDLE -> touchstart -> ACTIVE -> touchmove* -> touchend -> IDLE
const strip = document.getElementById('scrollStrip');
let lastY = null;
let pendingDelta = 0;
let flushTimer = null;

function flushScroll() {
  flushTimer = null;
  if (pendingDelta !== 0) {
    const dy = Math.round(pendingDelta);
    pendingDelta = 0;
    fetch('/scroll?dy=' + dy).catch(() => {});
  }
}
function endGesture() {
  if (flushTimer !== null) {
    clearTimeout(flushTimer);
    flushTimer = null;
  }
  flushScroll();
  lastY = null;
}
strip.addEventListener('touchstart', e => {
  e.preventDefault();
  lastY = e.touches[0].clientY;
  pendingDelta = 0;
}, {passive: false});
strip.addEventListener('touchmove', e => {
  e.preventDefault();
  if (lastY === null) return;
  const y = e.touches[0].clientY;
  pendingDelta += (y - lastY) * SCROLL_SENSITIVITY;
  lastY = y;
  if (flushTimer === null) {
    flushTimer = setTimeout(flushScroll, SCROLL_FLUSH_MS);
  }
}, {passive: false});
strip.addEventListener('touchend', endGesture);
strip.addEventListener('touchcancel', endGesture);
</script>
</body>
</html>
"""

REMOTE_HTML = (
    _TEMPLATE
    .replace("@SCROLL_SENSITIVITY@", str(SCROLL_SENSITIVITY))
    .replace("@SCROLL_FLUSH_MS@", str(SCROLL_FLUSH_MS))
    .replace("@STATUS_POLL_MS@", str(STATUS_POLL_MS))
)
