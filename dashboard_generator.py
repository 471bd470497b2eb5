"""
In-memory map surface and a self-contained HTML dashboard built from it.

``SnapshotMapSurface`` records everything the engine asks of a map widget.
``generate_dashboard`` turns that record plus the current directory into a
single file with a shelter list and a Leaflet map, all CSS/JS inline.
"""

import itertools
import json
import logging
import os
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from config import AppConfig
from markers import MapSurface
from models import GeoPoint
from render import list_view, popover_model

logger = logging.getLogger(__name__)


# ── Snapshot Map Surface ────────────────────────────────────────────────────

class SnapshotMapSurface(MapSurface):
    """A map surface that only remembers what it was told to show."""

    def __init__(self):
        self.container: Any = None
        self.center: Optional[GeoPoint] = None
        self.zoom: Optional[int] = None
        self.bounds: list[GeoPoint] = []
        self.markers: dict[int, GeoPoint] = {}
        self.kinds: dict[int, str] = {}
        self.popovers: dict[int, Any] = {}
        self.open_popovers: set[int] = set()
        self.click_handlers: dict[int, Callable] = {}
        self._ids = itertools.count(1)

    def create_map(self, container, center, zoom):
        self.container = container
        self.center = center
        self.zoom = zoom

    def set_center(self, point):
        self.center = point

    def set_zoom(self, level):
        self.zoom = level

    def fit_bounds(self, points):
        self.bounds = list(points)

    def create_marker(self, point, kind="shelter"):
        handle = next(self._ids)
        self.markers[handle] = point
        self.kinds[handle] = kind
        return handle

    def destroy_marker(self, handle):
        self.markers.pop(handle, None)
        self.kinds.pop(handle, None)
        self.popovers.pop(handle, None)
        self.click_handlers.pop(handle, None)
        self.open_popovers.discard(handle)

    def marker_position(self, handle):
        return self.markers[handle]

    def create_popover(self, handle, content):
        self.popovers[handle] = content

    def open_popover(self, handle):
        if handle in self.markers:
            self.open_popovers.add(handle)

    def close_popover(self, handle):
        self.open_popovers.discard(handle)

    def on_marker_click(self, handle, callback):
        self.click_handlers[handle] = callback

    def click(self, handle) -> None:
        """Simulate the user clicking a marker."""
        self.click_handlers[handle](handle)

    def shelter_markers(self) -> dict[int, GeoPoint]:
        return {h: p for h, p in self.markers.items() if self.kinds.get(h) == "shelter"}

    def open_shelter_popovers(self) -> set[int]:
        return {h for h in self.open_popovers if self.kinds.get(h) == "shelter"}


# ── Dashboard ───────────────────────────────────────────────────────────────

def generate_dashboard(engine, config: AppConfig) -> str:
    """Write shelters.json and the HTML dashboard. Returns the HTML path."""
    os.makedirs(config.output_dir, exist_ok=True)

    view = list_view(engine.directory)
    markers = []
    for index, record in enumerate(engine.directory):
        handle = engine.markers.marker_for(index)
        if handle is None:
            continue
        popover = popover_model(index, record)
        markers.append({
            "index": index,
            "lat": record.location.latitude,
            "lng": record.location.longitude,
            "popover": {
                "name": popover.name,
                "distance": popover.distance,
                "capacity": popover.capacity,
                "map_url": popover.map_url(engine.user_location),
            },
        })

    user = engine.user_location
    state = {
        "items": [asdict(item) for item in view.items],
        "count_label": view.count_label,
        "empty_message": view.empty_message,
        "markers": markers,
        "open_index": engine.markers.open_index,
        "user": {"lat": user.latitude, "lng": user.longitude} if user else None,
        "center": _point(engine.surface.center if isinstance(engine.surface, SnapshotMapSurface) else None)
                  or _point(config.map.default_center),
        "zoom": leaflet_zoom(config.map.default_zoom),
        "focus_zoom": leaflet_zoom(config.map.focus_zoom),
    }

    json_path = os.path.join(config.output_dir, config.data_filename)
    with open(json_path, "w") as f:
        json.dump({
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "user_location": state["user"],
            "total_shelters": len(engine.directory),
            "shelters": [r.to_json() for r in engine.directory],
        }, f, indent=2, ensure_ascii=False)

    now = datetime.now().strftime("%B %d, %Y at %I:%M %p")
    # Keep the blob from closing the <script> element early
    data_blob = json.dumps(state, ensure_ascii=False).replace("</", "<\\/")

    html = _build_html(data_blob, now)

    html_path = os.path.join(config.output_dir, config.dashboard_filename)
    with open(html_path, "w", encoding="utf-8") as f:
        f.write(html)

    logger.info(f"Dashboard: {len(view.items)} shelters, {len(markers)} markers")
    return html_path


def leaflet_zoom(level: int) -> int:
    """Kakao map level to Leaflet zoom. Kakao levels grow outward, Leaflet's inward."""
    return max(1, min(19, 20 - level))


def _point(p: Optional[GeoPoint]) -> Optional[dict]:
    if p is None:
        return None
    return {"lat": p.latitude, "lng": p.longitude}


def _build_html(data_json: str, generated_at: str) -> str:
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>Shelter Finder</title>
<link rel="preconnect" href="https://fonts.googleapis.com">
<link href="https://fonts.googleapis.com/css2?family=DM+Sans:wght@300;500;700&family=DM+Mono:wght@400;500&display=swap" rel="stylesheet">
<link rel="stylesheet" href="https://unpkg.com/leaflet@1.9.4/dist/leaflet.css">
<script src="https://unpkg.com/leaflet@1.9.4/dist/leaflet.js"></script>
<style>
  :root {{
    --bg:       #0c0c0f;
    --surface:  #16161a;
    --surface2: #1e1e24;
    --border:   #2a2a32;
    --text:     #e8e6e3;
    --text2:    #9a9a9f;
    --accent:   #42a5f5;
    --user:     #ef5350;
    --radius:   12px;
  }}

  * {{ margin:0; padding:0; box-sizing:border-box; }}

  body {{
    font-family: 'DM Sans', system-ui, sans-serif;
    background: var(--bg);
    color: var(--text);
    height: 100vh;
    display: flex;
    flex-direction: column;
  }}

  .header {{
    padding: 1.25rem 2rem;
    border-bottom: 1px solid var(--border);
    display: flex;
    justify-content: space-between;
    align-items: flex-end;
  }}
  .header h1 {{ font-size: 1.4rem; letter-spacing: -0.03em; }}
  .header .meta {{
    font-family: 'DM Mono', monospace;
    font-size: 0.78rem;
    color: var(--text2);
    text-align: right;
  }}

  .layout {{ flex: 1; display: flex; min-height: 0; }}
  .list {{
    width: 380px;
    overflow-y: auto;
    border-right: 1px solid var(--border);
    padding: 1rem;
    display: flex;
    flex-direction: column;
    gap: 0.6rem;
  }}
  #map {{ flex: 1; }}

  .item {{
    background: var(--surface);
    border: 1px solid var(--border);
    border-radius: var(--radius);
    padding: 0.9rem 1rem;
    cursor: pointer;
    transition: border-color 0.2s;
  }}
  .item:hover, .item.active {{ border-color: var(--accent); }}
  .item .name {{ font-weight: 700; }}
  .item .distance {{ font-family: 'DM Mono', monospace; color: var(--accent); font-size: 0.8rem; }}
  .item .address, .item .info {{ font-size: 0.8rem; color: var(--text2); }}
  .empty {{ color: var(--text2); text-align: center; padding: 2rem 0; }}

  .popover {{ font-size: 12px; min-width: 180px; }}
  .popover a {{ color: #1565c0; }}
</style>
</head>
<body>
<div class="header">
  <h1>Shelter Finder</h1>
  <div class="meta"><span id="count"></span><br>Generated {generated_at}</div>
</div>
<div class="layout">
  <div class="list" id="list"></div>
  <div id="map"></div>
</div>
<script>
const STATE = {data_json};

const map = L.map('map').setView([STATE.center.lat, STATE.center.lng], STATE.zoom);
L.tileLayer('https://{{s}}.basemaps.cartocdn.com/dark_all/{{z}}/{{x}}/{{y}}{{r}}.png', {{
  maxZoom: 19,
}}).addTo(map);

// Values below are escaped server-side
const markers = {{}};
STATE.markers.forEach(m => {{
  const p = m.popover || {{}};
  const html = `<div class="popover"><strong>${{p.name || ''}}</strong><br>` +
    (p.distance ? `Distance: ${{p.distance}}<br>` : '') +
    `Capacity: ${{p.capacity || ''}}` +
    (p.map_url ? `<br><a href="${{p.map_url}}" target="_blank">Open map</a>` : '') + `</div>`;
  markers[m.index] = L.marker([m.lat, m.lng]).addTo(map).bindPopup(html);
}});

if (STATE.user) {{
  L.circleMarker([STATE.user.lat, STATE.user.lng], {{
    radius: 8, fillColor: '#ef5350', color: '#fff', weight: 2, fillOpacity: 0.9,
  }}).addTo(map).bindTooltip('Current location');
}}

const points = STATE.markers.map(m => [m.lat, m.lng]);
if (points.length) {{
  if (STATE.user) points.push([STATE.user.lat, STATE.user.lng]);
  map.fitBounds(points, {{ padding: [30, 30] }});
}}

function focusShelter(index) {{
  const marker = markers[index];
  if (!marker) return;
  document.querySelectorAll('.item').forEach(el => el.classList.toggle('active', +el.dataset.index === index));
  map.setView(marker.getLatLng(), STATE.focus_zoom);
  marker.openPopup();  // Leaflet closes any other open popup
}}

document.getElementById('count').textContent = STATE.count_label;
const list = document.getElementById('list');
if (!STATE.items.length) {{
  list.innerHTML = `<div class="empty">${{STATE.empty_message}}</div>`;
}} else {{
  list.innerHTML = STATE.items.map(s => `
    <div class="item" data-index="${{s.index}}" onclick="focusShelter(${{s.index}})">
      <div class="name">${{s.name}}</div>
      ${{s.distance ? `<div class="distance">${{s.distance}}</div>` : ''}}
      <div class="address">${{s.address}}</div>
      <div class="info">Capacity: ${{s.capacity}} &middot; Contact: ${{s.contact}}</div>
    </div>`).join('');
}}

if (STATE.open_index !== null) focusShelter(STATE.open_index);
</script>
</body>
</html>
"""
