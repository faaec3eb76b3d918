"""Dashboard HTML: tabla de instancias con botón de prune manual."""

from __future__ import annotations

from html import escape
from typing import Iterable
from urllib.parse import quote

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse

from ..dependencies import get_store
from ..snapshots import Snapshot, SnapshotStore

router = APIRouter(tags=["dashboard"])

_PAGE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8" />
  <title>Docker Stats Dashboard</title>
</head>
<body>
  <h1>Docker Stats Dashboard</h1>
  <table border="1" cellpadding="8" cellspacing="0">
    <thead>
      <tr>
        <th>Instance ID</th>
        <th>Images Size (GB)</th>
        <th>Last Update</th>
        <th>Prune Action</th>
        <th>Manual Prune</th>
      </tr>
    </thead>
    <tbody>
{rows}
    </tbody>
  </table>
</body>
</html>
"""

_ROW = """      <tr>
        <td>{instance_id}</td>
        <td>{size:.2f}</td>
        <td>{timestamp}</td>
        <td>{prune_action}</td>
        <td>
          <form method="POST" action="/api/prune?instance={instance_param}">
            <button type="submit">Prune</button>
          </form>
        </td>
      </tr>"""


def render_dashboard(snapshots: Iterable[Snapshot]) -> str:
    rows = [
        _ROW.format(
            instance_id=escape(s.instance_id),
            size=s.images_size_gb,
            timestamp=escape(s.timestamp),
            prune_action="true" if s.prune_action else "false",
            instance_param=escape(quote(s.instance_id, safe="")),
        )
        for s in sorted(snapshots, key=lambda s: s.instance_id)
    ]
    return _PAGE.format(rows="\n".join(rows))


@router.get("/", response_class=HTMLResponse)
def index(store: SnapshotStore = Depends(get_store)):
    return HTMLResponse(render_dashboard(store.list()))
