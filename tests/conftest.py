import importlib
import json
import xml.etree.ElementTree as ET
from collections import deque
from pathlib import Path
from typing import Any

import pytest

SVG_NS = "{http://www.w3.org/2000/svg}"


def import_required(module_name: str):
    """
    Import a project module with a clearer failure message than ModuleNotFoundError.
    """
    try:
        return importlib.import_module(module_name)
    except ModuleNotFoundError as e:
        pytest.fail(
            f"Required module '{module_name}.py' could not be imported. "
            f"Original error: {e}"
        )


@pytest.fixture
def maze_module():
    return import_required("maze")


@pytest.fixture
def topology_module():
    return import_required("topology")


@pytest.fixture
def render_module():
    return import_required("render")


@pytest.fixture
def db_module():
    return import_required("db")


@pytest.fixture
def main_module():
    return import_required("main")


@pytest.fixture(params=["json", "sqlite"])
def repo(request, tmp_path, db_module):
    """Both repository implementations, which share one interface."""
    if request.param == "json":
        r = db_module.JsonMazeRepository(tmp_path / "mazes.json")
    else:
        r = db_module.SqliteMazeRepository(tmp_path / "mazes.db")
    yield r
    if hasattr(r, "close"):
        r.close()


@pytest.fixture
def make_grid(maze_module):
    """Factory returning a generated grid."""

    def _make(width=5, height=5, maze_type="ORTHOGONAL", difficulty=5, seed=42):
        grid = maze_module.MazeGrid(width, height, maze_type, difficulty, seed)
        grid.generate()
        return grid

    return _make


def bfs_distances(grid, source) -> dict:
    """Independent BFS over open passages, using only public grid accessors."""
    dist = {source: 0}
    q = deque([source])
    while q:
        cur = q.popleft()
        for nxt in grid.accessible_neighbors(cur):
            if nxt in dist:
                continue
            dist[nxt] = dist[cur] + 1
            q.append(nxt)
    return dist


def svg_groups(svg: str) -> dict[str, Any]:
    """Map each top-level ``<g class=...>`` to its element."""
    root = ET.fromstring(svg)
    return {g.get("class"): g for g in root.findall(f"{SVG_NS}g")}


def svg_markers(svg: str, css_class: str) -> list:
    root = ET.fromstring(svg)
    return [c for c in root.iter(f"{SVG_NS}circle") if c.get("class") == css_class]


def read_json(path: Path) -> dict[str, Any]:
    return json.loads(path.read_text(encoding="utf-8"))
