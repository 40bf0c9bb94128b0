"""SVG rendering for generated mazes.

Drawings target a 35" x 23" page at 100 units per inch with 1" margins on all
sides, which leaves a 33" x 21" printable area for the maze itself.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from maze import MazeCell, MazeGrid
from topology import Direction, MazeType, Position

PAGE_WIDTH = 3500
PAGE_HEIGHT = 2300
MARGIN = 100
PRINTABLE_WIDTH = PAGE_WIDTH - 2 * MARGIN
PRINTABLE_HEIGHT = PAGE_HEIGHT - 2 * MARGIN

OUTER_WALL_THICKNESS = 8
INNER_WALL_THICKNESS = 2

DEFAULT_INNER_WALL_COLOR = "#000000"
DEFAULT_OUTER_WALL_COLOR = "#000000"
DEFAULT_PATH_COLOR = "#4CAF50"
DEFAULT_DEAD_END_COLOR = "#9E9E9E"
START_COLOR = "#2196F3"
END_COLOR = "#F44336"

DELTA_NOTICE = "<!-- Delta maze rendering coming soon -->"

# Hex vertex index pairs for each edge; vertex 0 is the top, then clockwise.
_HEX_EDGES = {
    Direction.NE: (0, 1),
    Direction.E: (1, 2),
    Direction.SE: (2, 3),
    Direction.SW: (3, 4),
    Direction.W: (4, 5),
    Direction.NW: (5, 0),
}
# Shared walls are drawn once, by the cell to their west.
_HEX_OWNED_EDGES = (Direction.NE, Direction.E, Direction.SE)


@dataclass(frozen=True)
class RenderOptions:
    inner_wall_color: str = DEFAULT_INNER_WALL_COLOR
    outer_wall_color: str = DEFAULT_OUTER_WALL_COLOR
    path_color: str = DEFAULT_PATH_COLOR
    dead_end_color: str = DEFAULT_DEAD_END_COLOR
    show_solution: bool = False
    show_dead_ends: bool = False

    @classmethod
    def from_config(cls, config: dict[str, Any] | None) -> "RenderOptions":
        """Build options from a stored configuration mapping, ignoring unknown keys."""
        config = config or {}
        return cls(
            inner_wall_color=config.get("inner_wall_color") or DEFAULT_INNER_WALL_COLOR,
            outer_wall_color=config.get("outer_wall_color") or DEFAULT_OUTER_WALL_COLOR,
            path_color=config.get("path_color") or DEFAULT_PATH_COLOR,
            dead_end_color=config.get("dead_end_color") or DEFAULT_DEAD_END_COLOR,
            show_solution=bool(config.get("show_solution", False)),
            show_dead_ends=bool(config.get("show_dead_ends", False)),
        )


def _dead_end_opacity(depth: int, max_depth: int) -> float:
    # Deeper = more opaque (worse wrong turns)
    return 0.1 + 0.5 * depth / max_depth


class MazeSvgRenderer:
    def __init__(self, grid: MazeGrid, options: RenderOptions | None = None):
        self.grid = grid
        self.options = options or RenderOptions()

    def render(self) -> str:
        renderers = {
            MazeType.ORTHOGONAL: self._render_orthogonal,
            MazeType.DELTA: self._render_delta,
            MazeType.SIGMA: self._render_sigma,
            MazeType.THETA: self._render_theta,
        }
        return renderers[self.grid.maze_type]()

    # Shared pieces

    def _open_document(self) -> list[str]:
        return [
            f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {PAGE_WIDTH} {PAGE_HEIGHT}"'
            f' width="{PAGE_WIDTH}" height="{PAGE_HEIGHT}">',
            f'  <rect width="{PAGE_WIDTH}" height="{PAGE_HEIGHT}" fill="white"/>',
        ]

    def _max_depth(self) -> int:
        return max(1, self.grid.max_dead_end_depth())

    def _shaded_cells(self) -> list[MazeCell]:
        return [c for c in self.grid.cells() if c.is_dead_end and c.dead_end_depth > 0]

    def _solution_segments(self) -> list[tuple[Position, Position]]:
        path = self.grid.solution_path or []
        return list(zip(path, path[1:]))

    # Square cells

    def _render_orthogonal(self) -> str:
        grid = self.grid
        opts = self.options
        cell_size = min(PRINTABLE_WIDTH // grid.width, PRINTABLE_HEIGHT // grid.height)
        maze_width = cell_size * grid.width
        maze_height = cell_size * grid.height
        offset_x = MARGIN + (PRINTABLE_WIDTH - maze_width) // 2
        offset_y = MARGIN + (PRINTABLE_HEIGHT - maze_height) // 2

        def center(pos: Position) -> tuple[int, int]:
            return offset_x + pos.x * cell_size + cell_size // 2, offset_y + pos.y * cell_size + cell_size // 2

        lines = self._open_document()

        if opts.show_dead_ends:
            max_depth = self._max_depth()
            lines.append('  <g class="dead-end-depth">')
            for c in self._shaded_cells():
                lines.append(
                    f'    <rect x="{offset_x + c.x * cell_size}" y="{offset_y + c.y * cell_size}"'
                    f' width="{cell_size}" height="{cell_size}" fill="{opts.dead_end_color}"'
                    f' opacity="{_dead_end_opacity(c.dead_end_depth, max_depth):.2f}"/>'
                )
            lines.append("  </g>")

        if opts.show_solution and grid.solution_path is not None:
            path_width = max(cell_size // 4, 6)
            lines.append('  <g class="solution-path">')
            for a, b in self._solution_segments():
                (x1, y1), (x2, y2) = center(a), center(b)
                lines.append(
                    f'    <line x1="{x1}" y1="{y1}" x2="{x2}" y2="{y2}" stroke="{opts.path_color}"'
                    f' stroke-width="{path_width}" stroke-linecap="round" opacity="0.6"/>'
                )
            lines.append("  </g>")

        # Boundary walls are covered by the outer border.
        lines.append('  <g class="inner-walls">')
        for c in grid.cells():
            cell_x = offset_x + c.x * cell_size
            cell_y = offset_y + c.y * cell_size
            if c.has_wall(Direction.E) and c.x < grid.width - 1:
                lines.append(
                    self._square_wall(cell_x + cell_size, cell_y, cell_x + cell_size, cell_y + cell_size)
                )
            if c.has_wall(Direction.S) and c.y < grid.height - 1:
                lines.append(
                    self._square_wall(cell_x, cell_y + cell_size, cell_x + cell_size, cell_y + cell_size)
                )
        lines.append("  </g>")

        lines.append('  <g class="outer-border">')
        lines.append(
            f'    <rect x="{offset_x}" y="{offset_y}" width="{maze_width}" height="{maze_height}"'
            f' fill="none" stroke="{opts.outer_wall_color}" stroke-width="{OUTER_WALL_THICKNESS}"/>'
        )
        lines.append("  </g>")

        marker_radius = max(cell_size // 5, 8)
        sx, sy = center(grid.start)
        ex, ey = center(grid.end)
        lines.append(f'  <circle cx="{sx}" cy="{sy}" r="{marker_radius}" fill="{START_COLOR}" class="start-marker"/>')
        lines.append(f'  <circle cx="{ex}" cy="{ey}" r="{marker_radius}" fill="{END_COLOR}" class="end-marker"/>')
        lines.append("</svg>")
        return "\n".join(lines)

    def _square_wall(self, x1: int, y1: int, x2: int, y2: int) -> str:
        return (
            f'    <line x1="{x1}" y1="{y1}" x2="{x2}" y2="{y2}" stroke="{self.options.inner_wall_color}"'
            f' stroke-width="{INNER_WALL_THICKNESS}" stroke-linecap="square"/>'
        )

    # Triangular cells

    def _render_delta(self) -> str:
        # TODO: draw triangular cells once delta mazes get their own carving rules.
        return DELTA_NOTICE + "\n" + self._render_orthogonal()

    # Hexagonal cells

    def _render_sigma(self) -> str:
        grid = self.grid
        opts = self.options
        geometry = HexGeometry.fit(grid.width, grid.height)

        lines = self._open_document()

        if opts.show_dead_ends:
            max_depth = self._max_depth()
            lines.append('  <g class="dead-end-depth">')
            for c in self._shaded_cells():
                lines.append(
                    f'    <path d="{geometry.path(c.pos)}" fill="{opts.dead_end_color}"'
                    f' opacity="{_dead_end_opacity(c.dead_end_depth, max_depth):.2f}"/>'
                )
            lines.append("  </g>")

        if opts.show_solution and grid.solution_path is not None:
            path_width = max(int(geometry.size / 3), 6)
            lines.append('  <g class="solution-path">')
            for a, b in self._solution_segments():
                (x1, y1), (x2, y2) = geometry.center(a), geometry.center(b)
                lines.append(
                    f'    <line x1="{x1:.1f}" y1="{y1:.1f}" x2="{x2:.1f}" y2="{y2:.1f}" stroke="{opts.path_color}"'
                    f' stroke-width="{path_width}" stroke-linecap="round" opacity="0.6"/>'
                )
            lines.append("  </g>")

        lines.append('  <g class="inner-walls">')
        for c in grid.cells():
            vertices = geometry.vertices(c.pos)
            for direction in _HEX_OWNED_EDGES:
                if not c.has_wall(direction):
                    continue
                if grid.topology.neighbor(c.pos, direction, grid.width, grid.height) is not None:
                    lines.append(self._hex_edge(vertices, direction, opts.inner_wall_color, INNER_WALL_THICKNESS))
        lines.append("  </g>")

        lines.append('  <g class="outer-border">')
        for c in grid.cells():
            vertices = None
            for direction in grid.topology.directions:
                if grid.topology.neighbor(c.pos, direction, grid.width, grid.height) is not None:
                    continue
                vertices = vertices or geometry.vertices(c.pos)
                lines.append(self._hex_edge(vertices, direction, opts.outer_wall_color, OUTER_WALL_THICKNESS))
        lines.append("  </g>")

        marker_radius = max(int(geometry.size / 3), 8)
        sx, sy = geometry.center(grid.start)
        ex, ey = geometry.center(grid.end)
        lines.append(
            f'  <circle cx="{sx:.1f}" cy="{sy:.1f}" r="{marker_radius}" fill="{START_COLOR}" class="start-marker"/>'
        )
        lines.append(
            f'  <circle cx="{ex:.1f}" cy="{ey:.1f}" r="{marker_radius}" fill="{END_COLOR}" class="end-marker"/>'
        )
        lines.append("</svg>")
        return "\n".join(lines)

    @staticmethod
    def _hex_edge(vertices: list[tuple[float, float]], direction: Direction, color: str, thickness: int) -> str:
        i, j = _HEX_EDGES[direction]
        (x1, y1), (x2, y2) = vertices[i], vertices[j]
        return (
            f'    <line x1="{x1:.1f}" y1="{y1:.1f}" x2="{x2:.1f}" y2="{y2:.1f}"'
            f' stroke="{color}" stroke-width="{thickness}"/>'
        )

    # Concentric rings

    def _render_theta(self) -> str:
        # Approximation: rings and spokes only, the carved grid is not drawn cell by cell.
        grid = self.grid
        color = self.options.inner_wall_color
        rings = max(1, min(grid.width, grid.height) // 2)
        max_radius = min(PRINTABLE_WIDTH, PRINTABLE_HEIGHT) // 2
        ring_spacing = max_radius // rings
        cx = PAGE_WIDTH // 2
        cy = PAGE_HEIGHT // 2

        lines = self._open_document()
        lines.append('  <g class="walls">')
        for ring in range(1, rings + 1):
            lines.append(
                f'    <circle cx="{cx}" cy="{cy}" r="{ring * ring_spacing}" fill="none" stroke="{color}"'
                f' stroke-width="{INNER_WALL_THICKNESS}"/>'
            )
        segments = 8 + rings * 2
        for i in range(segments):
            angle = 2 * math.pi * i / segments
            x2 = cx + int(max_radius * math.cos(angle))
            y2 = cy + int(max_radius * math.sin(angle))
            lines.append(
                f'    <line x1="{cx}" y1="{cy}" x2="{x2}" y2="{y2}" stroke="{color}"'
                f' stroke-width="{INNER_WALL_THICKNESS}"/>'
            )
        lines.append("  </g>")

        marker_radius = max(ring_spacing // 4, 12)
        lines.append(f'  <circle cx="{cx}" cy="{cy}" r="{marker_radius}" fill="{START_COLOR}" class="start-marker"/>')
        lines.append(
            f'  <circle cx="{cx + max_radius - ring_spacing // 2}" cy="{cy}" r="{marker_radius}"'
            f' fill="{END_COLOR}" class="end-marker"/>'
        )
        lines.append("</svg>")
        return "\n".join(lines)


@dataclass(frozen=True)
class HexGeometry:
    """Pointy-top hex layout for an offset grid whose odd rows shift right."""

    size: float
    offset_x: float
    offset_y: float

    @property
    def hex_width(self) -> float:
        return self.size * math.sqrt(3)

    @property
    def row_spacing(self) -> float:
        return self.size * 1.5

    @classmethod
    def fit(cls, width: int, height: int) -> "HexGeometry":
        # Total width = width * hex_width + hex_width / 2 (odd row shift)
        # Total height = (height - 1) * 3/4 * hex_height + hex_height
        size = min(
            PRINTABLE_WIDTH / (width * math.sqrt(3) + math.sqrt(3) / 2),
            PRINTABLE_HEIGHT / ((height - 1) * 1.5 + 2),
        )
        hex_width = size * math.sqrt(3)
        maze_width = width * hex_width + hex_width / 2
        maze_height = (height - 1) * size * 1.5 + size * 2
        return cls(
            size=size,
            offset_x=MARGIN + (PRINTABLE_WIDTH - maze_width) / 2,
            offset_y=MARGIN + (PRINTABLE_HEIGHT - maze_height) / 2,
        )

    def center(self, pos: Position) -> tuple[float, float]:
        w = self.hex_width
        shift = w / 2 if pos.y % 2 == 1 else 0.0
        return self.offset_x + pos.x * w + w / 2 + shift, self.offset_y + pos.y * self.row_spacing + self.size

    def vertices(self, pos: Position) -> list[tuple[float, float]]:
        cx, cy = self.center(pos)
        points = []
        # Start from top vertex and go clockwise
        for i in range(6):
            angle = math.pi / 2 - math.pi / 3 * i
            points.append((cx + self.size * math.cos(angle), cy - self.size * math.sin(angle)))
        return points

    def path(self, pos: Position) -> str:
        parts = [f"{x:.1f},{y:.1f}" for x, y in self.vertices(pos)]
        return "M" + " L".join(parts) + " Z"
