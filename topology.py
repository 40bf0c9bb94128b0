"""Cell shapes and adjacency rules for the supported maze tessellations.

Hex grids use offset coordinates with pointy-top hexagons where odd rows are
shifted right by half a cell:

- EVEN row cells: north/south diagonals lean LEFT (column -1 or same)
- ODD row cells: north/south diagonals lean RIGHT (column same or +1)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Position:
    x: int
    y: int


class MazeType(Enum):
    ORTHOGONAL = "ORTHOGONAL"  # square cells
    DELTA = "DELTA"  # triangular cells
    SIGMA = "SIGMA"  # hexagonal cells
    THETA = "THETA"  # concentric rings

    @classmethod
    def parse(cls, value: "MazeType | str") -> "MazeType":
        if isinstance(value, MazeType):
            return value
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown maze type: {value!r}") from None


class Direction(Enum):
    N = "N"
    S = "S"
    E = "E"
    W = "W"
    NE = "NE"
    NW = "NW"
    SE = "SE"
    SW = "SW"

    @property
    def opposite(self) -> "Direction":
        return _OPPOSITES[self]


_OPPOSITES = {
    Direction.N: Direction.S,
    Direction.S: Direction.N,
    Direction.E: Direction.W,
    Direction.W: Direction.E,
    Direction.NE: Direction.SW,
    Direction.SW: Direction.NE,
    Direction.NW: Direction.SE,
    Direction.SE: Direction.NW,
}


class Topology:
    """Adjacency strategy shared by carving, solving and rendering."""

    maze_type: MazeType
    directions: tuple[Direction, ...] = ()

    def offset(self, direction: Direction, y: int) -> tuple[int, int]:
        raise NotImplementedError

    def neighbor(self, pos: Position, direction: Direction, width: int, height: int) -> Position | None:
        dx, dy = self.offset(direction, pos.y)
        nx, ny = pos.x + dx, pos.y + dy
        if 0 <= nx < width and 0 <= ny < height:
            return Position(nx, ny)
        return None

    def neighbors(self, pos: Position, width: int, height: int) -> list[tuple[Direction, Position]]:
        found: list[tuple[Direction, Position]] = []
        for direction in self.directions:
            npos = self.neighbor(pos, direction, width, height)
            if npos is not None:
                found.append((direction, npos))
        return found

    def direction_to(self, a: Position, b: Position) -> Direction:
        delta = (b.x - a.x, b.y - a.y)
        for direction in self.directions:
            if self.offset(direction, a.y) == delta:
                return direction
        raise ValueError(f"Cells {a} and {b} are not adjacent in a {self.maze_type.value} maze")

    def endpoints(self, width: int, height: int) -> tuple[Position, Position]:
        return Position(0, 0), Position(width - 1, height - 1)


class SquareTopology(Topology):
    maze_type = MazeType.ORTHOGONAL
    directions = (Direction.W, Direction.E, Direction.N, Direction.S)

    _DELTAS = {
        Direction.N: (0, -1),
        Direction.S: (0, 1),
        Direction.E: (1, 0),
        Direction.W: (-1, 0),
    }

    def offset(self, direction: Direction, y: int) -> tuple[int, int]:
        try:
            return self._DELTAS[direction]
        except KeyError:
            raise ValueError(f"{direction.name} is not a square-grid direction") from None


class HexTopology(Topology):
    maze_type = MazeType.SIGMA
    directions = (Direction.E, Direction.W, Direction.NW, Direction.NE, Direction.SW, Direction.SE)

    # Deltas for EVEN rows (y % 2 == 0)
    _EVEN_DELTAS = {
        Direction.E: (1, 0),
        Direction.W: (-1, 0),
        Direction.NW: (-1, -1),
        Direction.NE: (0, -1),
        Direction.SW: (-1, 1),
        Direction.SE: (0, 1),
    }

    # Deltas for ODD rows (y % 2 == 1)
    _ODD_DELTAS = {
        Direction.E: (1, 0),
        Direction.W: (-1, 0),
        Direction.NW: (0, -1),
        Direction.NE: (1, -1),
        Direction.SW: (0, 1),
        Direction.SE: (1, 1),
    }

    def offset(self, direction: Direction, y: int) -> tuple[int, int]:
        deltas = self._EVEN_DELTAS if y % 2 == 0 else self._ODD_DELTAS
        try:
            return deltas[direction]
        except KeyError:
            raise ValueError(f"{direction.name} is not a hex-grid direction") from None


class TriangleTopology(SquareTopology):
    """Triangular mazes are carved on the square grid; only the drawing differs."""

    maze_type = MazeType.DELTA


class CircularTopology(SquareTopology):
    """Circular mazes are carved on the square grid from the center to the boundary."""

    maze_type = MazeType.THETA

    def endpoints(self, width: int, height: int) -> tuple[Position, Position]:
        return Position(width // 2, height // 2), Position(0, height // 2)


SQUARE = SquareTopology()

_TOPOLOGIES: dict[MazeType, Topology] = {
    MazeType.ORTHOGONAL: SQUARE,
    MazeType.DELTA: TriangleTopology(),
    MazeType.SIGMA: HexTopology(),
    MazeType.THETA: CircularTopology(),
}


def topology_for(maze_type: MazeType | str) -> Topology:
    return _TOPOLOGIES[MazeType.parse(maze_type)]
