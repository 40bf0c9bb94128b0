from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import dataclass, field
from typing import Iterator

from topology import SQUARE, Direction, MazeType, Position, Topology, topology_for

logger = logging.getLogger(__name__)

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 5

# Shortcut removals per difficulty, as a divisor of the total cell count.
# Difficulty 5 is left as a perfect maze.
_SHORTCUT_DIVISORS = {1: 4, 2: 8, 3: 20, 4: 50}


class MazeIntegrityError(RuntimeError):
    """The carved passages do not connect the start cell to the end cell."""


@dataclass
class MazeCell:
    pos: Position
    walls: set[Direction] = field(default_factory=set)
    visited: bool = False
    on_solution_path: bool = False
    parent: Position | None = None
    is_dead_end: bool = False
    dead_end_depth: int = 0

    @property
    def x(self) -> int:
        return self.pos.x

    @property
    def y(self) -> int:
        return self.pos.y

    def has_wall(self, direction: Direction) -> bool:
        return direction in self.walls

    def remove_wall_to(self, other: "MazeCell", topology: Topology = SQUARE) -> None:
        """Open the passage between this cell and an adjacent cell, on both sides."""
        direction = topology.direction_to(self.pos, other.pos)
        self.walls.discard(direction)
        other.walls.discard(direction.opposite)


class MazeGrid:
    """A maze of ``width x height`` cells carved with a seeded recursive backtracker.

    ``generate()`` must be called exactly once; afterwards the grid is only read.
    """

    def __init__(
        self,
        width: int,
        height: int,
        maze_type: MazeType | str = MazeType.ORTHOGONAL,
        difficulty: int = MAX_DIFFICULTY,
        seed: int | None = None,
    ):
        if width <= 0 or height <= 0:
            raise ValueError(f"Maze dimensions must be positive: {width}x{height}")

        self.width = width
        self.height = height
        self.maze_type = MazeType.parse(maze_type)
        self.topology = topology_for(self.maze_type)
        self.difficulty = max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, int(difficulty)))
        self.seed = seed
        self._rng = random.Random(seed)
        self.start, self.end = self.topology.endpoints(width, height)
        self.solution_path: list[Position] | None = None
        self._generated = False

        self._cells: list[list[MazeCell]] = [
            [MazeCell(pos=Position(x, y), walls=set(self.topology.directions)) for x in range(width)]
            for y in range(height)
        ]

    # Queries

    @property
    def is_generated(self) -> bool:
        return self._generated

    def in_bounds(self, pos: Position) -> bool:
        return 0 <= pos.x < self.width and 0 <= pos.y < self.height

    def cell(self, x: int, y: int) -> MazeCell:
        return self.cell_at(Position(x, y))

    def cell_at(self, pos: Position) -> MazeCell:
        if not self.in_bounds(pos):
            raise ValueError(f"Out of bounds position: {pos}")
        return self._cells[pos.y][pos.x]

    def cells(self) -> Iterator[MazeCell]:
        for row in self._cells:
            yield from row

    def neighbors(self, pos: Position) -> list[tuple[Direction, Position]]:
        return self.topology.neighbors(pos, self.width, self.height)

    def accessible_neighbors(self, pos: Position) -> list[Position]:
        here = self.cell_at(pos)
        return [npos for direction, npos in self.neighbors(pos) if not here.has_wall(direction)]

    def blocked_neighbors(self, pos: Position) -> list[Position]:
        here = self.cell_at(pos)
        return [npos for direction, npos in self.neighbors(pos) if here.has_wall(direction)]

    def open_passage_count(self) -> int:
        total = sum(len(self.accessible_neighbors(c.pos)) for c in self.cells())
        return total // 2

    def max_dead_end_depth(self) -> int:
        return max((c.dead_end_depth for c in self.cells()), default=0)

    # Mutation

    def remove_wall_between(self, a: Position, b: Position) -> None:
        self.cell_at(a).remove_wall_to(self.cell_at(b), self.topology)

    def generate(self) -> None:
        if self._generated:
            raise RuntimeError("generate() has already been called on this maze")

        self._carve()
        self._apply_difficulty()
        self._solve()
        self._mark_dead_ends()
        self._generated = True
        logger.debug(
            f"Generated {self.maze_type.value} maze {self.width}x{self.height} "
            f"(difficulty={self.difficulty}, seed={self.seed}): "
            f"{self.open_passage_count()} passages, solution length {len(self.solution_path)}"
        )

    def _carve(self) -> None:
        # Iterative backtracker (avoids RecursionError on large grids)
        start = self.cell_at(self.start)
        start.visited = True
        stack: list[MazeCell] = [start]
        while stack:
            current = stack[-1]
            unvisited = [
                self.cell_at(npos) for _, npos in self.neighbors(current.pos) if not self.cell_at(npos).visited
            ]
            if not unvisited:
                stack.pop()
                continue
            nxt = unvisited[self._rng.randrange(len(unvisited))]
            current.remove_wall_to(nxt, self.topology)
            nxt.visited = True
            stack.append(nxt)

    def _apply_difficulty(self) -> None:
        divisor = _SHORTCUT_DIVISORS.get(self.difficulty)
        if divisor is None:
            return
        self._add_shortcuts((self.width * self.height) // divisor)

    def _add_shortcuts(self, count: int) -> None:
        for _ in range(count):
            pos = Position(self._rng.randrange(self.width), self._rng.randrange(self.height))
            blocked = self.blocked_neighbors(pos)
            if blocked:
                self.remove_wall_between(pos, blocked[self._rng.randrange(len(blocked))])

    def _reset_search(self) -> None:
        for c in self.cells():
            c.visited = False
            c.parent = None

    def _solve(self) -> None:
        self._reset_search()
        start = self.cell_at(self.start)
        start.visited = True
        q: deque[MazeCell] = deque([start])
        while q:
            current = q.popleft()
            if current.pos == self.end:
                self.solution_path = self._trace_back(current)
                return
            for npos in self.accessible_neighbors(current.pos):
                nxt = self.cell_at(npos)
                if nxt.visited:
                    continue
                nxt.visited = True
                nxt.parent = current.pos
                q.append(nxt)

        raise MazeIntegrityError(f"End cell {self.end} is not reachable from start cell {self.start}")

    def _trace_back(self, end: MazeCell) -> list[Position]:
        path: list[Position] = []
        cur: MazeCell | None = end
        while cur is not None:
            cur.on_solution_path = True
            path.append(cur.pos)
            cur = self.cell_at(cur.parent) if cur.parent is not None else None
        path.reverse()
        return path

    def _mark_dead_ends(self) -> None:
        for c in self.cells():
            c.is_dead_end = not c.on_solution_path
            c.visited = False

        q: deque[MazeCell] = deque()
        for c in self.cells():
            if c.on_solution_path:
                c.dead_end_depth = 0
                c.visited = True
                q.append(c)

        while q:
            current = q.popleft()
            for npos in self.accessible_neighbors(current.pos):
                nxt = self.cell_at(npos)
                if nxt.visited:
                    continue
                nxt.visited = True
                nxt.dead_end_depth = current.dead_end_depth + 1
                q.append(nxt)
