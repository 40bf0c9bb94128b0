from __future__ import annotations

import argparse
import logging
import sys
import time
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from db import open_repo
from maze import MAX_DIFFICULTY, MIN_DIFFICULTY, MazeGrid
from render import (
    DEFAULT_DEAD_END_COLOR,
    DEFAULT_INNER_WALL_COLOR,
    DEFAULT_OUTER_WALL_COLOR,
    DEFAULT_PATH_COLOR,
    MazeSvgRenderer,
    RenderOptions,
)
from topology import MazeType

logger = logging.getLogger(__name__)

MIN_SIZE = 1
MAX_SIZE = 20
DEFAULT_SIZE = 10
DEFAULT_DIFFICULTY = 3
DEFAULT_NAME = "My Maze"
PREVIEW_SEED = 12345

# Printable area aspect ratio (33" x 21")
ASPECT_RATIO = 33.0 / 21.0

# MazeInput fields that are display options rather than generation parameters.
_CONFIG_FIELDS = (
    "show_solution",
    "show_dead_ends",
    "inner_wall_color",
    "outer_wall_color",
    "path_color",
    "dead_end_color",
)


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def _now_millis() -> int:
    return int(time.time() * 1000)


def size_to_grid_dimensions(size: int) -> tuple[int, int]:
    """Map a size level (1-20) to grid dimensions.

    Size 1 is 15 cells wide, size 20 is 100 cells wide; the height keeps the
    printable area's aspect ratio.
    """
    size = _clamp(size, MIN_SIZE, MAX_SIZE)
    width = 15 + (size - 1) * (100 - 15) // 19
    height = round(width / ASPECT_RATIO)
    return width, height


@dataclass(frozen=True)
class MazeInput:
    """
    Request parameters for creating or updating a stored maze. ``None`` means "not provided".
    """

    name: str | None = None
    maze_type: MazeType | str | None = None
    size: int | None = None
    difficulty: int | None = None
    seed: int | None = None
    session_id: str | None = None
    show_solution: bool | None = None
    show_dead_ends: bool | None = None
    inner_wall_color: str | None = None
    outer_wall_color: str | None = None
    path_color: str | None = None
    dead_end_color: str | None = None

    def config_updates(self) -> dict[str, Any]:
        return {key: getattr(self, key) for key in _CONFIG_FIELDS if getattr(self, key) is not None}


class MazeGenerationService:
    def build_grid(
        self,
        maze_type: MazeType | str,
        width: int,
        height: int,
        difficulty: int,
        seed: int | None,
    ) -> MazeGrid:
        grid = MazeGrid(width, height, maze_type, difficulty, seed)
        grid.generate()
        return grid

    def generate_maze_svg(
        self,
        maze_type: MazeType | str,
        size: int,
        difficulty: int,
        seed: int | None,
        options: RenderOptions | None = None,
    ) -> str:
        width, height = size_to_grid_dimensions(size)
        grid = self.build_grid(maze_type, width, height, difficulty, seed)
        return MazeSvgRenderer(grid, options).render()

    def generate_preview(
        self,
        maze_type: MazeType | str,
        size: int,
        difficulty: int,
        show_solution: bool = False,
        show_dead_ends: bool = False,
    ) -> str:
        options = RenderOptions(show_solution=show_solution, show_dead_ends=show_dead_ends)
        return self.generate_maze_svg(maze_type, size, difficulty, PREVIEW_SEED, options)

    def generate_documents(
        self,
        maze_type: MazeType | str,
        width: int,
        height: int,
        difficulty: int,
        seed: int | None,
        options: RenderOptions | None = None,
    ) -> dict[str, str]:
        """Render a puzzle sheet and its answer key from the same generated grid."""
        options = options or RenderOptions()
        grid = self.build_grid(maze_type, width, height, difficulty, seed)
        puzzle = replace(options, show_solution=False, show_dead_ends=False)
        answer_key = replace(options, show_solution=True)
        return {
            "puzzle": MazeSvgRenderer(grid, puzzle).render(),
            "answer_key": MazeSvgRenderer(grid, answer_key).render(),
        }

    def generate_and_update(self, record: dict[str, Any]) -> dict[str, Any]:
        """Regenerate a stored maze's SVG and solution path from its parameters."""
        width, height = size_to_grid_dimensions(record["size"])
        grid = self.build_grid(record["maze_type"], width, height, record["difficulty"], record.get("seed"))
        options = RenderOptions.from_config(record.get("configuration"))
        record["generated_svg"] = MazeSvgRenderer(grid, options).render()
        record["solution_path"] = [[p.x, p.y] for p in grid.solution_path or []]
        return record

    def regenerate(self, record: dict[str, Any]) -> dict[str, Any]:
        record["seed"] = _now_millis()
        return self.generate_and_update(record)


class MazeService:
    def __init__(self, *, repo: Any, generator: MazeGenerationService | None = None):
        self.repo = repo
        self.generator = generator or MazeGenerationService()

    def _require(self, maze_id: str) -> dict[str, Any]:
        record = self.repo.get_maze(maze_id)
        if record is None:
            raise KeyError(f"Unknown maze_id: {maze_id}")
        return record

    def find_by_id(self, maze_id: str) -> dict[str, Any] | None:
        return self.repo.get_maze(maze_id)

    def find_by_session(self, session_id: str | None) -> list[dict[str, Any]]:
        if session_id is None or not session_id.strip():
            return []
        return self.repo.find_by_session(session_id)

    def find_public(self, limit: int = 20) -> list[dict[str, Any]]:
        return self.repo.find_public(limit=limit)

    def create_maze(self, data: MazeInput) -> dict[str, Any]:
        draft: dict[str, Any] = {
            "name": data.name if data.name is not None else DEFAULT_NAME,
            "maze_type": MazeType.parse(data.maze_type or MazeType.ORTHOGONAL).value,
            "size": _clamp(data.size if data.size is not None else DEFAULT_SIZE, MIN_SIZE, MAX_SIZE),
            "difficulty": _clamp(
                data.difficulty if data.difficulty is not None else DEFAULT_DIFFICULTY,
                MIN_DIFFICULTY,
                MAX_DIFFICULTY,
            ),
            "seed": data.seed if data.seed is not None else _now_millis(),
            "session_id": data.session_id,
            "configuration": data.config_updates(),
        }
        self.generator.generate_and_update(draft)
        record = self.repo.create_maze(**draft)
        logger.info(f"Created maze {record['id']} ({record['maze_type']}, size={record['size']})")
        return record

    def update_maze(self, maze_id: str, data: MazeInput) -> dict[str, Any]:
        record = self._require(maze_id)
        needs_regeneration = False

        if data.name is not None:
            record["name"] = data.name
        if data.maze_type is not None:
            maze_type = MazeType.parse(data.maze_type).value
            if maze_type != record["maze_type"]:
                record["maze_type"] = maze_type
                needs_regeneration = True
        if data.size is not None and data.size != record["size"]:
            record["size"] = _clamp(data.size, MIN_SIZE, MAX_SIZE)
            needs_regeneration = True
        if data.difficulty is not None and data.difficulty != record["difficulty"]:
            record["difficulty"] = _clamp(data.difficulty, MIN_DIFFICULTY, MAX_DIFFICULTY)
            needs_regeneration = True
        if data.seed is not None:
            record["seed"] = data.seed
            needs_regeneration = True

        configuration = {**(record.get("configuration") or {}), **data.config_updates()}
        if configuration != (record.get("configuration") or {}):
            record["configuration"] = configuration
            needs_regeneration = True

        if needs_regeneration:
            self.generator.generate_and_update(record)
        return self.repo.save_maze(record)

    def regenerate_maze(self, maze_id: str) -> dict[str, Any]:
        record = self._require(maze_id)
        self.generator.regenerate(record)
        logger.info(f"Regenerated maze {maze_id} with seed {record['seed']}")
        return self.repo.save_maze(record)

    def delete_maze(self, maze_id: str) -> bool:
        deleted = self.repo.delete_maze(maze_id)
        if deleted:
            logger.info(f"Deleted maze {maze_id}")
        return deleted


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate a printable maze as SVG")
    parser.add_argument("--type", default="ORTHOGONAL", choices=[t.value for t in MazeType], help="Maze tessellation")
    parser.add_argument("--size", type=int, default=DEFAULT_SIZE, help="Size level 1-20 (ignored with --width/--height)")
    parser.add_argument("--width", type=int, help="Grid width in cells")
    parser.add_argument("--height", type=int, help="Grid height in cells")
    parser.add_argument("--difficulty", type=int, default=DEFAULT_DIFFICULTY, help="Difficulty 1 (easy) to 5 (hard)")
    parser.add_argument("--seed", type=int, help="Random seed for reproducible mazes")
    parser.add_argument("--show-solution", action="store_true", help="Draw the solution path")
    parser.add_argument("--show-dead-ends", action="store_true", help="Shade dead ends by depth")
    parser.add_argument("--inner-wall-color", default=DEFAULT_INNER_WALL_COLOR)
    parser.add_argument("--outer-wall-color", default=DEFAULT_OUTER_WALL_COLOR)
    parser.add_argument("--path-color", default=DEFAULT_PATH_COLOR)
    parser.add_argument("--dead-end-color", default=DEFAULT_DEAD_END_COLOR)
    parser.add_argument("--out", type=Path, default=Path("maze.svg"), help="Output SVG path")
    parser.add_argument("--answer-key", type=Path, help="Also write an answer key SVG to this path")
    parser.add_argument("--db", type=Path, help="Store the maze in this repository (.db for SQLite, else JSON)")
    parser.add_argument("--name", default=DEFAULT_NAME, help="Name used when storing the maze")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.db is not None and (args.width is not None or args.height is not None):
        parser.error("--db stores mazes by size level; it cannot be combined with --width/--height")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    options = RenderOptions(
        inner_wall_color=args.inner_wall_color,
        outer_wall_color=args.outer_wall_color,
        path_color=args.path_color,
        dead_end_color=args.dead_end_color,
        show_solution=args.show_solution,
        show_dead_ends=args.show_dead_ends,
    )
    width, height = size_to_grid_dimensions(args.size)
    width = args.width if args.width is not None else width
    height = args.height if args.height is not None else height
    seed = args.seed if args.seed is not None else _now_millis()

    generator = MazeGenerationService()
    try:
        grid = generator.build_grid(args.type, width, height, args.difficulty, seed)
    except ValueError as e:
        logger.warning(f"Rejected maze parameters: {e}")
        return 2

    args.out.write_text(MazeSvgRenderer(grid, options).render(), encoding="utf-8")
    logger.info(f"Wrote {args.out} ({width}x{height}, seed={seed})")

    if args.answer_key is not None:
        answer_key = replace(options, show_solution=True)
        args.answer_key.write_text(MazeSvgRenderer(grid, answer_key).render(), encoding="utf-8")
        logger.info(f"Wrote {args.answer_key}")

    if args.db is not None:
        repo = open_repo(args.db)
        try:
            record = MazeService(repo=repo, generator=generator).create_maze(
                MazeInput(
                    name=args.name,
                    maze_type=args.type,
                    size=args.size,
                    difficulty=args.difficulty,
                    seed=seed,
                    **{key: getattr(options, key) for key in _CONFIG_FIELDS},
                )
            )
        finally:
            if hasattr(repo, "close"):
                repo.close()
        print(record["id"])
    return 0


if __name__ == "__main__":
    sys.exit(main())
