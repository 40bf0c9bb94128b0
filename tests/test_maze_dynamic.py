import pytest

ALL_TYPES = ["ORTHOGONAL", "DELTA", "SIGMA", "THETA"]


def _walls(grid):
    return [(c.pos, frozenset(c.walls)) for c in grid.cells()]


@pytest.mark.parametrize("maze_type", ALL_TYPES)
def test_same_seed_builds_same_maze(make_grid, maze_type):
    a = make_grid(12, 9, maze_type, difficulty=2, seed=99)
    b = make_grid(12, 9, maze_type, difficulty=2, seed=99)

    assert _walls(a) == _walls(b)
    assert a.solution_path == b.solution_path
    assert [c.dead_end_depth for c in a.cells()] == [c.dead_end_depth for c in b.cells()]


def test_different_seeds_build_different_mazes(make_grid):
    a = make_grid(15, 15, "ORTHOGONAL", difficulty=5, seed=1)
    b = make_grid(15, 15, "ORTHOGONAL", difficulty=5, seed=2)
    assert _walls(a) != _walls(b)


def test_unseeded_grid_still_generates(maze_module):
    grid = maze_module.MazeGrid(6, 6, "SIGMA", difficulty=3)
    grid.generate()
    assert grid.is_generated
    assert grid.solution_path[-1] == grid.end


@pytest.mark.parametrize("maze_type", ["ORTHOGONAL", "SIGMA"])
def test_easier_mazes_have_more_passages(make_grid, maze_type):
    counts = [make_grid(20, 20, maze_type, difficulty=d, seed=8).open_passage_count() for d in (1, 2, 5)]

    assert counts[2] == 20 * 20 - 1
    assert counts[0] > counts[1] > counts[2]


def test_shortcuts_never_exceed_requested_count(make_grid):
    # 400 cells at difficulty 1 → at most 100 extra passages
    grid = make_grid(20, 20, "ORTHOGONAL", difficulty=1, seed=8)
    assert grid.open_passage_count() <= 399 + 100


def test_large_hex_maze_generates(make_grid):
    grid = make_grid(60, 40, "SIGMA", difficulty=4, seed=123)
    assert grid.solution_path[0] == grid.start
    assert grid.solution_path[-1] == grid.end
