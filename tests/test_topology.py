import pytest


def test_square_wall_removal_clears_both_sides(maze_module, topology_module):
    Direction = topology_module.Direction
    Position = maze_module.Position
    cells = {
        (x, y): maze_module.MazeCell(pos=Position(x, y), walls=set(topology_module.SQUARE.directions))
        for x in range(3)
        for y in range(3)
    }
    center = cells[(1, 1)]

    center.remove_wall_to(cells[(2, 1)])
    center.remove_wall_to(cells[(1, 0)])

    assert not center.has_wall(Direction.E)
    assert not cells[(2, 1)].has_wall(Direction.W)
    assert not center.has_wall(Direction.N)
    assert not cells[(1, 0)].has_wall(Direction.S)
    assert center.has_wall(Direction.W)
    assert center.has_wall(Direction.S)


def test_square_wall_removal_rejects_non_adjacent_cells(maze_module, topology_module):
    Position = maze_module.Position
    a = maze_module.MazeCell(pos=Position(0, 0), walls=set(topology_module.SQUARE.directions))
    b = maze_module.MazeCell(pos=Position(1, 1), walls=set(topology_module.SQUARE.directions))

    with pytest.raises(ValueError):
        a.remove_wall_to(b)
    assert a.walls == set(topology_module.SQUARE.directions)


@pytest.mark.parametrize(
    "pos,expected",
    [
        # even row: north/south diagonals lean left
        ((1, 2), {"NW": (0, 1), "NE": (1, 1), "SW": (0, 3), "SE": (1, 3), "E": (2, 2), "W": (0, 2)}),
        # odd row: north/south diagonals lean right
        ((1, 1), {"NW": (1, 0), "NE": (2, 0), "SW": (1, 2), "SE": (2, 2), "E": (2, 1), "W": (0, 1)}),
    ],
)
def test_hex_neighbors_follow_row_parity(topology_module, pos, expected):
    hex_topology = topology_module.topology_for("SIGMA")
    Position = topology_module.Position
    Direction = topology_module.Direction

    found = dict(hex_topology.neighbors(Position(*pos), 4, 4))
    assert {d.name: (p.x, p.y) for d, p in found.items()} == expected
    for name, npos in expected.items():
        assert hex_topology.direction_to(Position(*pos), Position(*npos)) == Direction[name]


def test_hex_boundary_cells_have_fewer_neighbors(topology_module):
    hex_topology = topology_module.topology_for("SIGMA")
    Position = topology_module.Position

    # even row, left edge: no NW, W, SW
    assert {d.name for d, _ in hex_topology.neighbors(Position(0, 2), 4, 4)} == {"NE", "E", "SE"}
    # odd row, right edge: no NE, E, SE
    assert {d.name for d, _ in hex_topology.neighbors(Position(3, 1), 4, 4)} == {"NW", "W", "SW"}
    # top-left corner
    assert {d.name for d, _ in hex_topology.neighbors(Position(0, 0), 4, 4)} == {"E", "SE"}


def test_hex_interior_walls_are_symmetric_in_all_six_directions(make_grid, maze_module):
    grid = make_grid(4, 4, "SIGMA", difficulty=1, seed=17)
    Position = maze_module.Position

    for y in range(1, 3):
        for x in range(1, 3):
            here = grid.cell(x, y)
            if y % 2 == 0:
                offsets = {"NW": (-1, -1), "NE": (0, -1), "SW": (-1, 1), "SE": (0, 1)}
            else:
                offsets = {"NW": (0, -1), "NE": (1, -1), "SW": (0, 1), "SE": (1, 1)}
            offsets.update({"E": (1, 0), "W": (-1, 0)})

            assert len(grid.neighbors(Position(x, y))) == 6
            for direction, npos in grid.neighbors(Position(x, y)):
                dx, dy = offsets[direction.name]
                assert npos == Position(x + dx, y + dy)
                there = grid.cell_at(npos)
                assert here.has_wall(direction) == there.has_wall(direction.opposite)


def test_hex_wall_removal_uses_parity_rule(maze_module, topology_module):
    hex_topology = topology_module.topology_for("SIGMA")
    Direction = topology_module.Direction
    Position = maze_module.Position

    even = maze_module.MazeCell(pos=Position(2, 2), walls=set(hex_topology.directions))
    odd_above = maze_module.MazeCell(pos=Position(1, 1), walls=set(hex_topology.directions))
    even.remove_wall_to(odd_above, hex_topology)

    assert not even.has_wall(Direction.NW)
    assert not odd_above.has_wall(Direction.SE)
    assert len(even.walls) == 5


def test_delta_and_theta_use_square_adjacency(topology_module):
    Position = topology_module.Position
    for name in ("DELTA", "THETA"):
        topo = topology_module.topology_for(name)
        assert {d.name for d in topo.directions} == {"N", "S", "E", "W"}
        assert len(topo.neighbors(Position(1, 1), 3, 3)) == 4


def test_maze_type_parse_accepts_names_and_members(topology_module):
    MazeType = topology_module.MazeType
    assert MazeType.parse("sigma") is MazeType.SIGMA
    assert MazeType.parse(MazeType.THETA) is MazeType.THETA
    with pytest.raises(ValueError):
        MazeType.parse("hexagon")


def test_opposites_pair_up(topology_module):
    for direction in topology_module.Direction:
        assert direction.opposite.opposite is direction
        assert direction.opposite is not direction
