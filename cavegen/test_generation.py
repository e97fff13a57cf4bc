"""
Unit tests for the generation phases: fill, smoothing, regions, rooms,
passages and entry/exit placement.
"""

import numpy as np
import pytest
from scipy.ndimage import label

from cavegen.connectivity import (
    PHASE_MAIN,
    PHASE_PAIRWISE,
    RoomConnector,
    brush_offsets,
    carve_passage,
    closest_edge_pair,
    get_line,
    paint_line,
)
from cavegen.errors import (
    CaveGenerationError,
    EmptyMapError,
    InvalidConfigError,
    InvalidDimensionsError,
    NoWarpCandidateError,
)
from cavegen.placement import PointPlacer, find_reachable
from cavegen.regions import Room, RoomGraph, build_rooms, extract_regions, prune_regions
from cavegen.terrain import CellState, Grid, random_fill, smooth_grid, smooth_step


PILLAR_ROOM = [
    "#######",
    "#.....#",
    "#..#..#",
    "#.....#",
    "#######",
]

# Two pairs of rooms: A (x1-4) and B (x6-7) on the left, C (x13-15) and D (x17-18) on the right
FOUR_ROOMS = [
    "####################",
    "#....#..#####...#..#",
    "#....#..#####...#..#",
    "#....#..#####...#..#",
    "####################",
]


def _rooms_for(rows):
    grid = Grid.from_rows(rows)
    return grid, build_rooms(extract_regions(grid, CellState.OPEN), grid)


# ==================== Terrain ====================

@pytest.mark.parametrize('seed', [0, 7, 42])
def test_random_fill_border_is_wall(seed):
    grid = random_fill(30, 20, 45, np.random.default_rng(seed))
    assert (grid.width, grid.height) == (30, 20)
    assert np.all(grid.cells[grid.border_mask()] == CellState.WALL)


def test_random_fill_extremes():
    rng = np.random.default_rng(1)
    assert random_fill(10, 8, 100, rng).count(CellState.OPEN) == 0
    assert random_fill(10, 8, 0, rng).count(CellState.OPEN) == 8 * 6


def test_random_fill_is_deterministic():
    a = random_fill(25, 25, 45, np.random.default_rng(99))
    b = random_fill(25, 25, 45, np.random.default_rng(99))
    assert a == b


@pytest.mark.parametrize('width,height', [(3, 3), (3, 10), (10, 3), (2, 10), (10, 2), (0, 0), (-5, 5)])
def test_random_fill_rejects_tiny_grids(width, height):
    with pytest.raises(InvalidDimensionsError):
        random_fill(width, height, 45, np.random.default_rng(0))


def test_random_fill_rejects_bad_percent():
    with pytest.raises(InvalidConfigError):
        random_fill(10, 10, 120, np.random.default_rng(0))


def test_smooth_step_reads_from_snapshot():
    grid = Grid.from_rows([
        "#####",
        "#...#",
        "#...#",
        "#...#",
        "#####",
    ])
    smoothed = smooth_step(grid)
    assert smoothed.to_rows() == [
        "#####",
        "##.##",
        "#...#",
        "##.##",
        "#####",
    ]
    # input untouched
    assert grid.count(CellState.OPEN) == 9


def test_smoothing_keeps_border():
    grid = random_fill(40, 30, 45, np.random.default_rng(3))
    smoothed = smooth_grid(grid, 5)
    assert np.all(smoothed.cells[smoothed.border_mask()] == CellState.WALL)
    assert smooth_grid(grid, 0) == grid
    assert smooth_grid(grid, 0) is not grid


def test_smooth_grid_rejects_negative_iterations():
    with pytest.raises(InvalidConfigError):
        smooth_grid(Grid.filled(5, 5), -1)


def test_grid_rows_round_trip():
    rows = ["#####", "#S.E#", "#####"]
    grid = Grid.from_rows(rows)
    assert grid.to_rows() == rows
    assert grid[1, 1] == CellState.ENTRY
    assert grid[3, 1] == CellState.EXIT
    assert grid.is_walkable(2, 1)
    assert not grid.is_walkable(0, 0)
    assert not grid.is_walkable(-1, 1)


# ==================== Regions ====================

@pytest.mark.parametrize('state', [CellState.WALL, CellState.OPEN])
def test_regions_partition_cells(state):
    grid = smooth_grid(random_fill(50, 40, 45, np.random.default_rng(11)), 5)
    regions = extract_regions(grid, state)

    tiles = [t for r in regions for t in r.tiles]
    assert len(tiles) == len(set(tiles)) == grid.count(state)
    assert all(grid[t] == state for t in tiles)

    _, n_components = label(grid.mask(state))
    assert len(regions) == n_components


def test_regions_are_four_connected():
    grid = Grid.from_rows([
        "#####",
        "#.#.#",
        "##.##",
        "#####",
    ])
    # diagonal contact does not join regions
    assert len(extract_regions(grid, CellState.OPEN)) == 3


def test_prune_opens_small_walls_before_rooms():
    grid = Grid.from_rows(PILLAR_ROOM)
    result = prune_regions(grid, wall_threshold=2, room_threshold=15)
    assert result.wall_regions_removed == 1
    assert result.room_regions_removed == 0
    assert len(result.rooms) == 1 and result.rooms[0].size == 15
    assert result.grid[3, 2] == CellState.OPEN
    # input untouched
    assert grid[3, 2] == CellState.WALL


def test_prune_fills_small_rooms():
    result = prune_regions(Grid.from_rows(PILLAR_ROOM), wall_threshold=2, room_threshold=16)
    assert result.room_regions_removed == 1
    assert result.rooms == []
    assert result.grid.count(CellState.OPEN) == 0


def test_pruned_regions_meet_thresholds():
    grid = smooth_grid(random_fill(64, 48, 45, np.random.default_rng(5)), 5)
    result = prune_regions(grid, 50, 50)
    assert all(r.size >= 50 for r in extract_regions(result.grid, CellState.WALL))
    assert all(r.size >= 50 for r in extract_regions(result.grid, CellState.OPEN))


# ==================== Rooms ====================

def test_build_rooms_orders_by_size_and_finds_edges():
    grid, graph = _rooms_for(FOUR_ROOMS)
    assert [room.size for room in graph] == [12, 9, 6, 6]
    assert graph.main.index == 0 and graph.main.is_main
    assert graph.accessible_indices() == [0]
    # equal sizes keep discovery order: B (x6) before D (x17)
    assert graph[2].tiles[0] == (6, 1)
    assert graph[3].tiles[0] == (17, 1)

    main = graph.main
    assert main.tiles == sorted(main.tiles)
    assert (2, 2) not in main.edge_tiles and (3, 2) not in main.edge_tiles
    assert len(main.edge_tiles) == 10


def test_build_rooms_rejects_empty_list():
    with pytest.raises(EmptyMapError):
        build_rooms([], Grid.filled(5, 5))


def test_room_graph_connect_is_symmetric_and_propagates():
    rooms = [Room(index=i, tiles=[(i, 0)], edge_tiles=[(i, 0)]) for i in range(4)]
    rooms[0].is_main = rooms[0].is_accessible_from_main = True
    graph = RoomGraph(rooms)

    graph.connect(2, 3)
    assert graph[2].is_connected(3) and graph[3].is_connected(2)
    assert graph.inaccessible_indices() == [1, 2, 3]

    graph.connect(2, 0)
    assert graph.accessible_indices() == [0, 2, 3]
    assert graph.edge_count() == 2
    assert not graph.is_fully_connected()

    graph.connect(1, 3)
    assert graph.is_fully_connected()


# ==================== Passages ====================

def test_get_line_excludes_end():
    assert get_line((0, 0), (0, 0)) == []
    assert get_line((0, 0), (5, 2)) == [(0, 0), (1, 0), (2, 1), (3, 1), (4, 2)]


@pytest.mark.parametrize('start,end', [
    ((3, 3), (10, 4)), ((10, 4), (3, 3)), ((2, 9), (4, 1)), ((5, 5), (5, 0)), ((0, 0), (7, 7)),
])
def test_get_line_steps_are_adjacent(start, end):
    line = get_line(start, end)
    assert len(line) == max(abs(end[0] - start[0]), abs(end[1] - start[1]))
    assert line[0] == start
    for (ax, ay), (bx, by) in zip(line, line[1:] + [end]):
        assert max(abs(ax - bx), abs(ay - by)) == 1


def test_brush_offsets():
    assert brush_offsets(0).tolist() == [[0, 0]]
    assert len(brush_offsets(1)) == 5
    assert len(brush_offsets(2)) == 13
    with pytest.raises(InvalidConfigError):
        brush_offsets(-1)


def test_paint_line_counts_changed_cells():
    cells = Grid.filled(7, 7).cells
    assert paint_line(cells, [(3, 3)], 1) == 5
    assert paint_line(cells, [(3, 3)], 1) == 0
    assert paint_line(cells, [], 2) == 0
    # brush is clipped at the grid edge
    assert paint_line(cells, [(0, 0)], 1) == 3


def test_carve_passage_connects_endpoints():
    grid = Grid.filled(20, 10)
    carved = carve_passage(grid, (2, 2), (17, 7), 1)
    assert grid.count(CellState.OPEN) == 0
    assert carved[2, 2] == CellState.OPEN
    assert len(extract_regions(carved, CellState.OPEN)) == 1


# ==================== Connector ====================

def test_closest_edge_pair_first_found_wins():
    grid, graph = _rooms_for(FOUR_ROOMS)
    assert closest_edge_pair(graph[0], graph[2]) == (4, (4, 1), (6, 1))


def test_connector_runs_both_phases():
    grid, graph = _rooms_for(FOUR_ROOMS)
    connector = RoomConnector(grid, graph, brush_radius=1)
    carved = connector.connect()

    phases = [(p.phase, p.room_a, p.room_b) for p in connector.passages]
    assert phases == [
        (PHASE_PAIRWISE, 0, 2),
        (PHASE_PAIRWISE, 1, 3),
        (PHASE_MAIN, 1, 2),
    ]
    assert connector.passages[2].tile_a == (13, 1)
    assert connector.passages[2].tile_b == (7, 1)

    assert graph.is_fully_connected()
    for room in graph:
        assert all(room.index in graph[other].connected for other in room.connected)

    assert len(extract_regions(carved, CellState.OPEN)) == 1
    # input grid untouched
    assert grid == Grid.from_rows(FOUR_ROOMS)


def test_connector_single_room_carves_nothing():
    grid, graph = _rooms_for(PILLAR_ROOM)
    connector = RoomConnector(grid, graph)
    assert connector.connect() == grid
    assert connector.passages == []


def test_connector_rejects_zero_radius():
    grid, graph = _rooms_for(FOUR_ROOMS)
    with pytest.raises(InvalidConfigError):
        RoomConnector(grid, graph, brush_radius=0)


def test_connector_fails_without_edge_tiles():
    rooms = [Room(index=0, tiles=[(1, 1)], edge_tiles=[(1, 1)], is_main=True,
                  is_accessible_from_main=True),
             Room(index=1, tiles=[(3, 3)], edge_tiles=[])]
    connector = RoomConnector(Grid.filled(6, 6), RoomGraph(rooms))
    with pytest.raises(CaveGenerationError):
        connector.connect()


# ==================== Placement ====================

def test_find_reachable_requires_open_cell():
    with pytest.raises(EmptyMapError):
        find_reachable(Grid.filled(5, 5))


def test_find_reachable_uses_first_open_component():
    grid = Grid.from_rows([
        "#######",
        "#..#..#",
        "#..#..#",
        "#######",
    ])
    assert sorted(find_reachable(grid)) == [(1, 1), (1, 2), (2, 1), (2, 2)]


def test_placer_marks_entry_and_exit_on_copy():
    grid = Grid.from_rows(PILLAR_ROOM)
    placer = PointPlacer(np.random.default_rng(0), exit_radius_factor=0.1)
    placement = placer.place(grid)

    assert placement.entry != placement.exit
    assert placement.grid[placement.entry] == CellState.ENTRY
    assert placement.grid[placement.exit] == CellState.EXIT
    assert placement.distance_sq >= (0.1 * 7) ** 2
    assert placement.reachable_cells == 14
    assert grid.count(CellState.ENTRY) == 0


def test_placer_raises_when_radius_unreachable():
    placer = PointPlacer(np.random.default_rng(0), exit_radius_factor=1.0, max_entry_attempts=3)
    with pytest.raises(NoWarpCandidateError) as info:
        placer.place(Grid.from_rows(PILLAR_ROOM))
    assert info.value.attempts == 3
    assert info.value.radius == 7.0
    assert info.value.kind == 'NoWarpCandidateError'


def test_placer_margin_restricts_candidates():
    grid = Grid.filled(20, 20, CellState.OPEN)
    placer = PointPlacer(np.random.default_rng(4), exit_radius_factor=0.3, margin=0.25)
    placement = placer.place(grid)
    for x, y in (placement.entry, placement.exit):
        assert 5 <= x < 15 and 5 <= y < 15


@pytest.mark.parametrize('kwargs', [{'max_entry_attempts': 0}, {'margin': 0.5}, {'margin': -0.1}])
def test_placer_rejects_bad_settings(kwargs):
    with pytest.raises(InvalidConfigError):
        PointPlacer(np.random.default_rng(0), **kwargs)
