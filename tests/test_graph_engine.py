import itertools
import logging
import math
import random

import networkx as nx
import pytest

from tiervis import (
    DegenerateInputError,
    DisposedError,
    LayoutConfig,
    LinkResolutionError,
    LinkSpec,
    NodeSpec,
    Simulation,
    UnknownNodeError,
    build,
    from_networkx,
    specs_from_networkx,
)

from .conftest import distance


def random_graph(n=20, seed=1):
    rng = random.Random(seed)
    nodes = [NodeSpec(f"n{i}", weight=rng.randint(50, 250), group=i % 3) for i in range(n)]
    links = [LinkSpec(f"n{i}", f"n{rng.randrange(i)}") for i in range(1, n)]
    return nodes, links


def test_build_assigns_positions_and_radius(triangle):
    snap = triangle.snapshot()
    assert set(snap.positions) == {"A", "B", "C"}
    assert snap.alpha == 1.0
    assert snap.tick == 0
    assert triangle.node("A").radius == 10.0
    assert all(node.degree == 2 for node in triangle.nodes)
    assert all(link.strength == pytest.approx(0.5) for link in triangle.links)


def test_initial_placement_is_bounded(star_specs):
    nodes, links = star_specs
    config = LayoutConfig()
    sim = build(nodes, links, config=config, seed=9)
    limit = config.initial_radius * math.sqrt(0.5 + len(nodes)) + config.initial_jitter * math.sqrt(2)
    for position in sim.snapshot().positions.values():
        assert distance(position, config.center) <= limit


def test_explicit_positions_are_kept():
    sim = build([NodeSpec("a", x=12.5, y=-3.0)], [])
    assert sim.snapshot()["a"] == (12.5, -3.0)


def test_snapshot_is_read_only(triangle):
    snap = triangle.tick()
    with pytest.raises(TypeError):
        snap.positions["A"] = (0.0, 0.0)


def test_determinism_same_seed():
    nodes, links = random_graph()
    first = build(nodes, links, seed=7)
    second = build(nodes, links, seed=7)

    for _ in range(60):
        a = first.tick()
        b = second.tick()
        assert list(a.positions.items()) == list(b.positions.items())
        assert a.alpha == b.alpha


def test_different_seeds_differ():
    nodes, links = random_graph()
    a = build(nodes, links, seed=1).snapshot()
    b = build(nodes, links, seed=2).snapshot()
    assert dict(a.positions) != dict(b.positions)


def test_alpha_decreases_monotonically_and_settles():
    nodes, links = random_graph()
    sim = build(nodes, links)
    config = sim.config
    bound = math.ceil(math.log(1 / config.settle_tolerance) / config.alpha_decay) + 1

    previous = sim.alpha
    ticks = 0
    while not sim.is_settled():
        alpha = sim.tick().alpha
        assert alpha < previous
        previous = alpha
        ticks += 1
        assert ticks <= bound
    assert sim.alpha == config.alpha_min

    # Settled layouts keep ticking at the floor
    assert sim.tick().alpha == config.alpha_min


def test_run_stops_when_settled(triangle):
    taken = triangle.run(max_ticks=5000)
    assert triangle.is_settled()
    assert taken == triangle.ticks
    assert triangle.run() == 0


def test_bounds_are_never_left(bounded_config):
    nodes, links = random_graph(n=30, seed=4)
    sim = build(nodes, links, config=bounded_config)
    width, height = bounded_config.bounds

    for _ in range(300):
        for x, y in sim.tick().positions.values():
            assert 0.0 <= x <= width
            assert 0.0 <= y <= height


def test_pinned_node_stays_exactly_on_pin(star):
    star.pin("leaf-2", 123.25, -77.5)
    for _ in range(100):
        assert star.tick()["leaf-2"] == (123.25, -77.5)


def test_pin_outside_bounds_is_clamped(triangle_specs, bounded_config):
    nodes, links = triangle_specs
    sim = build(nodes, links, config=bounded_config)
    sim.pin("A", 500.0, -20.0)

    assert sim.node("A").pin == (400.0, 0.0)
    for _ in range(20):
        assert sim.tick()["A"] == (400.0, 0.0)


def test_explicit_positions_are_clamped_to_bounds():
    config = LayoutConfig(bounds=(100.0, 100.0), center=(50.0, 50.0))
    sim = build([NodeSpec("a", x=1e4, y=1e4), NodeSpec("b", x=-5.0, y=40.0)], [], config=config)
    snap = sim.snapshot()
    assert snap["a"] == (100.0, 100.0)
    assert snap["b"] == (0.0, 40.0)


def test_dropped_link_is_reported(triangle_specs, caplog):
    nodes, links = triangle_specs
    links = links + [LinkSpec("A", "ghost")]

    with caplog.at_level(logging.WARNING):
        sim = build(nodes, links)

    assert len(sim.links) == 3
    assert len(sim.warnings) == 1
    warning = sim.warnings[0]
    assert isinstance(warning, LinkResolutionError)
    assert warning.missing_id == "ghost"
    assert "ghost" in caplog.text

    for _ in range(10):
        snap = sim.tick()
    assert set(snap.positions) == {"A", "B", "C"}
    assert all(math.isfinite(v) for p in snap.positions.values() for v in p)


def test_zero_nodes_tick_is_noop():
    sim = build([], [])
    snap = sim.tick()
    assert len(snap) == 0
    assert snap.alpha == 1.0
    assert sim.ticks == 0
    assert not sim.is_settled()


def test_single_node_settles_at_center():
    sim = build([NodeSpec("solo")], [])
    sim.run()
    x, y = sim.snapshot()["solo"]
    assert abs(x) < 1e-3 and abs(y) < 1e-3


def test_triangle_scenario(triangle):
    for _ in range(300):
        snap = triangle.tick()

    positions = snap.positions
    for a, b in itertools.combinations("ABC", 2):
        assert distance(positions[a], positions[b]) == pytest.approx(100, rel=0.05)

    cx = sum(p[0] for p in positions.values()) / 3
    cy = sum(p[1] for p in positions.values()) / 3
    assert math.hypot(cx, cy) < 2


def test_star_with_outliers_scenario(star):
    star.run(max_ticks=5000)
    assert star.is_settled()

    positions = star.snapshot().positions
    hub = positions["hub"]
    spokes = [distance(hub, positions[f"leaf-{i}"]) for i in range(5)]
    assert max(spokes) <= min(spokes) * 1.1

    for a, b in itertools.combinations(star.nodes, 2):
        assert distance(positions[a.id], positions[b.id]) >= a.radius + b.radius


def test_reheat_keeps_positions(triangle):
    triangle.run()
    before = dict(triangle.snapshot().positions)

    triangle.reheat(0.5)
    assert triangle.alpha == pytest.approx(triangle.config.alpha_min + 0.5)
    assert dict(triangle.snapshot().positions) == before

    triangle.reheat(5.0)
    assert triangle.alpha == 1.0

    with pytest.raises(ValueError):
        triangle.reheat(-1)


def test_replace_keeps_surviving_positions(triangle):
    triangle.run()
    before = triangle.snapshot()

    warnings = triangle.replace(
        [NodeSpec("A", 100), NodeSpec("B", 100), NodeSpec("D", 100)],
        [LinkSpec("A", "B"), LinkSpec("B", "D"), LinkSpec("C", "D")],
    )

    after = triangle.snapshot()
    assert triangle.alpha == 1.0
    assert set(after.positions) == {"A", "B", "D"}
    assert after["A"] == before["A"]
    assert after["B"] == before["B"]
    assert [w.missing_id for w in warnings] == ["C"]
    assert "C" not in triangle
    with pytest.raises(UnknownNodeError):
        triangle.node("C")


def test_replace_keeps_pins(triangle):
    triangle.pin("A", 1.0, 2.0)
    triangle.replace([NodeSpec("A"), NodeSpec("B")], [LinkSpec("A", "B")])
    assert triangle.node("A").pin == (1.0, 2.0)
    assert triangle.tick()["A"] == (1.0, 2.0)


def test_input_coercion():
    sim = build(
        [{"id": "a", "weight": 80, "group": "Tier 1"}, ("b", 120, "Tier 2")],
        [{"source": "a", "target": "b"}, {"source_id": "b", "target_id": "a", "distance": 40}, ("a", "b")],
    )
    assert sim.node("a").group == "Tier 1"
    assert sim.node("b").radius == 12.0
    assert [link.distance for link in sim.links] == [100.0, 40.0, 100.0]


@pytest.mark.parametrize(
    "nodes, links",
    [
        ([NodeSpec("a"), NodeSpec("a")], []),
        ([NodeSpec("a", weight=float("nan"))], []),
        ([NodeSpec("a", x=float("inf"), y=0.0)], []),
        ([NodeSpec("a"), NodeSpec("b")], [LinkSpec("a", "b", distance=0)]),
        ([{"weight": 3}], []),
        (["a"], []),
        ([("a", 1.0, "g", 0.0, 0.0, "extra")], []),
        ([NodeSpec("a")], [("a",)]),
    ],
)
def test_degenerate_input(nodes, links):
    with pytest.raises(DegenerateInputError):
        build(nodes, links)


def test_degenerate_input_is_a_value_error():
    with pytest.raises(ValueError):
        build([NodeSpec("a"), NodeSpec("a")], [])


def test_coincident_nodes_separate():
    nodes = [NodeSpec(i, x=0.0, y=0.0) for i in range(6)]
    sim = build(nodes, [])
    for _ in range(50):
        snap = sim.tick()
    points = list(snap.positions.values())
    assert len(set(points)) == len(points)


def test_unknown_node_lookup(triangle):
    with pytest.raises(UnknownNodeError):
        triangle.node("nope")
    with pytest.raises(LookupError):
        triangle.pin("nope", 0, 0)


def test_dispose(triangle):
    triangle.dispose()
    assert triangle.disposed
    assert "A" not in triangle

    for call in (triangle.tick, triangle.snapshot, triangle.is_settled, triangle.run, lambda: triangle.reheat(0.1),
                 lambda: triangle.node("A"), lambda: triangle.replace([], [])):
        with pytest.raises(DisposedError):
            call()
    with pytest.raises(RuntimeError):
        triangle.alpha

    triangle.dispose()


def test_independent_simulations_share_nothing(triangle_specs):
    nodes, links = triangle_specs
    a = build(nodes, links, seed=3)
    b = build(nodes, links, seed=3)
    a.pin("A", 500.0, 500.0)
    a.tick()
    b.tick()
    assert b.node("A").pin is None
    assert a.snapshot()["A"] != b.snapshot()["A"]


def test_custom_force_list(triangle_specs):
    nodes, links = triangle_specs
    sim = build(nodes, links, forces=[])
    start = sim.snapshot()
    assert dict(sim.tick().positions) == dict(start.positions)


def test_from_networkx():
    graph = nx.path_graph(["x", "y", "z"])
    nx.set_node_attributes(graph, {"x": 300, "y": 20, "z": 100}, "weight")
    graph.edges["y", "z"]["distance"] = 30

    sim = from_networkx(graph, seed=1)
    assert isinstance(sim, Simulation)
    assert len(sim) == 3
    assert [n.radius for n in sim.nodes] == [20.0, 5.0, 10.0]
    assert sorted(link.distance for link in sim.links) == [30.0, 100.0]
    assert sim.warnings == []


def test_specs_from_networkx_keeps_link_attributes():
    graph = nx.DiGraph()
    graph.add_node("a", weight=50, group="Tier 2", x=1.0, y=2.0)
    graph.add_node("b")
    graph.add_edge("a", "b", distance=40, strength=0.2)

    nodes, links = specs_from_networkx(graph)
    assert nodes == [NodeSpec("a", 50, "Tier 2", 1.0, 2.0), NodeSpec("b", 1.0, None, None, None)]
    assert links == [LinkSpec("a", "b", 40, 0.2)]
