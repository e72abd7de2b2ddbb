"""Pytest configuration and fixtures for layout engine tests."""

import math

import pytest

from tiervis import LayoutConfig, LinkSpec, NodeSpec, build


def distance(a, b):
    return math.hypot(a[0] - b[0], a[1] - b[1])


@pytest.fixture
def triangle_specs():
    nodes = [NodeSpec(name, weight=100, group="Tier 1") for name in ("A", "B", "C")]
    links = [
        LinkSpec("A", "B", distance=100),
        LinkSpec("B", "C", distance=100),
        LinkSpec("C", "A", distance=100),
    ]
    return nodes, links


@pytest.fixture
def star_specs():
    nodes = [NodeSpec("hub", weight=200, group="Tier 1")]
    nodes += [NodeSpec(f"leaf-{i}", weight=100, group="Tier 2") for i in range(5)]
    links = [LinkSpec("hub", f"leaf-{i}", distance=50) for i in range(5)]
    return nodes, links


@pytest.fixture
def triangle(triangle_specs):
    nodes, links = triangle_specs
    return build(nodes, links, seed=42)


@pytest.fixture
def star(star_specs):
    nodes, links = star_specs
    return build(nodes, links, seed=42)


@pytest.fixture
def bounded_config():
    return LayoutConfig(bounds=(400.0, 300.0), center=(200.0, 150.0))
