"""
Campaign records and the tier network inferred from them.

Lives outside the layout engine: it only turns campaigns into a networkx
graph that ``graph_engine.from_networkx`` can lay out.
"""
import logging
import random
from dataclasses import dataclass
from enum import Enum

import networkx as nx

from .graph_engine import from_networkx

logger = logging.getLogger(__name__)


class TierType(Enum):
    MONEY_SITE = "Money Site"
    TIER_1 = "Tier 1"
    TIER_2 = "Tier 2"
    TIER_3 = "Tier 3"


# Each tier points at the tier it feeds
PARENT_TIER = {
    TierType.TIER_2: TierType.TIER_1,
    TierType.TIER_3: TierType.TIER_2,
}


@dataclass
class Project:
    id: str
    name: str
    tier: TierType
    verified_links: int = 0
    url: str = ""


def tier_graph(projects):
    """Builds the campaign graph: one node per project, links to the parent tier.

    Projects of a tier are attached round-robin to the projects of its parent
    tier, in input order. A tier with no parent projects gets no links.
    """
    graph = nx.DiGraph()
    by_tier = {tier: [] for tier in TierType}
    for p in projects:
        graph.add_node(p.id, weight=p.verified_links, group=p.tier.value, name=p.name)
        by_tier[p.tier].append(p)

    for tier, parent in PARENT_TIER.items():
        parents = by_tier[parent]
        if not parents:
            continue
        for i, p in enumerate(by_tier[tier]):
            graph.add_edge(p.id, parents[i % len(parents)].id)

    logger.debug(f"Tier graph: {graph.number_of_nodes()} campaigns, {graph.number_of_edges()} links")
    return graph


def build_tier_layout(projects, config=None, seed=0):
    return from_networkx(tier_graph(projects), config=config, seed=seed)


def demo_projects(count=15, seed=0):
    """A small fixed campaign list for the viewer."""
    rng = random.Random(seed)
    projects = [
        Project("1", "Main E-Comm Site", TierType.TIER_1, 1240, "https://shop-example.com"),
        Project("2", "Blog Network A", TierType.TIER_2, 8500, "https://pbn-network-01.com"),
        Project("3", "Social Signals", TierType.TIER_3, 320, "https://social-aggregator.net"),
    ]
    for i in range(count):
        tier = TierType.TIER_2 if i % 2 == 0 else TierType.TIER_3
        projects.append(Project(
            f"demo-{i + 4}",
            f"Niche {tier.value} Campaign {chr(65 + i)}",
            tier,
            rng.randint(100, 5099),
            f"https://niche-site-{i + 4}.org",
        ))
    return projects
