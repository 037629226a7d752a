from __future__ import annotations

import json
from pathlib import Path
from typing import Sequence

import polars as pl
from pydantic import BaseModel

from lord.aggregator import HierarchicalAggregator
from lord.config import AggregationConfig, ComparisonWeights
from lord.logging_utils import get_logger
from lord.models import LearningObject, PairKey, ResultStatus
from lord.store import ComparisonStore

# Link weight for pairs with nothing computed yet, slightly repulsive.
UNCOMPARED_WEIGHT = -0.01
ROOT_ID = "root"


class GraphNode(BaseModel):
    id: str
    name: str
    kind: str
    group: int | None = None
    visible: bool = True


class GraphLink(BaseModel):
    source: str
    target: str
    weight: float
    status: ResultStatus | None = None


class GraphData(BaseModel):
    nodes: list[GraphNode]
    links: list[GraphLink]

    def similarity_links(self) -> list[GraphLink]:
        return [link for link in self.links if link.status is not None]


def _section_id(section: int) -> str:
    return f"g{section}"


def build_graph(
    objects: Sequence[LearningObject],
    store: ComparisonStore,
    weights: ComparisonWeights | None = None,
    aggregation: AggregationConfig | None = None,
) -> GraphData:
    """Nodes and weighted links for the force-directed layout.

    Objects hang off invisible section nodes, which hang off an invisible
    root, so the layout keeps course structure when similarities are weak.
    """
    aggregator = HierarchicalAggregator(weights, aggregation)
    nodes: list[GraphNode] = []
    links: list[GraphLink] = []
    sections: dict[int, GraphNode] = {}

    for obj in objects:
        nodes.append(GraphNode(id=str(obj.id), name=obj.name, kind=obj.kind))
        if obj.section not in sections:
            section_node = GraphNode(
                id=_section_id(obj.section),
                name=f"Section {obj.section}",
                kind="grouping",
                group=obj.section,
                visible=False,
            )
            sections[obj.section] = section_node
            nodes.append(section_node)
        links.append(
            GraphLink(source=_section_id(obj.section), target=str(obj.id), weight=0.0)
        )

    nodes.append(GraphNode(id=ROOT_ID, name=ROOT_ID, kind="grouping", group=-1, visible=False))
    for section_node in sections.values():
        links.append(GraphLink(source=ROOT_ID, target=section_node.id, weight=0.0))

    ordered = sorted(objects, key=lambda o: o.id)
    for i, first in enumerate(ordered):
        for second in ordered[i + 1 :]:
            if first.id == second.id:
                continue
            pair = PairKey.of(first.id, second.id)
            similarity = aggregator.aggregate(pair, store.get(pair))
            weight = (
                similarity.value
                if similarity.status is ResultStatus.COMPUTED
                else UNCOMPARED_WEIGHT
            )
            links.append(
                GraphLink(
                    source=str(first.id),
                    target=str(second.id),
                    weight=weight,
                    status=similarity.status,
                )
            )

    return GraphData(nodes=nodes, links=links)


def export_similarities_csv(graph: GraphData, output_path: Path) -> None:
    rows = []
    for link in sorted(graph.similarity_links(), key=lambda link: -link.weight):
        rows.append(
            {
                "object_a": link.source,
                "object_b": link.target,
                "similarity": round(link.weight, 4),
                "status": link.status.value if link.status else None,
            }
        )

    df = pl.DataFrame(
        rows,
        schema={
            "object_a": pl.Utf8,
            "object_b": pl.Utf8,
            "similarity": pl.Float64,
            "status": pl.Utf8,
        },
    )
    output_path.parent.mkdir(parents=True, exist_ok=True)
    df.write_csv(output_path)
    get_logger().info(f"Exported {len(rows)} similarities to {output_path}")


def export_graph_json(graph: GraphData, output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(graph.model_dump(mode="json"), f, indent=2, ensure_ascii=False)
    get_logger().info(
        f"Exported graph with {len(graph.nodes)} nodes and {len(graph.links)} links "
        f"to {output_path}"
    )
