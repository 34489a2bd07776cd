"""
Org Chart.

Builds the position graph of an organization and lays it out as layered
ranks (top-to-bottom by default). Every position reports to at most one
other, so after dropping edges that would close a cycle the graph is a
forest; each tree is placed with its children centred under the parent.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from uuid import UUID

from .entities import Position, role_key

NODE_WIDTH = 250
NODE_HEIGHT = 100
NODE_SEP = 100
RANK_SEP = 100


@dataclass(frozen=True)
class TeamInfo:
    id: UUID
    name: str
    color: str = ""
    lead_ids: Tuple[UUID, ...] = ()


@dataclass
class ChartNode:
    id: str
    role: str
    label: str
    holder_id: Optional[UUID] = None
    holder_name: str = ""
    description: str = ""
    order: int = 0
    team: Optional[TeamInfo] = None
    x: float = 0.0
    y: float = 0.0
    rank: int = 0

    @property
    def is_vacant(self) -> bool:
        return self.holder_id is None

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'role': self.role,
            'label': self.label,
            'is_vacant': self.is_vacant,
            'holder': {'id': str(self.holder_id), 'full_name': self.holder_name} if self.holder_id else None,
            'description': self.description,
            'team': {
                'id': str(self.team.id), 'name': self.team.name, 'color': self.team.color,
            } if self.team else None,
            'rank': self.rank,
            'position': {'x': self.x, 'y': self.y},
        }


@dataclass(frozen=True)
class ChartEdge:
    source: str
    target: str

    @property
    def id(self) -> str:
        return f"e{self.target}-{self.source}"

    def to_dict(self) -> dict:
        return {'id': self.id, 'source': self.source, 'target': self.target}


@dataclass
class OrgChart:
    nodes: List[ChartNode] = field(default_factory=list)
    edges: List[ChartEdge] = field(default_factory=list)

    def node(self, node_id: str) -> Optional[ChartNode]:
        return next((n for n in self.nodes if n.id == node_id), None)

    def children_of(self, node_id: str) -> List[ChartNode]:
        ids = [e.target for e in self.edges if e.source == node_id]
        return [n for n in self.nodes if n.id in ids]

    def to_dict(self) -> dict:
        return {
            'nodes': [n.to_dict() for n in self.nodes],
            'edges': [e.to_dict() for e in self.edges],
        }


def _node_id(position: Position, index: int, used: set) -> str:
    if position.holder_id is None:
        return f"vacant-{position.role}-{index}"
    node_id = str(position.holder_id)
    if node_id in used:
        # Same person holding several positions
        node_id = f"{node_id}-{index}"
    return node_id


def _creates_cycle(parent_of: Dict[str, str], source: str, target: str) -> bool:
    current: Optional[str] = source
    while current is not None:
        if current == target:
            return True
        current = parent_of.get(current)
    return False


def build_org_chart(positions: Sequence[Position], teams: Iterable[TeamInfo] = ()) -> OrgChart:
    """
    One node per position, one edge per resolvable reporting line.

    A reporting line points at the position whose id is `reports_to_id`;
    failing that, at the first position whose role key (or display title as
    a role key) equals `reports_to_role`. Unknown targets and lines that
    would close a cycle are dropped.
    """
    teams = list(teams)
    positions = sorted(enumerate(positions), key=lambda pair: (pair[1].order, pair[0]))

    nodes: List[ChartNode] = []
    used: set = set()
    for index, position in positions:
        node_id = _node_id(position, index, used)
        used.add(node_id)
        team = None
        if position.holder_id is not None:
            team = next((t for t in teams if position.holder_id in t.lead_ids), None)
        nodes.append(ChartNode(
            id=node_id,
            role=position.role,
            label=position.display_title,
            holder_id=position.holder_id,
            holder_name=position.holder_name,
            description=position.description,
            order=position.order,
            team=team,
        ))

    by_position = {position.id: node for node, (_, position) in zip(nodes, positions)}

    def find_source(wanted: str) -> Optional[ChartNode]:
        for node in nodes:
            if node.role == wanted:
                return node
        for node in nodes:
            if role_key(node.label) == wanted:
                return node
        return None

    edges: List[ChartEdge] = []
    parent_of: Dict[str, str] = {}
    for node, (_, position) in zip(nodes, positions):
        source = by_position.get(position.reports_to_id) if position.reports_to_id else None
        if source is None and position.reports_to_role:
            source = find_source(position.reports_to_role)
        if source is None or source.id == node.id:
            continue
        if _creates_cycle(parent_of, source.id, node.id):
            continue
        parent_of[node.id] = source.id
        edges.append(ChartEdge(source=source.id, target=node.id))

    return OrgChart(nodes=nodes, edges=edges)


def layout_org_chart(
    chart: OrgChart,
    direction: str = "TB",
    node_width: int = NODE_WIDTH,
    node_height: int = NODE_HEIGHT,
    nodesep: int = NODE_SEP,
    ranksep: int = RANK_SEP,
) -> OrgChart:
    """
    Assign top-left coordinates to every node in place and return the chart.

    TB stacks ranks vertically; LR stacks them horizontally.
    """
    direction = direction.upper()
    if direction not in ("TB", "LR"):
        raise ValueError(f"Unsupported layout direction: {direction}")
    horizontal = direction == "LR"

    # Extent of a node along the sibling axis and along the rank axis
    breadth = node_height if horizontal else node_width
    depth = node_width if horizontal else node_height

    children: Dict[str, List[str]] = {n.id: [] for n in chart.nodes}
    has_parent = set()
    for edge in chart.edges:
        children[edge.source].append(edge.target)
        has_parent.add(edge.target)
    roots = [n.id for n in chart.nodes if n.id not in has_parent]

    span: Dict[str, float] = {}

    def measure(node_id: str) -> float:
        kids = children[node_id]
        if not kids:
            span[node_id] = breadth
        else:
            total = sum(measure(k) for k in kids) + nodesep * (len(kids) - 1)
            span[node_id] = max(breadth, total)
        return span[node_id]

    centers: Dict[str, Tuple[float, int]] = {}

    def place(node_id: str, start: float, rank: int) -> None:
        width = span[node_id]
        centers[node_id] = (start + width / 2, rank)
        kids = children[node_id]
        if not kids:
            return
        used = sum(span[k] for k in kids) + nodesep * (len(kids) - 1)
        cursor = start + (width - used) / 2
        for kid in kids:
            place(kid, cursor, rank + 1)
            cursor += span[kid] + nodesep

    cursor = 0.0
    for root in roots:
        measure(root)
        place(root, cursor, 0)
        cursor += span[root] + nodesep

    for node in chart.nodes:
        center, rank = centers[node.id]
        rank_center = rank * (depth + ranksep) + depth / 2
        node.rank = rank
        if horizontal:
            node.x = rank_center - node_width / 2
            node.y = center - node_height / 2
        else:
            node.x = center - node_width / 2
            node.y = rank_center - node_height / 2
    return chart
