"""Graph package - relationship storage, derivation and layout."""

from family_legacy.graph.builder import FamilyGraph, MemberRelations, SpousePair, build_graph
from family_legacy.graph.diagram import build_diagram
from family_legacy.graph.layout import Layout, LayoutEngine
from family_legacy.graph.nodes import (
    Diagram, DiagramEdge, DiagramNode, MarriageRef, NodeRef, PersonRef, VisualEdgeKind,
)
from family_legacy.graph.repository import ChangeEvent, ChangeKind, FamilyRepository
from family_legacy.graph.timeline import TimelineEntry, build_timeline

__all__ = [
    "FamilyGraph",
    "MemberRelations",
    "SpousePair",
    "build_graph",
    "build_diagram",
    "Layout",
    "LayoutEngine",
    "Diagram",
    "DiagramEdge",
    "DiagramNode",
    "MarriageRef",
    "NodeRef",
    "PersonRef",
    "VisualEdgeKind",
    "ChangeEvent",
    "ChangeKind",
    "FamilyRepository",
    "TimelineEntry",
    "build_timeline",
]
