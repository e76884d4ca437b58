"""Interactive family tree canvas using Cytoscape.js."""

import json
import logging
from typing import Callable, Optional

from nicegui import ui
from nicegui.events import GenericEventArguments

from family_legacy.graph.nodes import Diagram, DiagramEdge, MarriageRef, VisualEdgeKind
from family_legacy.interaction.controller import InteractionController
from family_legacy.interaction.gestures import (
    HandleRole, ReleasedElsewhere, ReleasedOnCanvas, ReleasedOnNode,
)
from family_legacy.models import Member, Position

logger = logging.getLogger(__name__)

JUNCTION_SIZE = 16

CANVAS_SCRIPT = '''
<script>
window.familyTree = (function() {
    var cy = null;
    var drag = null;
    var HANDLE = 14;

    function handleAt(node, pos) {
        if (node.data('kind') === 'marriage') return 'bottom';
        var bb = node.boundingBox({includeLabels: false});
        if (pos.y - bb.y1 < HANDLE) return 'top';
        if (bb.y2 - pos.y < HANDLE) return 'bottom';
        if (pos.x - bb.x1 < HANDLE) return 'left';
        if (bb.x2 - pos.x < HANDLE) return 'right';
        return null;
    }

    function finish(payload) {
        if (!drag) return;
        var node = cy.getElementById(drag.node);
        if (node.data('kind') === 'person') node.grabify();
        cy.userPanningEnabled(true);
        drag = null;
        emitEvent('tree_connect_end', payload);
    }

    function init(elements, style) {
        var container = document.getElementById('tree-canvas');
        if (typeof cytoscape === 'undefined' || !container) {
            setTimeout(function() { init(elements, style); }, 100);
            return;
        }
        cy = cytoscape({
            container: container,
            elements: elements,
            style: style,
            layout: {name: 'preset'},
            minZoom: 0.2,
            maxZoom: 3
        });

        cy.on('tapstart', 'node', function(evt) {
            var role = handleAt(evt.target, evt.position);
            if (!role) return;
            drag = {node: evt.target.id(), handle: role};
            evt.target.ungrabify();
            cy.userPanningEnabled(false);
            emitEvent('tree_connect_start', drag);
        });

        cy.on('tapend', function(evt) {
            if (!drag) return;
            var target = evt.target;
            if (target === cy) {
                finish({kind: 'canvas', x: evt.position.x, y: evt.position.y});
            } else if (target.isNode && target.isNode()) {
                finish({kind: 'node', node: target.id(), handle: handleAt(target, evt.position)});
            } else {
                finish({kind: 'elsewhere'});
            }
        });

        document.addEventListener('mouseup', function(evt) {
            if (drag && !container.contains(evt.target)) finish({kind: 'elsewhere'});
        });

        cy.on('dragfree', 'node[kind = "person"]', function(evt) {
            var p = evt.target.position();
            emitEvent('tree_node_moved', {node: evt.target.id(), x: p.x, y: p.y});
        });

        cy.on('tap', 'edge', function(evt) {
            var oe = evt.originalEvent || {};
            emitEvent('tree_edge_click', {edge: evt.target.id(), modifier: !!(oe.ctrlKey || oe.metaKey)});
        });

        cy.on('tap', 'node[kind = "person"]', function(evt) {
            emitEvent('tree_node_click', {node: evt.target.id()});
        });

        setTimeout(function() { cy.fit(undefined, 40); }, 100);
    }

    function load(elements) {
        if (!cy) return;
        cy.batch(function() {
            cy.elements().remove();
            cy.add(elements);
        });
    }

    return {
        init: init,
        load: load,
        fit: function() { if (cy) cy.fit(undefined, 40); },
        zoom: function(f) { if (cy) cy.zoom(cy.zoom() * f); }
    };
})();
</script>
'''

STYLE = [
    {
        "selector": 'node[kind = "person"]',
        "style": {
            "shape": "round-rectangle",
            "background-color": "#fdfaf6",
            "border-width": 2,
            "border-color": "#d6c7b4",
            "label": "data(label)",
            "text-wrap": "wrap",
            "text-valign": "center",
            "text-halign": "center",
            "font-family": "serif",
            "font-size": "14px",
            "color": "#451a03",
            "width": "data(width)",
            "height": "data(height)",
        },
    },
    {"selector": 'node[gender = "male"]', "style": {"border-color": "#60a5fa"}},
    {"selector": 'node[gender = "female"]', "style": {"border-color": "#f472b6"}},
    {
        "selector": 'node[kind = "marriage"]',
        "style": {
            "shape": "ellipse",
            "width": JUNCTION_SIZE,
            "height": JUNCTION_SIZE,
            "background-color": "#92400e",
            "border-width": 2,
            "border-color": "#ffffff",
        },
    },
    {
        "selector": "edge",
        "style": {
            "width": 3,
            "line-color": "#92400e",
            "curve-style": "taxi",
            "taxi-direction": "downward",
        },
    },
    {
        "selector": 'edge[kind = "spouse"], edge[kind = "marriage-link"]',
        "style": {"curve-style": "straight", "line-style": "dashed", "line-color": "#b45309"},
    },
]


class TreeCanvas:
    """Renders the session diagram and forwards gestures to the controller."""

    def __init__(
        self,
        controller: InteractionController,
        on_member_select: Optional[Callable[[Member], None]] = None,
    ):
        self.controller = controller
        self.session = controller.session
        self.on_member_select = on_member_select
        self.client = None
        self._diagram: Optional[Diagram] = None

    @property
    def geometry(self):
        return self.session.state.engine.config

    def render(self):
        """Render toolbar, canvas container and the Cytoscape bootstrap script."""
        self.client = ui.context.client

        with ui.row().classes("gap-1 mb-2"):
            ui.button("Fit", on_click=lambda: self._js("familyTree.fit()")).props("dense flat size=sm")
            ui.button("+", on_click=lambda: self._js("familyTree.zoom(1.3)")).props("dense flat size=sm")
            ui.button("-", on_click=lambda: self._js("familyTree.zoom(0.7)")).props("dense flat size=sm")
            ui.label("Drag a handle to connect · Ctrl/Cmd-click a line to delete it").classes(
                "text-xs text-stone-500 self-center ml-2"
            )

        ui.html(
            '<div id="tree-canvas" style="width:100%;height:70vh;border:1px solid #e7e5e4;'
            'border-radius:8px;background:#f5f5f4;"></div>',
            sanitize=False,
        )
        ui.add_head_html('<script src="https://cdnjs.cloudflare.com/ajax/libs/cytoscape/3.28.1/cytoscape.min.js"></script>')
        ui.add_body_html(CANVAS_SCRIPT)

        ui.on("tree_connect_start", self._on_connect_start)
        ui.on("tree_connect_end", self._on_connect_end)
        ui.on("tree_node_moved", self._on_node_moved)
        ui.on("tree_edge_click", self._on_edge_click)
        ui.on("tree_node_click", self._on_node_click)

        elements = json.dumps(self._elements())
        ui.timer(0.1, lambda: self._js(f"familyTree.init({elements}, {json.dumps(STYLE)})"), once=True)

    def refresh(self):
        """Push the current diagram to the browser."""
        if self.client is None:
            return
        self._js(f"familyTree.load({json.dumps(self._elements())})")

    def _js(self, code: str):
        if self.client is not None:
            self.client.run_javascript(code)

    # ─────────────────────────────────────────
    # Diagram -> Cytoscape elements
    # ─────────────────────────────────────────

    def _elements(self) -> list[dict]:
        self._diagram = self.session.diagram
        width, height = self.geometry.node_width, self.geometry.node_height
        elements = []
        for node in self._diagram.nodes:
            if node.is_marriage:
                elements.append({
                    "data": {"id": node.ref.dom_id, "kind": "marriage"},
                    "position": {"x": node.position.x, "y": node.position.y},
                    "grabbable": False,
                })
                continue
            member = node.member
            label = member.full_name
            if member.maiden_name:
                label += f"\nnée {member.maiden_name}"
            label += f"\n{member.lifespan}"
            elements.append({
                "data": {
                    "id": node.ref.dom_id,
                    "kind": "person",
                    "label": label,
                    "gender": member.gender.value if member.gender else "",
                    "width": width,
                    "height": height,
                },
                # cytoscape positions are centres
                "position": {"x": node.position.x + width / 2, "y": node.position.y + height / 2},
            })
        for edge in self._diagram.edges:
            elements.append({
                "data": {
                    "id": edge.dom_id,
                    "source": edge.source.dom_id,
                    "target": edge.target.dom_id,
                    "kind": edge.kind.value,
                },
            })
        return elements

    def _top_left(self, x: float, y: float) -> Position:
        return Position(x=x - self.geometry.node_width / 2, y=y - self.geometry.node_height / 2)

    # ─────────────────────────────────────────
    # Browser events
    # ─────────────────────────────────────────

    def _on_connect_start(self, e: GenericEventArguments):
        node = self._diagram.node(e.args.get("node")) if self._diagram else None
        if node is None:
            return
        self.controller.connect_start(node.ref, HandleRole(e.args["handle"]))

    def _on_connect_end(self, e: GenericEventArguments):
        kind = e.args.get("kind")
        if kind == "canvas":
            target = ReleasedOnCanvas(self._top_left(e.args["x"], e.args["y"]))
        elif kind == "node" and self._diagram and self._diagram.node(e.args.get("node")):
            handle = e.args.get("handle")
            target = ReleasedOnNode(
                self._diagram.node(e.args["node"]).ref,
                HandleRole(handle) if handle else None,
            )
        else:
            target = ReleasedElsewhere()
        self.controller.connect_end(target)

    def _on_node_moved(self, e: GenericEventArguments):
        node = self._diagram.node(e.args.get("node")) if self._diagram else None
        if node is None or isinstance(node.ref, MarriageRef):
            return
        spot = self._top_left(e.args["x"], e.args["y"])
        self.controller.node_moved(node.ref, spot.x, spot.y)

    def _on_edge_click(self, e: GenericEventArguments):
        edge = self._diagram.edge(e.args.get("edge")) if self._diagram else None
        if edge is not None:
            self.controller.edge_clicked(edge, bool(e.args.get("modifier")))

    def _on_node_click(self, e: GenericEventArguments):
        node = self._diagram.node(e.args.get("node")) if self._diagram else None
        if node is not None and node.member is not None and self.on_member_select:
            self.on_member_select(node.member)


def describe_edge(edge: DiagramEdge, session) -> str:
    """Human wording for the delete confirmation."""
    names = {m.id: m.full_name for m in session.members}
    if edge.kind == VisualEdgeKind.MARRIAGE_CHILD:
        a, b = edge.source.spouses
        child = names.get(edge.target.member_id, "?")
        return f"Remove {child} as the child of {names.get(a, '?')} and {names.get(b, '?')}?"
    if edge.kind in (VisualEdgeKind.SPOUSE, VisualEdgeKind.MARRIAGE_LINK):
        rel = edge.underlying[0]
        return f"Remove the marriage of {names.get(rel.from_id, '?')} and {names.get(rel.to_id, '?')}?"
    rel = edge.underlying[0]
    return f"Remove {names.get(rel.to_id, '?')} as the child of {names.get(rel.from_id, '?')}?"
