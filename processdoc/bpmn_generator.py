"""Deterministic BPMN 2.0 synthesis from a process summary.

The summary's steps are walked once, left to right, into an in-memory flow
graph; the graph is then rendered to BPMN XML including Diagram Interchange
(shape bounds and edge waypoints), so a generic viewer can display it without
running its own layout.

No LLM, no I/O and no state shared between calls: identical summaries give
byte-identical documents.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from .schemas import ProcessStep, ProcessSummary

logger = logging.getLogger(__name__)

NS_MODEL = 'http://www.omg.org/spec/BPMN/20100524/MODEL'
NS_BPMNDI = 'http://www.omg.org/spec/BPMN/20100524/DI'
NS_DC = 'http://www.omg.org/spec/DD/20100524/DC'
NS_DI = 'http://www.omg.org/spec/DD/20100524/DI'
TARGET_NAMESPACE = 'http://bpmn.io/schema/bpmn'

PROCESS_ID = 'Process_1'
START_ID = 'StartEvent_1'
END_ID = 'EndEvent_1'

# Layout constants
START_X, SPINE_Y = 180, 200
EVENT_SIZE = 36
TASK_W, TASK_H = 120, 80
GATEWAY_SIZE = 50
SPACING = 60
BRANCH_OFFSET_Y = 100
SPINE_CENTER_Y = SPINE_Y + EVENT_SIZE // 2

DEFAULT_YES = 'Yes'
DEFAULT_NO = 'No'


class BpmnGenerationError(RuntimeError):
    """The flow graph could not be resolved into a consistent document."""


# ============================================================
# MODULE 1: FLOW GRAPH
# ============================================================

@dataclass
class FlowNode:
    id: str
    kind: str          # 'startEvent', 'task', 'exclusiveGateway', 'endEvent'
    name: str
    x: int
    y: int
    width: int
    height: int
    incoming: list[str] = field(default_factory=list)
    outgoing: list[str] = field(default_factory=list)

    @property
    def is_gateway(self) -> bool:
        return self.kind == 'exclusiveGateway'

    @property
    def left(self) -> tuple[int, int]:
        return self.x, self.y + self.height // 2

    @property
    def right(self) -> tuple[int, int]:
        return self.x + self.width, self.y + self.height // 2

    @property
    def top(self) -> tuple[int, int]:
        return self.x + self.width // 2, self.y

    @property
    def bottom(self) -> tuple[int, int]:
        return self.x + self.width // 2, self.y + self.height


@dataclass
class SequenceFlow:
    id: str
    source: str
    target: Optional[str] = None    # None until the next node is known
    name: str = ''
    branch: bool = False            # drops below the spine to a branch end event


class _FlowGraph:
    """Nodes and flows of one document. Lives for a single synthesis call."""

    def __init__(self) -> None:
        self.nodes: dict[str, FlowNode] = {}
        self.flows: list[SequenceFlow] = []
        self._flow_counter = 0
        self._reserved: set[str] = set()

    def _reserve(self, candidate: str) -> str:
        # A node id and its "_di" shape id must both be free.
        bid = candidate
        n = 1
        while bid in self._reserved or f'{bid}_di' in self._reserved:
            n += 1
            bid = f'{candidate}_{n}'
        self._reserved.add(bid)
        self._reserved.add(f'{bid}_di')
        return bid

    def add_node(self, node: FlowNode) -> FlowNode:
        node.id = self._reserve(node.id)
        self.nodes[node.id] = node
        return node

    def open_flow(self, source: FlowNode, name: str = '', branch: bool = False) -> SequenceFlow:
        """Mint a flow leaving ``source`` whose target is attached later."""
        self._flow_counter += 1
        flow = SequenceFlow(
            id=self._reserve(f'Flow_{self._flow_counter}'),
            source=source.id,
            name=name,
            branch=branch,
        )
        source.outgoing.append(flow.id)
        self.flows.append(flow)
        return flow

    def connect(self, flow: SequenceFlow, target: FlowNode) -> None:
        flow.target = target.id
        target.incoming.append(flow.id)

    def resolve(self) -> None:
        """Check that every placeholder was filled and every reference exists."""
        for flow in self.flows:
            if flow.target is None:
                raise BpmnGenerationError(
                    f'Sequence flow {flow.id} from {flow.source} has no target',
                )
            for ref in (flow.source, flow.target):
                if ref not in self.nodes:
                    raise BpmnGenerationError(
                        f'Sequence flow {flow.id} references unknown element {ref}',
                    )


# ============================================================
# MODULE 2: GRAPH CONSTRUCTION
# ============================================================

_ID_UNSAFE = re.compile(r'[^A-Za-z0-9_.-]')


def element_id(prefix: str, raw_id: Optional[str], index: int) -> str:
    """Build an XML-safe element id from a caller-supplied step id.

    Falls back to the 1-based step position when the id is absent.
    """
    slug = _ID_UNSAFE.sub('_', (raw_id or '').strip())
    if not slug:
        slug = str(index)
    return f'{prefix}_{slug}'


def _branch_labels(step: ProcessStep) -> tuple[str, str]:
    labels = [c.condition for c in step.conditions or ()]
    yes = labels[0] if len(labels) > 0 and labels[0] else DEFAULT_YES
    no = labels[1] if len(labels) > 1 and labels[1] else DEFAULT_NO
    return yes, no


def _build_graph(summary: ProcessSummary) -> _FlowGraph:
    graph = _FlowGraph()
    x = START_X

    start = graph.add_node(FlowNode(
        START_ID, 'startEvent', 'Start', x, SPINE_Y, EVENT_SIZE, EVENT_SIZE,
    ))
    pending = graph.open_flow(start)
    x += EVENT_SIZE + SPACING

    for index, step in enumerate(summary.steps or ()):
        if step.is_decision:
            gateway = graph.add_node(FlowNode(
                element_id('Gateway', step.id, index + 1),
                'exclusiveGateway',
                step.name or '',
                x, SPINE_CENTER_Y - GATEWAY_SIZE // 2,
                GATEWAY_SIZE, GATEWAY_SIZE,
            ))
            graph.connect(pending, gateway)

            yes_label, no_label = _branch_labels(step)
            # Affirmative branch stays on the spine; its target is the next node.
            pending = graph.open_flow(gateway, yes_label)

            rejected = graph.open_flow(gateway, no_label, branch=True)
            branch_end = graph.add_node(FlowNode(
                f'EndEvent_No_{index}',
                'endEvent',
                no_label,
                x + (GATEWAY_SIZE - EVENT_SIZE) // 2, SPINE_Y + BRANCH_OFFSET_Y,
                EVENT_SIZE, EVENT_SIZE,
            ))
            graph.connect(rejected, branch_end)
            x += GATEWAY_SIZE + SPACING
        else:
            # 'subprocess' is rendered as a plain task.
            task = graph.add_node(FlowNode(
                element_id('Activity', step.id, index + 1),
                'task',
                step.name or '',
                x, SPINE_CENTER_Y - TASK_H // 2,
                TASK_W, TASK_H,
            ))
            graph.connect(pending, task)
            pending = graph.open_flow(task)
            x += TASK_W + SPACING

    end = graph.add_node(FlowNode(
        END_ID, 'endEvent', 'End', x, SPINE_Y, EVENT_SIZE, EVENT_SIZE,
    ))
    graph.connect(pending, end)
    return graph


# ============================================================
# MODULE 3: XML RENDERING
# ============================================================

def _render(graph: _FlowGraph, process_name: str) -> str:
    lines: list[str] = []

    def L(indent, text):
        lines.append('  ' * indent + text)

    L(0, '<?xml version="1.0" encoding="UTF-8"?>')
    L(0, f'<bpmn:definitions xmlns:bpmn="{NS_MODEL}" '
         f'xmlns:bpmndi="{NS_BPMNDI}" '
         f'xmlns:dc="{NS_DC}" '
         f'xmlns:di="{NS_DI}" '
         f'id="Definitions_1" targetNamespace="{TARGET_NAMESPACE}">')

    L(1, f'<bpmn:process id="{PROCESS_ID}" name="{xml_escape(process_name)}" isExecutable="false">')
    for node in graph.nodes.values():
        L(2, f'<bpmn:{node.kind} id="{node.id}" name="{xml_escape(node.name)}">')
        for fid in node.incoming:
            L(3, f'<bpmn:incoming>{fid}</bpmn:incoming>')
        for fid in node.outgoing:
            L(3, f'<bpmn:outgoing>{fid}</bpmn:outgoing>')
        L(2, f'</bpmn:{node.kind}>')

    for flow in graph.flows:
        name_attr = f' name="{xml_escape(flow.name)}"' if flow.name else ''
        L(2, f'<bpmn:sequenceFlow id="{flow.id}"{name_attr} '
             f'sourceRef="{flow.source}" targetRef="{flow.target}" />')
    L(1, '</bpmn:process>')

    _render_diagram(L, graph)

    L(0, '</bpmn:definitions>')
    return '\n'.join(lines)


def _render_diagram(L, graph: _FlowGraph) -> None:
    """BPMNDiagram section: one shape per node, one two-point edge per flow."""
    L(1, '<bpmndi:BPMNDiagram id="BPMNDiagram_1">')
    L(2, f'<bpmndi:BPMNPlane id="BPMNPlane_1" bpmnElement="{PROCESS_ID}">')

    for node in graph.nodes.values():
        marker = ' isMarkerVisible="true"' if node.is_gateway else ''
        L(3, f'<bpmndi:BPMNShape id="{node.id}_di" bpmnElement="{node.id}"{marker}>')
        L(4, f'<dc:Bounds x="{node.x}" y="{node.y}" width="{node.width}" height="{node.height}" />')
        L(3, '</bpmndi:BPMNShape>')

    for flow in graph.flows:
        source = graph.nodes[flow.source]
        target = graph.nodes[flow.target]
        if flow.branch:
            (sx, sy), (tx, ty) = source.bottom, target.top
        else:
            (sx, sy), (tx, ty) = source.right, target.left
        L(3, f'<bpmndi:BPMNEdge id="{flow.id}_di" bpmnElement="{flow.id}">')
        L(4, f'<di:waypoint x="{sx}" y="{sy}" />')
        L(4, f'<di:waypoint x="{tx}" y="{ty}" />')
        L(3, '</bpmndi:BPMNEdge>')

    L(2, '</bpmndi:BPMNPlane>')
    L(1, '</bpmndi:BPMNDiagram>')


# Characters XML 1.0 does not allow at all, even escaped.
_XML_ILLEGAL = re.compile('[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]')


def xml_escape(text: str) -> str:
    """Escape special XML characters."""
    text = _XML_ILLEGAL.sub('', text or '')
    return (text
            .replace('&', '&amp;')
            .replace('<', '&lt;')
            .replace('>', '&gt;')
            .replace('"', '&quot;')
            .replace("'", '&apos;'))


# ============================================================
# PUBLIC ENTRY POINT
# ============================================================

def generate_bpmn_xml(summary: ProcessSummary) -> str:
    """Generate a complete BPMN 2.0 document (process + DI) for ``summary``."""
    graph = _build_graph(summary)
    graph.resolve()
    xml = _render(graph, summary.process_name)
    logger.debug(
        "Generated BPMN for %r: %d nodes, %d flows",
        summary.process_name, len(graph.nodes), len(graph.flows),
    )
    return xml
