"""
Builds a Graph from a parsed DirectML plan.

Global UAV barriers are flat markers in the plan. The builder turns each of
them into a BarrierNode joined to the operators around it by synthetic edges:
every operator since the previous barrier feeds the barrier through its
``output_edge_<i>`` parameter, and every operator until the next barrier
consumes the barrier through an ``input_edge_<i>`` parameter. Operators that
share a segment between two barriers may run in parallel.
"""
from __future__ import annotations
from pathlib import Path
from typing import List, Optional, Union

from ..config import ViewerConfig
from ..errors import BufferIndexOutOfRange, UnsupportedStepType
from ..utils.logging import get_logger
from .model_ir import Attribute, BarrierNode, Graph, Node, OperatorNode, Parameter
from .plan_schema import (
    BUFFER_KIND_INPUT,
    BUFFER_KIND_OUTPUT,
    BarrierStep,
    OperatorStep,
    PlanDocument,
    binding_key_order,
)
from .tensor_loader import load_tensor

logger = get_logger(__name__)


class GraphBuilder:
    """Single-use builder; create one per plan."""

    def __init__(self, doc: PlanDocument, base_path: Union[str, Path], config: Optional[ViewerConfig] = None):
        self.doc = doc
        self.base_path = Path(base_path)
        self.config = config or ViewerConfig()

        self.input_buffers: List[Parameter] = []
        self.graph_inputs: List[Parameter] = []
        self.graph_outputs: List[Parameter] = []
        self.nodes: List[Node] = []

        self.pending_barrier_inputs: List[Parameter] = []
        self.pending_operator_inputs: List[Parameter] = []
        self.active_barrier: Optional[BarrierNode] = None

    def _edge(self, name: str) -> Parameter:
        return Parameter.single(name, self.config.placeholder_type)

    def _build_boundary(self):
        for index, desc in enumerate(self.doc.inputs):
            name = f"input_{index}"
            if desc.is_constant:
                # Weights are embedded in the operators that read them
                tensor = load_tensor(desc, self.base_path)
                param = Parameter.single(name, initializer=tensor)
            else:
                param = Parameter.single(name, self.config.placeholder_type)
                self.graph_inputs.append(param)
            self.input_buffers.append(param)

        for index, _ in enumerate(self.doc.outputs):
            self.graph_outputs.append(Parameter.single(f"output_{index}", self.config.placeholder_type))

    @staticmethod
    def _resolve(buffers: List[Parameter], kind: str, index: int) -> Parameter:
        if not 0 <= index < len(buffers):
            raise BufferIndexOutOfRange(kind, index, len(buffers))
        return buffers[index]

    def _add_operator(self, step: OperatorStep, index: int):
        node = OperatorNode(step.operator_type)

        if self.active_barrier is not None:
            input_edge = self._edge(f"input_edge_{index}")
            node.inputs.append(input_edge)
            self.pending_operator_inputs.append(input_edge)

        for slot in binding_key_order(step.inputs):
            binding = step.inputs[slot]
            if binding.kind == BUFFER_KIND_INPUT:
                node.inputs.append(self._resolve(self.input_buffers, BUFFER_KIND_INPUT, binding.index))

        for slot in binding_key_order(step.outputs):
            binding = step.outputs[slot]
            if binding.kind == BUFFER_KIND_OUTPUT:
                node.outputs.append(self._resolve(self.graph_outputs, BUFFER_KIND_OUTPUT, binding.index))

        output_edge = self._edge(f"output_edge_{index}")
        node.outputs.append(output_edge)
        self.pending_barrier_inputs.append(output_edge)

        node.attributes = [Attribute(key, value) for key, value in step.attributes.items()]
        self.nodes.append(node)

    def _close_active_barrier(self):
        if self.active_barrier is not None:
            self.active_barrier.outputs = self.pending_operator_inputs
            self.pending_operator_inputs = []

    def _add_barrier(self):
        self._close_active_barrier()
        barrier = BarrierNode(self.config.barrier_name, inputs=self.pending_barrier_inputs)
        self.pending_barrier_inputs = []
        self.nodes.append(barrier)
        self.active_barrier = barrier

    def build(self) -> Graph:
        self._build_boundary()

        for index, step in enumerate(self.doc.steps):
            if isinstance(step, OperatorStep):
                self._add_operator(step, index)
            elif isinstance(step, BarrierStep):
                self._add_barrier()
            else:
                raise UnsupportedStepType(getattr(step, "step_type", type(step).__name__))

        self._close_active_barrier()

        logger.debug(
            "Built graph with %d nodes (%d barriers), %d inputs, %d outputs",
            len(self.nodes),
            sum(isinstance(n, BarrierNode) for n in self.nodes),
            len(self.graph_inputs),
            len(self.graph_outputs),
        )
        return Graph(nodes=self.nodes, inputs=self.graph_inputs, outputs=self.graph_outputs)


def build_graph(doc: PlanDocument, base_path: Union[str, Path], config: Optional[ViewerConfig] = None) -> Graph:
    """Builds the Graph for a parsed plan document."""
    return GraphBuilder(doc, base_path, config).build()
