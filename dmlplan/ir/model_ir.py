from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Dict, Any, Tuple, Optional, Union

import numpy as np

# Attribute values are copied verbatim from the plan JSON.
AttributeValue = Union[str, int, float, bool, None, List["AttributeValue"], Dict[str, "AttributeValue"]]

# DirectML tensor data type names -> numpy dtypes
DML_DTYPE_MAP: Dict[str, np.dtype] = {
    "FLOAT32": np.dtype(np.float32),
    "FLOAT16": np.dtype(np.float16),
    "FLOAT64": np.dtype(np.float64),
    "UINT8": np.dtype(np.uint8),
    "UINT16": np.dtype(np.uint16),
    "UINT32": np.dtype(np.uint32),
    "UINT64": np.dtype(np.uint64),
    "INT8": np.dtype(np.int8),
    "INT16": np.dtype(np.int16),
    "INT32": np.dtype(np.int32),
    "INT64": np.dtype(np.int64),
}

DML_DTYPE_PREFIX = "DML_TENSOR_DATA_TYPE_"


def dml_dtype_to_numpy(data_type: str) -> np.dtype:
    key = data_type.upper()
    if key.startswith(DML_DTYPE_PREFIX):
        key = key[len(DML_DTYPE_PREFIX):]
    # Unknown or opaque types are exposed as raw bytes
    return DML_DTYPE_MAP.get(key, np.dtype(np.uint8))


@dataclass(frozen=True)
class TensorShape:
    dimensions: Tuple[int, ...] = ()

    def __str__(self) -> str:
        if not self.dimensions:
            return ""
        return "[" + ",".join(str(d) for d in self.dimensions) + "]"


@dataclass(frozen=True)
class TensorType:
    data_type: str = "bytes"
    shape: TensorShape = field(default_factory=TensorShape)
    denotation: Optional[str] = None

    def __str__(self) -> str:
        return self.data_type + str(self.shape)


@dataclass
class Tensor:
    """A constant tensor embedded in an Argument as its initializer."""
    name: str
    type: TensorType
    byte_size: int
    raw_data: Optional[bytes] = None

    @property
    def num_elements(self) -> int:
        if not self.type.shape.dimensions:
            return 0
        return int(np.prod(self.type.shape.dimensions))

    def to_numpy(self) -> np.ndarray:
        """Decodes the raw payload using the declared data type."""
        if self.raw_data is None:
            raise ValueError(f"Tensor '{self.name}' has no data.")
        dtype = dml_dtype_to_numpy(self.type.data_type)
        usable = len(self.raw_data) - len(self.raw_data) % dtype.itemsize
        array = np.frombuffer(self.raw_data[:usable], dtype=dtype)
        if self.num_elements and array.size == self.num_elements:
            array = array.reshape(self.type.shape.dimensions)
        return array

    def __str__(self) -> str:
        return "DmlPlan Tensor"


@dataclass
class Argument:
    id: str
    declared_type: Optional[str] = None
    initializer: Optional[Tensor] = None
    description: str = ""

    @property
    def type(self) -> Optional[Union[str, TensorType]]:
        if self.declared_type:
            return self.declared_type
        if self.initializer is not None:
            return self.initializer.type
        return None


@dataclass
class Parameter:
    """A named connection point on a node or on the graph boundary."""
    name: str
    arguments: List[Argument] = field(default_factory=list)
    visible: bool = True

    def add_argument(self, arg: Argument):
        self.arguments.append(arg)

    @classmethod
    def single(cls, name: str, type_str: Optional[str] = None, initializer: Optional[Tensor] = None) -> Parameter:
        """Parameter with one Argument sharing its name."""
        param = cls(name)
        param.add_argument(Argument(name, type_str, initializer))
        return param


@dataclass
class Attribute:
    name: str
    value: AttributeValue
    # Attribute types are not interpreted
    type: Optional[str] = None
    description: str = ""
    visible: bool = True


@dataclass
class OperatorNode:
    operator: str
    attributes: List[Attribute] = field(default_factory=list)
    inputs: List[Parameter] = field(default_factory=list)
    outputs: List[Parameter] = field(default_factory=list)

    @property
    def name(self) -> str:
        return self.operator


@dataclass
class BarrierNode:
    name: str = "Global UAV Barrier"
    inputs: List[Parameter] = field(default_factory=list)
    outputs: List[Parameter] = field(default_factory=list)

    @property
    def operator(self) -> str:
        return self.name

    @property
    def attributes(self) -> List[Attribute]:
        return []


Node = Union[OperatorNode, BarrierNode]


def _argument_to_dict(arg: Argument) -> Dict[str, Any]:
    d: Dict[str, Any] = {"id": arg.id, "type": str(arg.type) if arg.type is not None else None}
    if arg.initializer is not None:
        d["initializer"] = {
            "name": arg.initializer.name,
            "type": str(arg.initializer.type),
            "byte_size": arg.initializer.byte_size,
            "has_data": arg.initializer.raw_data is not None,
        }
    return d


def _parameter_to_dict(param: Parameter) -> Dict[str, Any]:
    return {"name": param.name, "arguments": [_argument_to_dict(a) for a in param.arguments]}


@dataclass
class Graph:
    nodes: List[Node] = field(default_factory=list)
    inputs: List[Parameter] = field(default_factory=list)
    outputs: List[Parameter] = field(default_factory=list)
    name: str = ""
    description: str = ""

    @property
    def groups(self) -> bool:
        return False

    def segments(self) -> List[List[OperatorNode]]:
        """Operator nodes split at every barrier; operators in one segment may run in parallel."""
        segments: List[List[OperatorNode]] = [[]]
        for node in self.nodes:
            if isinstance(node, BarrierNode):
                segments.append([])
            else:
                segments[-1].append(node)
        return segments

    def initializers(self) -> List[Tensor]:
        """Unique constant tensors referenced by operator nodes, in first-use order."""
        seen: Dict[int, Tensor] = {}
        for node in self.nodes:
            for param in node.inputs:
                for arg in param.arguments:
                    if arg.initializer is not None and id(arg.initializer) not in seen:
                        seen[id(arg.initializer)] = arg.initializer
        return list(seen.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputs": [_parameter_to_dict(p) for p in self.inputs],
            "outputs": [_parameter_to_dict(p) for p in self.outputs],
            "nodes": [
                {
                    "kind": "barrier" if isinstance(n, BarrierNode) else "operator",
                    "operator": n.operator,
                    "name": n.name,
                    "attributes": [{"name": a.name, "value": a.value} for a in n.attributes],
                    "inputs": [_parameter_to_dict(p) for p in n.inputs],
                    "outputs": [_parameter_to_dict(p) for p in n.outputs],
                }
                for n in self.nodes
            ],
        }


@dataclass
class Plan:
    graphs: List[Graph] = field(default_factory=list)
    metadata: List[Any] = field(default_factory=list)

    @property
    def format(self) -> str:
        return "dmlplan"
