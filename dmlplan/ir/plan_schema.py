"""
Typed view of a ``*.dmlplan.json`` document.

The JSON produced by the DirectML plan serializer is validated here once so
that the graph builder only deals with well-formed steps and bindings.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from ..errors import MalformedDocument, UnsupportedStepType
from .model_ir import AttributeValue

STEP_OPERATOR = "ExecuteDmlOperation"
STEP_BARRIER = "GlobalUAVBarrier"

BUFFER_KIND_INPUT = "Input"
BUFFER_KIND_OUTPUT = "Output"


@dataclass(frozen=True)
class TensorDescriptor:
    name: str = ""
    data_type: Optional[str] = None
    dimensions: Tuple[int, ...] = ()
    denotation: Optional[str] = None
    buffer_size: Optional[int] = None
    data: Optional[str] = None

    @property
    def is_constant(self) -> bool:
        return bool(self.data)


@dataclass(frozen=True)
class BufferBinding:
    kind: str
    index: int


@dataclass
class OperatorStep:
    operator_type: str
    inputs: Dict[str, BufferBinding] = field(default_factory=dict)
    outputs: Dict[str, BufferBinding] = field(default_factory=dict)
    attributes: Dict[str, AttributeValue] = field(default_factory=dict)

    step_type = STEP_OPERATOR


@dataclass
class BarrierStep:
    step_type = STEP_BARRIER


Step = Union[OperatorStep, BarrierStep]


@dataclass
class PlanDocument:
    inputs: List[TensorDescriptor]
    outputs: List[Any]
    steps: List[Step]


_KIND_NAMES = {dict: "an object", list: "an array", str: "a string", int: "an integer"}


def _expect(value, kind, what: str):
    # bool is an int subclass but never a valid index or size
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise MalformedDocument(f"{what} must be {_KIND_NAMES.get(kind, kind.__name__)}, got {type(value).__name__}.")
    return value


def _expect_int(value, what: str) -> int:
    # JSON numbers such as 16.0 are whole and index the same buffer as 16
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return _expect(value, int, what)


def _expect_optional_str(obj: Dict[str, Any], key: str, where: str) -> Optional[str]:
    value = obj.get(key)
    if value is not None:
        _expect(value, str, f"{where}.{key}")
    return value


def _array_index(key: str) -> Optional[int]:
    """Numeric value of a canonical array-index key ("0", "12"), else None."""
    if key.isdigit() and key.isascii() and (key == "0" or not key.startswith("0")):
        value = int(key)
        if value < 2 ** 32 - 1:
            return value
    return None


def binding_key_order(keys) -> List[str]:
    """Slot keys in JSON object enumeration order: array-index keys ascending, then the rest as written."""
    keys = list(keys)
    numeric = sorted((k for k in keys if _array_index(k) is not None), key=_array_index)
    return numeric + [k for k in keys if _array_index(k) is None]


def parse_tensor_descriptor(obj: Any, where: str) -> TensorDescriptor:
    _expect(obj, dict, where)
    dims = obj.get("Dimensions") or []
    dims = list(_expect(dims, list, f"{where}.Dimensions"))
    for i, d in enumerate(dims):
        dims[i] = _expect_int(d, f"{where}.Dimensions[{i}]")
    buffer_size = obj.get("BufferSize")
    if buffer_size is not None:
        buffer_size = _expect_int(buffer_size, f"{where}.BufferSize")
    data = _expect_optional_str(obj, "Data", where)
    return TensorDescriptor(
        name=_expect_optional_str(obj, "name", where) or "",
        data_type=_expect_optional_str(obj, "DataType", where),
        dimensions=tuple(dims),
        denotation=_expect_optional_str(obj, "Denotation", where),
        buffer_size=buffer_size,
        data=data,
    )


def _parse_bindings(obj: Any, where: str) -> Dict[str, BufferBinding]:
    if obj is None:
        return {}
    _expect(obj, dict, where)
    bindings: Dict[str, BufferBinding] = {}
    for slot in binding_key_order(obj):
        binding = obj[slot]
        slot_where = f"{where}[{slot!r}]"
        _expect(binding, dict, slot_where)
        if "BufferKind" not in binding or "BufferIndex" not in binding:
            raise MalformedDocument(f"{slot_where} needs both BufferKind and BufferIndex.")
        bindings[slot] = BufferBinding(
            kind=_expect(binding["BufferKind"], str, f"{slot_where}.BufferKind"),
            index=_expect_int(binding["BufferIndex"], f"{slot_where}.BufferIndex"),
        )
    return bindings


def parse_step(obj: Any, index: int) -> Step:
    where = f"Steps[{index}]"
    _expect(obj, dict, where)
    step_type = obj.get("StepType")
    if step_type is None:
        raise MalformedDocument(f'{where} has no "StepType".')

    if step_type == STEP_BARRIER:
        return BarrierStep()
    if step_type != STEP_OPERATOR:
        raise UnsupportedStepType(step_type)

    op_type = obj.get("OperatorType")
    if not isinstance(op_type, dict) or not isinstance(op_type.get("EnumName"), str):
        raise MalformedDocument(f'{where} has no "OperatorType.EnumName".')

    attributes = obj.get("Attributes")
    if attributes is None:
        attributes = {}
    _expect(attributes, dict, f"{where}.Attributes")

    return OperatorStep(
        operator_type=op_type["EnumName"],
        inputs=_parse_bindings(obj.get("Inputs"), f"{where}.Inputs"),
        outputs=_parse_bindings(obj.get("Outputs"), f"{where}.Outputs"),
        attributes=dict(attributes),
    )


def parse_plan_document(obj: Any) -> PlanDocument:
    """Validates the decoded JSON object and returns a typed PlanDocument."""
    _expect(obj, dict, "Plan document")
    for key in ("Inputs", "Outputs", "Steps"):
        if key not in obj:
            raise MalformedDocument(f'Field "{key}" not found.')
        _expect(obj[key], list, key)

    inputs = [parse_tensor_descriptor(t, f"Inputs[{i}]") for i, t in enumerate(obj["Inputs"])]
    steps = [parse_step(s, i) for i, s in enumerate(obj["Steps"])]
    return PlanDocument(inputs=inputs, outputs=list(obj["Outputs"]), steps=steps)
