from __future__ import annotations


class DmlPlanError(ValueError):
    """Base class for every error raised while reading a DirectML plan."""


class MalformedDocument(DmlPlanError):
    pass


class UnsupportedStepType(DmlPlanError):
    def __init__(self, step_type):
        self.step_type = step_type
        super().__init__(f'Unsupported step type "{step_type}".')


class MissingBufferSize(DmlPlanError):
    def __init__(self, tensor_name: str = ""):
        self.tensor_name = tensor_name
        where = f" in tensor '{tensor_name}'" if tensor_name else ""
        super().__init__(f'Field "BufferSize" not found{where}.')


class TensorDataUnreadable(DmlPlanError):
    def __init__(self, path, reason: str):
        self.path = path
        super().__init__(f"Cannot read tensor data '{path}': {reason}.")


class BufferIndexOutOfRange(DmlPlanError):
    def __init__(self, kind: str, index: int, size: int):
        self.kind = kind
        self.index = index
        self.size = size
        super().__init__(
            f"{kind} buffer index {index} is out of range (plan declares {size} {kind.lower()} buffers)."
        )


class PlanLoadError(DmlPlanError):
    """Single error surfaced by the plan entry point, naming the document."""

    name = "Error loading DirectML plan."

    def __init__(self, message: str, identifier: str):
        self.identifier = identifier
        super().__init__(message)
