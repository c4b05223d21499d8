import json
from pathlib import Path

import numpy as np
import pytest


def op_step(op, inputs=None, outputs=None, attributes=None):
    """Builds an ExecuteDmlOperation step dict."""
    return {
        "StepType": "ExecuteDmlOperation",
        "OperatorType": {"EnumName": op},
        "Inputs": {str(k): v for k, v in (inputs or {}).items()},
        "Outputs": {str(k): v for k, v in (outputs or {}).items()},
        "Attributes": attributes or {},
    }


def binding(kind, index):
    return {"BufferKind": kind, "BufferIndex": index}


BARRIER = {"StepType": "GlobalUAVBarrier"}


@pytest.fixture
def conv_relu_plan():
    """Weight W (with side file) feeding Conv, a barrier, then Relu."""
    return {
        "Inputs": [
            {"name": "W", "DataType": "FLOAT32", "Dimensions": [2, 2], "BufferSize": 16, "Data": "w.bin"},
        ],
        "Outputs": [{"name": "O"}],
        "Steps": [
            op_step("Conv", inputs={0: binding("Input", 0)}, outputs={0: binding("Output", 0)},
                    attributes={"a": 1, "b": "x"}),
            BARRIER,
            op_step("Relu", outputs={0: binding("Output", 0)}),
        ],
    }


@pytest.fixture
def weight_file(tmp_path: Path) -> Path:
    """16 bytes holding float32 [1, 2, 3, 4]."""
    path = tmp_path / "w.bin"
    path.write_bytes(np.array([1, 2, 3, 4], dtype=np.float32).tobytes())
    return path


@pytest.fixture
def write_plan(tmp_path: Path):
    """Writes a plan dict as <tmp>/<name> and returns the path."""
    def _write(plan, name="model.dmlplan.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(plan))
        return path
    return _write
