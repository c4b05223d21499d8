from __future__ import annotations
from pathlib import Path
from typing import Union

from ..errors import MissingBufferSize, TensorDataUnreadable
from ..utils.logging import get_logger
from .model_ir import Tensor, TensorShape, TensorType
from .plan_schema import TensorDescriptor

logger = get_logger(__name__)


def load_tensor(descriptor: TensorDescriptor, base_path: Union[str, Path]) -> Tensor:
    """Builds a Tensor from a plan input, reading its side-file payload if it has one."""
    if descriptor.buffer_size is None:
        raise MissingBufferSize(descriptor.name)

    tensor_type = TensorType(
        data_type=descriptor.data_type or "bytes",
        shape=TensorShape(tuple(descriptor.dimensions)),
        denotation=descriptor.denotation,
    )

    raw_data = None
    if descriptor.data:
        data_path = Path(base_path) / descriptor.data
        try:
            raw_data = data_path.read_bytes()
        except OSError as e:
            raise TensorDataUnreadable(data_path, e.strerror or str(e)) from e
        if len(raw_data) != descriptor.buffer_size:
            logger.warning(
                "Tensor data '%s' holds %d bytes but BufferSize declares %d",
                data_path, len(raw_data), descriptor.buffer_size,
            )
        logger.debug("Loaded %d bytes for tensor '%s' from %s", len(raw_data), descriptor.name, data_path)

    return Tensor(name=descriptor.name, type=tensor_type, byte_size=descriptor.buffer_size, raw_data=raw_data)
