from __future__ import annotations
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from ..config import ViewerConfig
from ..errors import MalformedDocument, PlanLoadError
from ..utils.logging import get_logger
from .graph_builder import build_graph
from .model_ir import Plan
from .plan_schema import parse_plan_document

logger = get_logger(__name__)


@dataclass
class PlanContext:
    """What the host hands to a model reader: document name, its text and its folder."""
    identifier: str
    text: str
    folder: Union[str, Path] = "."


class ModelFactory:
    """Reader for ``*.dmlplan.json`` DirectML execution plans."""

    def __init__(self, config: Optional[ViewerConfig] = None):
        self.config = config or ViewerConfig()

    def match(self, identifier: str) -> bool:
        return identifier.endswith(self.config.plan_suffix)

    def _build(self, context: PlanContext) -> Plan:
        try:
            obj = json.loads(context.text)
        except json.JSONDecodeError as e:
            raise MalformedDocument(f"Invalid JSON: {e}") from e
        doc = parse_plan_document(obj)
        graph = build_graph(doc, context.folder, self.config)
        return Plan(graphs=[graph])

    def load(self, context: PlanContext) -> Plan:
        """Synchronous load; every failure is re-raised as one PlanLoadError."""
        try:
            plan = self._build(context)
        except Exception as e:
            message = str(e) or type(e).__name__
            if message.endswith("."):
                message = message[:-1]
            raise PlanLoadError(f"{message} in '{context.identifier}'.", context.identifier) from e
        logger.info("Loaded %s: %d nodes", context.identifier, len(plan.graphs[0].nodes))
        return plan

    async def open(self, context: PlanContext) -> Plan:
        return self.load(context)


def load_dmlplan(path: Union[str, Path], config: Optional[ViewerConfig] = None) -> Plan:
    """Loads a plan file from disk; tensor data paths resolve against its folder."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise PlanLoadError(f"{e.strerror or e} in '{path.name}'.", path.name) from e
    return ModelFactory(config).load(PlanContext(identifier=path.name, text=text, folder=path.parent))
