from __future__ import annotations
import json
from collections import Counter
from pathlib import Path
from typing import List, Dict, Any
from ..config import ViewerConfig
from ..ir.model_ir import Plan, Graph, BarrierNode
from . import viz


def segment_rows(graph: Graph) -> List[Dict[str, Any]]:
    """One row per operator node with its step index and barrier segment."""
    rows = []
    segment = 0
    for step, node in enumerate(graph.nodes):
        if isinstance(node, BarrierNode):
            segment += 1
            continue
        rows.append({
            'op': node.operator,
            'name': f"{node.name}_{step}",
            'step': step,
            'segment': segment,
            'num_inputs': len(node.inputs),
            'num_outputs': len(node.outputs),
        })
    return rows


def generate_report_json(plan: Plan, config: ViewerConfig) -> Dict[str, Any]:
    """Generates a JSON-compatible summary of the plan's first graph."""
    if not plan.graphs:
        return {"format": plan.format, "num_nodes": 0, "segments": [], "operators": {}}

    graph = plan.graphs[0]
    barriers = [n for n in graph.nodes if isinstance(n, BarrierNode)]
    segments = [[n.operator for n in seg] for seg in graph.segments()]
    histogram = Counter(n.operator for n in graph.nodes if not isinstance(n, BarrierNode))

    initializers = [
        {
            'name': t.name,
            'type': str(t.type),
            'byte_size': t.byte_size,
            'loaded_bytes': len(t.raw_data) if t.raw_data is not None else 0,
        }
        for t in graph.initializers()
    ]

    return {
        "plan": config.plan,
        "format": plan.format,
        "num_nodes": len(graph.nodes),
        "num_operators": len(graph.nodes) - len(barriers),
        "num_barriers": len(barriers),
        "num_inputs": len(graph.inputs),
        "num_outputs": len(graph.outputs),
        "max_parallel_operators": max((len(s) for s in segments), default=0),
        "operators": dict(histogram),
        "segments": segments,
        "initializers": initializers,
        "timeline": segment_rows(graph),
    }


def generate_report(plan: Plan, config: ViewerConfig, html: bool = True, ascii_chart: bool = False):
    """Generates all report artifacts."""
    report_data = generate_report_json(plan, config)
    output_dir = Path(config.report_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    with open(output_dir / "report.json", "w") as f:
        json.dump(report_data, f, indent=4)

    if html:
        viz.export_segments(report_data['timeline'], str(output_dir / "report.html"))

    if ascii_chart:
        print(viz.export_segments_ascii(report_data['segments'], config.barrier_name))

    print(f"\nReports generated in {output_dir.absolute()}")
    print(f"Nodes: {report_data['num_nodes']} "
          f"({report_data.get('num_operators', 0)} operators, {report_data.get('num_barriers', 0)} barriers)")
    if report_data['operators']:
        print("\nOperators:")
        for key, value in sorted(report_data['operators'].items()):
            print(f"  {key:<40}: {value}")
    if report_data.get('initializers'):
        print(f"\nConstant tensors: {len(report_data['initializers'])}")
    return report_data
