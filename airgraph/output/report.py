"""
Airgraph Report Generator
==========================

Writes a structured JSON report of an Airgraph run: the run summary,
graph counters, every node record and the association analysis.

Node records use the same camelCase field names as the persisted
node stream, so a report can be read with the same tooling.

References:
    - Airgraph Shared Models: shared.models.RunSummary
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional
from uuid import UUID

from shared.logger import AirLogger
from shared.models import RunSummary

from airgraph.analyzers.association import AssociationAnalysis
from airgraph.analyzers.signal import summarize_signal
from airgraph.core.graph import NodeGraph

logger = AirLogger("airgraph.output.report")


class _AirgraphJSONEncoder(json.JSONEncoder):
    """JSON encoder handling Airgraph model serialization."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, UUID):
            return str(obj)
        if hasattr(obj, "model_dump"):
            return obj.model_dump()
        if hasattr(obj, "value"):  # Enum
            return obj.value
        return super().default(obj)


class AirgraphReportGenerator:
    """Generates JSON reports from Airgraph runs.

    Usage::

        gen = AirgraphReportGenerator()
        gen.generate_json(summary, "report.json", graph=graph)
    """

    def generate_json(
        self,
        summary: RunSummary,
        output_path: str,
        *,
        graph: Optional[NodeGraph] = None,
        analysis: Optional[AssociationAnalysis] = None,
    ) -> str:
        """Generate a JSON report.

        Args:
            summary: Finalized run summary.
            output_path: Path for the JSON output file.
            graph: Node graph whose records and counters are included.
            analysis: Association analysis to include.

        Returns:
            Absolute path to the generated report.
        """
        report_data: dict[str, Any] = {
            "tool": summary.tool_name,
            "version": "1.0.0",
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "target": summary.target,
            "duration_seconds": summary.duration_seconds,
            "summary": summary.model_dump(),
        }

        if graph is not None:
            report_data["graph"] = graph.stats().model_dump()
            nodes = []
            for node in graph:
                record = node.snapshot().model_dump(mode="json", by_alias=True)
                record["signal"] = summarize_signal(node.signal_history).model_dump(
                    mode="json"
                )
                nodes.append(record)
            report_data["nodes"] = nodes

        if analysis is not None:
            report_data["associations"] = analysis.model_dump()

        output = Path(output_path)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(
            json.dumps(report_data, cls=_AirgraphJSONEncoder, indent=2, ensure_ascii=False),
            encoding="utf-8",
        )

        logger.info(f"JSON report generated: {output}")
        return str(output.resolve())
