"""
Airgraph Shared Data Models
============================

Pydantic v2 models shared across Airgraph modules.  :class:`RunSummary`
is the top-level result of one ingestion run: when it ran, against what,
how many observations were folded into the graph and how many node
records failed to reach the persistence sink.

References:
    - Pydantic v2 documentation. https://docs.pydantic.dev/latest/
"""

from __future__ import annotations

import datetime as _dt
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> _dt.datetime:
    return _dt.datetime.now(_dt.timezone.utc)


class RunSummary(BaseModel):
    """Aggregated result of a single capture / ingestion run.

    Attributes:
        tool_name:          Tool name.
        target:             What was observed (``wifi://wlan0mon`` ...).
        start_time:         UTC timestamp when the run started.
        end_time:           UTC timestamp when the run ended.
        observations:       Observations folded into the graph.
        nodes:              Nodes in the graph at the end of the run.
        emission_failures:  Node records the sink rejected.
        summary:            Human-readable summary text.
        metadata:           Arbitrary extra metadata dict.
    """

    model_config = ConfigDict(
        validate_assignment=True,
        extra="ignore",
    )

    tool_name: str = Field(
        default="airgraph",
        min_length=1,
        description="Tool name",
    )
    target: str = Field(
        ...,
        min_length=1,
        description="Observed target (interface URI or event source)",
    )
    start_time: _dt.datetime = Field(
        default_factory=_utcnow,
        description="Run start timestamp (UTC)",
    )
    end_time: Optional[_dt.datetime] = Field(
        default=None,
        description="Run end timestamp (UTC)",
    )
    observations: int = Field(
        default=0,
        ge=0,
        description="Observations processed",
    )
    nodes: int = Field(
        default=0,
        ge=0,
        description="Nodes in the graph",
    )
    emission_failures: int = Field(
        default=0,
        ge=0,
        description="Node records that failed to persist",
    )
    summary: str = Field(
        default="",
        description="Human-readable result summary",
    )
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional metadata",
    )

    @property
    def duration_seconds(self) -> float | None:
        """Elapsed run time in seconds, or ``None`` if *end_time* is unset."""
        if self.end_time is None:
            return None
        return (self.end_time - self.start_time).total_seconds()

    @property
    def clean(self) -> bool:
        """True when every emitted node record reached the sink."""
        return self.emission_failures == 0

    def finalize(self, summary: str | None = None) -> RunSummary:
        """Mark the run as complete by setting *end_time* and *summary*.

        If *summary* is ``None`` a default is generated from the counters.

        Returns:
            ``self`` for fluent chaining.
        """
        self.end_time = _utcnow()
        if summary is not None:
            self.summary = summary
        else:
            self.summary = (
                f"Run complete. "
                f"Observations: {self.observations}, "
                f"nodes: {self.nodes}, "
                f"emission failures: {self.emission_failures}"
            )
        return self
