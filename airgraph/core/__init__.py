"""
Airgraph Core
==============

Domain models, the node graph, persistence sinks and the engine.
"""

from airgraph.core.graph import GraphStats, NodeGraph
from airgraph.core.models import (
    AirgraphError,
    BoundedHistory,
    CaptureError,
    FrameClass,
    FrameObservation,
    Node,
    NodeRecord,
    RecordEmissionError,
    RecordSerializationError,
)
from airgraph.core.sink import ConsoleSink, JsonLinesSink, NodeSink, NullSink

__all__ = [
    "AirgraphError",
    "BoundedHistory",
    "CaptureError",
    "ConsoleSink",
    "FrameClass",
    "FrameObservation",
    "GraphStats",
    "JsonLinesSink",
    "Node",
    "NodeGraph",
    "NodeRecord",
    "NodeSink",
    "NullSink",
    "RecordEmissionError",
    "RecordSerializationError",
]
