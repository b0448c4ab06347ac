"""
Airgraph Analyzers
===================

Read-only analysis over a populated node graph.

Modules:
    association  -- Probe association rankings and clusters
    signal       -- Signal quality and history statistics
"""

from airgraph.analyzers.association import AssociationAnalyzer
from airgraph.analyzers.signal import classify_signal_quality, summarize_signal

__all__ = [
    "AssociationAnalyzer",
    "classify_signal_quality",
    "summarize_signal",
]
