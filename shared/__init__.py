"""
Airgraph Shared Module
======================

Configuration, structured logging, console presentation and run-summary
models shared by every Airgraph component.
"""

from shared.config import AirgraphConfig, GlobalConfig, GraphConfig

__all__ = ["AirgraphConfig", "GlobalConfig", "GraphConfig"]
