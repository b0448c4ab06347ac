"""
Airgraph Output
================

Modules:
    console  -- Rich-based console display
    report   -- JSON report generation
"""

from airgraph.output.console import AirgraphConsoleOutput
from airgraph.output.report import AirgraphReportGenerator

__all__ = [
    "AirgraphConsoleOutput",
    "AirgraphReportGenerator",
]
