"""Report adapters: charts and index page."""

from pullhistory.adapters.report.builder import StaticReportBuilder

__all__ = ["StaticReportBuilder"]
