"""
Analysis outputs: tables, decision support, market research, formatting, export.
Read-only consumers of engine results.
"""

from .tables import bid_table_to_dataframe, breakdown_table, timeline_to_dataframe
from .decisions import DealReport, RoiBand, classify_roi, generate_deal_report
from .market import MarketComparable, MarketStats, empty_comparables, summarize_comparables
from .formatting import format_currency, format_percent, parse_currency
from .export import export_report_xlsx

__all__ = [
    "bid_table_to_dataframe",
    "breakdown_table",
    "timeline_to_dataframe",
    "DealReport",
    "RoiBand",
    "classify_roi",
    "generate_deal_report",
    "MarketComparable",
    "MarketStats",
    "empty_comparables",
    "summarize_comparables",
    "format_currency",
    "format_percent",
    "parse_currency",
    "export_report_xlsx",
]
