"""Infrastructure layer package."""

from .excel_repository import load_market_data, save_output_workbook
from .report_exporter import save_report_html, save_report_json, save_report_text, save_report_workbook

__all__ = [
    "load_market_data",
    "save_output_workbook",
    "save_report_json",
    "save_report_text",
    "save_report_html",
    "save_report_workbook",
]
