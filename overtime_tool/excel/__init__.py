"""Excel report generation."""
from overtime_tool.excel.generator import generate_excel_report

__all__ = ["generate_excel_report"]
