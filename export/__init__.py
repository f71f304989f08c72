"""Export-Modul: Excel (openpyxl) für offene Vertretungen und Vertretungsprotokoll."""

from export.excel_export import ExcelExporter

__all__ = ["ExcelExporter"]
