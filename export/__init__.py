"""Export-Modul: Excel (openpyxl) und Terminal-Ausgabe (rich) für den Lehrplan."""

from export.excel_export import ExcelExporter

__all__ = ["ExcelExporter"]
