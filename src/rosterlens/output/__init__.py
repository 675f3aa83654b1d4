"""Output generation for schedules (PDF, text)."""

from rosterlens.output.pdf_generator import PDFGenerator
from rosterlens.output.summary import SummaryGenerator

__all__ = [
    "PDFGenerator",
    "SummaryGenerator",
]
