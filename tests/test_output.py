"""Tests for text and PDF output."""

from datetime import datetime

import pytest

from rosterlens.cli import create_sample_document
from rosterlens.domain.models import PreferenceLevel, StaffConstraint
from rosterlens.domain.policies import HourTarget
from rosterlens.output.pdf_generator import PDFGenerator
from rosterlens.output.summary import SummaryGenerator

WEEK = datetime(2024, 1, 15)


@pytest.fixture
def document():
    return create_sample_document(WEEK)


class TestSummaryGenerator:
    """Tests for SummaryGenerator."""

    def test_schedule_summary(self, document):
        text = SummaryGenerator().schedule_summary(document.schedule)
        assert "SCHEDULE SUMMARY - Sample Week" in text
        assert "Fill Rate: 83.3%" in text
        assert "Algorithm: manual" in text
        assert "Nurse A: a3 (Tue Day RN) overlaps a4 (Tue Cover) by 2.0h" in text
        assert "Wed Charge: No qualified staff available (0/1 filled)" in text

    def test_assignment_summary_most_hours_first(self, document):
        text = SummaryGenerator().assignment_summary(document.schedule.assignments)
        rows = [line.split()[0:2] for line in text.splitlines() if line.startswith(("Nurse", "Tech"))]
        assert [" ".join(r) for r in rows] == ["Nurse A", "Nurse B", "Tech C"]

    def test_utilization_section_with_target(self, document):
        text = SummaryGenerator(target=HourTarget(16, tolerance=2)).schedule_summary(
            document.schedule
        )
        assert "UTILIZATION (target 16.0h)" in text
        assert "over   Nurse A" in text

    def test_constraint_summary(self):
        text = SummaryGenerator().constraint_summary(
            [StaffConstraint(WEEK, WEEK.replace(hour=2), PreferenceLevel.UNAVAILABLE)]
        )
        assert "Total Constraints: 1" in text
        assert "unavailable" in text

    def test_empty_constraint_summary(self):
        text = SummaryGenerator().constraint_summary([])
        assert "Total Constraints: 0" in text
        assert "Span: - - -" in text

    def test_generate_writes_file(self, document, tmp_path):
        path = tmp_path / "summary.txt"
        content = SummaryGenerator().generate(
            document.schedule, path, requirement=document.requirement
        )
        assert path.read_text() == content
        assert "REQUIREMENT - Sample Week" in content


class TestPDFGenerator:
    """Tests for PDFGenerator."""

    def test_generate_to_buffer(self, document):
        pytest.importorskip("reportlab")
        buffer = PDFGenerator(target=HourTarget(20)).generate_to_buffer(document.schedule)
        assert buffer.read(4) == b"%PDF"

    def test_generate_to_file(self, document, tmp_path):
        pytest.importorskip("reportlab")
        path = tmp_path / "schedule.pdf"
        PDFGenerator().generate(document.schedule, path, include_summary=False)
        assert path.read_bytes().startswith(b"%PDF")
