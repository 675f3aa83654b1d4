"""PDF generation for schedule reports.

This module creates printable PDF reports showing:
- Per-staff timelines across the schedule window
- Double-bookings and unfilled slots
- Utilization against an hour target
"""

from datetime import datetime, timedelta
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

from rosterlens.analysis.conflicts import ConflictDetector
from rosterlens.analysis.grouping import sort_by_start_time
from rosterlens.analysis.statistics import schedule_stats
from rosterlens.analysis.utilization import UtilizationAnalyzer
from rosterlens.domain.models import Schedule, StaffAssignment, StaffId
from rosterlens.domain.policies import HourTarget

# Color definitions (RGB tuples, 0-1 scale)
COLORS = {
    "assignment": (0.4, 0.6, 0.8),  # Blue
    "conflict": (0.9, 0.4, 0.4),  # Red
    "window": (0.95, 0.95, 0.95),  # Light gray
    "under": (1.0, 0.9, 0.5),  # Yellow
    "over": (0.9, 0.7, 0.7),  # Pink
    "on_target": (0.6, 0.8, 0.6),  # Green
}


def _require_reportlab():
    try:
        from reportlab.lib.pagesizes import landscape, letter
        from reportlab.pdfgen import canvas
    except ImportError:
        raise ImportError(
            "reportlab is required for PDF generation. "
            "Install with: pip install reportlab"
        )
    return canvas, landscape(letter)


class PDFGenerator:
    """Generates printable PDF schedule reports.

    Example:
        >>> generator = PDFGenerator(target=HourTarget(40, tolerance=4))
        >>> generator.generate(schedule, "schedule.pdf")
    """

    def __init__(
        self,
        target: Optional[HourTarget] = None,
        detector: Optional[ConflictDetector] = None,
        page_width: float = 792,  # Letter landscape width (11")
        page_height: float = 612,  # Letter landscape height (8.5")
        margin: float = 36,  # 0.5 inch margins
    ):
        self.target = target
        self.detector = detector or ConflictDetector()
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin

    def generate(
        self,
        schedule: Schedule,
        output_path: Union[str, Path],
        include_summary: bool = True,
    ) -> None:
        """Generate a PDF report and save it to file.

        Args:
            schedule: The schedule to render.
            output_path: Path to save the PDF.
            include_summary: Whether to include the summary page.
        """
        canvas, pagesize = _require_reportlab()
        c = canvas.Canvas(str(output_path), pagesize=pagesize)
        self._draw(c, schedule, include_summary)
        c.save()

    def generate_to_buffer(
        self,
        schedule: Schedule,
        include_summary: bool = True,
    ) -> BytesIO:
        """Generate a PDF report and return it as a bytes buffer."""
        canvas, pagesize = _require_reportlab()
        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=pagesize)
        self._draw(c, schedule, include_summary)
        c.save()
        buffer.seek(0)
        return buffer

    def _draw(self, c, schedule: Schedule, include_summary: bool) -> None:
        if include_summary:
            self._draw_summary_page(c, schedule)
        self._draw_timeline_pages(c, schedule)

    def _draw_timeline_pages(self, c, schedule: Schedule) -> None:
        """Draw one row per staff member with their assignments."""
        by_staff: dict[StaffId, list[StaffAssignment]] = {}
        for assignment in sort_by_start_time(schedule.assignments):
            by_staff.setdefault(assignment.staff_id, []).append(assignment)
        staff = sorted(by_staff)

        conflicting = set()
        for conflict in self.detector.find_conflicts(schedule.assignments):
            conflicting.add(conflict.first.id)
            conflicting.add(conflict.second.id)

        row_height = 24
        header_height = 60
        footer_height = 40
        usable_height = self.page_height - 2 * self.margin - header_height - footer_height
        rows_per_page = max(1, int(usable_height / row_height))

        timeline_left = self.margin + 120  # Space for names
        timeline_right = self.page_width - self.margin - 20
        timeline_width = timeline_right - timeline_left

        total_pages = max(1, (len(staff) + rows_per_page - 1) // rows_per_page)
        for page_num in range(total_pages):
            page_staff = staff[page_num * rows_per_page : (page_num + 1) * rows_per_page]

            self._draw_header(c, schedule, f"Staff Timeline - {schedule.display_name}")
            self._draw_time_axis(
                c,
                schedule,
                timeline_left,
                self.page_height - self.margin - header_height - 20,
                timeline_width,
            )

            y = self.page_height - self.margin - header_height - 30
            for staff_id in page_staff:
                y -= row_height
                self._draw_staff_row(
                    c,
                    staff_id,
                    by_staff[staff_id],
                    conflicting,
                    schedule,
                    timeline_left,
                    timeline_width,
                    y,
                    row_height - 4,
                )

            self._draw_legend(c, self.margin, self.margin + 10)

            c.setFont("Helvetica", 9)
            c.drawCentredString(
                self.page_width / 2,
                self.margin - 10,
                f"Page {page_num + 1} of {total_pages}",
            )
            c.showPage()

    def _draw_header(self, c, schedule: Schedule, title: str) -> None:
        """Draw page header with title and schedule window."""
        c.setFont("Helvetica-Bold", 16)
        c.drawString(self.margin, self.page_height - self.margin - 20, title)

        c.setFont("Helvetica", 10)
        c.drawString(
            self.margin,
            self.page_height - self.margin - 35,
            f"{schedule.schedule_start:%a %b %d, %Y %H:%M} - "
            f"{schedule.schedule_end:%a %b %d, %Y %H:%M}",
        )

    def _x_for(
        self, schedule: Schedule, t: datetime, x: float, width: float
    ) -> float:
        """Map a timestamp to a horizontal position, clamped to the window."""
        span = (schedule.schedule_end - schedule.schedule_start).total_seconds()
        offset = (t - schedule.schedule_start).total_seconds()
        offset = min(max(offset, 0.0), span)
        return x + width * offset / span

    def _draw_time_axis(
        self,
        c,
        schedule: Schedule,
        x: float,
        y: float,
        width: float,
    ) -> None:
        """Draw time axis with day or hour markers."""
        span_hours = (schedule.schedule_end - schedule.schedule_start).total_seconds() / 3600
        step = timedelta(days=1) if span_hours > 48 else timedelta(hours=max(1, int(span_hours // 12)))
        label_format = "%a %d" if span_hours > 48 else "%H:%M"

        c.setFont("Helvetica", 8)
        c.setStrokeColorRGB(0.7, 0.7, 0.7)

        t = schedule.schedule_start
        while t <= schedule.schedule_end:
            tick_x = self._x_for(schedule, t, x, width)
            c.line(tick_x, y, tick_x, y - 5)
            if t < schedule.schedule_end:
                c.drawCentredString(tick_x, y + 5, t.strftime(label_format))
            t += step

    def _draw_staff_row(
        self,
        c,
        staff_id: StaffId,
        assignments: list[StaffAssignment],
        conflicting: set[str],
        schedule: Schedule,
        timeline_x: float,
        timeline_width: float,
        y: float,
        height: float,
    ) -> None:
        """Draw a single staff member's row."""
        hours = sum(a.duration_hours for a in assignments)

        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica", 9)
        c.drawString(self.margin, y + height / 2 - 3, staff_id[:18])
        c.setFont("Helvetica", 7)
        c.drawString(self.margin, y + height / 2 - 10, f"{len(assignments)} shifts, {hours:.1f}h")

        c.setFillColorRGB(*COLORS["window"])
        c.rect(timeline_x, y, timeline_width, height, fill=1, stroke=0)

        for assignment in assignments:
            bx = self._x_for(schedule, assignment.start_time, timeline_x, timeline_width)
            ex = self._x_for(schedule, assignment.end_time, timeline_x, timeline_width)
            key = "conflict" if assignment.id in conflicting else "assignment"
            c.setFillColorRGB(*COLORS[key])
            c.setStrokeColorRGB(0.3, 0.3, 0.3)
            c.setLineWidth(0.5)
            c.rect(bx, y, max(ex - bx, 1), height, fill=1, stroke=1)

    def _draw_legend(self, c, x: float, y: float) -> None:
        """Draw legend for colors."""
        c.setFillColorRGB(0, 0, 0)
        c.setFont("Helvetica-Bold", 8)
        c.drawString(x, y, "Legend:")

        items = [("assignment", "Assignment"), ("conflict", "Double-booked")]

        c.setFont("Helvetica", 7)
        current_x = x + 45
        for key, label in items:
            c.setFillColorRGB(*COLORS[key])
            c.rect(current_x, y - 2, 12, 10, fill=1, stroke=1)
            c.setFillColorRGB(0, 0, 0)
            c.drawString(current_x + 15, y, label)
            current_x += 80

    def _draw_summary_page(self, c, schedule: Schedule) -> None:
        """Draw summary page with overview, conflicts and utilization."""
        stats = schedule_stats(schedule, self.detector)
        self._draw_header(c, schedule, f"Schedule Summary - {schedule.display_name}")

        y = self.page_height - self.margin - 60

        c.setFont("Helvetica-Bold", 12)
        c.drawString(self.margin, y, "Overview")
        y -= 20

        c.setFont("Helvetica", 10)
        overview = [
            f"Assignments: {stats.assignments.total_assignments}",
            f"Staff Scheduled: {stats.assignments.unique_staff_count}",
            f"Total Hours: {stats.assignments.total_hours:.1f}",
            f"Unfilled Slots: {stats.unfilled_slots}",
            f"Fill Rate: {stats.fill_rate:.1f}%",
            f"Double-bookings: {stats.conflict_count}",
        ]
        for line in overview:
            c.drawString(self.margin + 20, y, line)
            y -= 15

        conflicts = self.detector.find_conflicts(schedule.assignments)
        if conflicts:
            y -= 10
            c.setFont("Helvetica-Bold", 12)
            c.drawString(self.margin, y, "Double-bookings")
            y -= 15
            c.setFont("Helvetica", 9)
            for conflict in conflicts:
                if y < self.margin + 20:
                    break
                c.drawString(self.margin + 20, y, str(conflict)[:120])
                y -= 12

        if self.target is not None:
            y -= 10
            c.setFont("Helvetica-Bold", 12)
            c.drawString(
                self.margin, y, f"Utilization (target {self.target.target_hours:.1f}h)"
            )
            y -= 15
            self._draw_utilization_table(c, schedule, self.margin + 20, y)

        c.showPage()

    def _draw_utilization_table(self, c, schedule: Schedule, x: float, y: float) -> None:
        report = UtilizationAnalyzer(self.target).analyze(schedule.assignments)
        rows = (
            [("over", e) for e in report.over_utilized]
            + [("under", e) for e in report.under_utilized]
            + [("on_target", e) for e in report.on_target]
        )

        c.setFont("Helvetica", 9)
        for band, entry in rows:
            if y < self.margin + 20:
                break
            c.setFillColorRGB(*COLORS[band])
            c.rect(x, y - 2, 10, 10, fill=1, stroke=1)
            c.setFillColorRGB(0, 0, 0)
            gap = f" ({entry.difference:.1f}h {band})" if entry.difference is not None else ""
            c.drawString(x + 15, y, f"{entry.staff}: {entry.hours:.1f}h{gap}")
            y -= 12
