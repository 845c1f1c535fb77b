from io import BytesIO
from typing import Iterable

import openpyxl
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from scisubmit.services.notifications import STATUS_LABELS

HEADERS = [
    "ID", "Title", "Authors", "Keywords", "Category", "Conference", "Participant",
    "Participant Email", "Reviewer", "Status", "Recommendation", "Awarded",
    "Submitted At", "Deadline",
]


def _clean(value) -> str:
    if value is None:
        return ""
    return ILLEGAL_CHARACTERS_RE.sub("", str(value))


def _row(paper) -> list:
    authors = "; ".join(
        f"{a.get('first_name', '')} {a.get('last_name', '')}".strip() for a in (paper.authors or [])
    )
    review = paper.review
    return [
        str(paper.id),
        paper.title,
        authors,
        ", ".join(paper.keywords or []),
        paper.category.name if paper.category else "N/A",
        paper.conference.label if paper.conference else "N/A",
        paper.user.full_name if paper.user else "N/A",
        paper.user.email if paper.user else "",
        paper.reviewer.full_name if paper.reviewer else "",
        STATUS_LABELS.get(paper.status, paper.status.value),
        review.recommendation.value if review is not None and review.recommendation else "",
        "Yes" if paper.awarded else "No",
        paper.submission_date.strftime("%Y-%m-%d %H:%M") if paper.submission_date else "",
        paper.deadline_date.isoformat() if paper.deadline_date else "",
    ]


def build_papers_workbook(papers: Iterable) -> openpyxl.Workbook:
    """One sheet, one row per paper."""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Papers"

    for col_num, header in enumerate(HEADERS, 1):
        cell = ws.cell(row=1, column=col_num, value=header)
        cell.font = Font(bold=True, color="FFFFFF")
        cell.fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
        cell.alignment = Alignment(horizontal="center", vertical="center")

    for row_num, paper in enumerate(papers, 2):
        for col_num, value in enumerate(_row(paper), 1):
            cell = ws.cell(row=row_num, column=col_num, value=_clean(value))
            cell.alignment = Alignment(horizontal="left", vertical="top", wrap_text=True)

    for column in ws.columns:
        column_letter = get_column_letter(column[0].column)
        longest = max(len(str(cell.value or "")) for cell in column)
        ws.column_dimensions[column_letter].width = min(longest + 2, 50)

    return wb


def papers_workbook_bytes(papers: Iterable) -> BytesIO:
    buffer = BytesIO()
    build_papers_workbook(papers).save(buffer)
    buffer.seek(0)
    return buffer
