"""Citation table exports: CSV and Excel."""

import csv
import logging

import openpyxl
from openpyxl.styles import Font

from citekit.core.config import CitationContext
from citekit.core.models import CanonicalRecord
from citekit.formatting.styles import format_citation

logger = logging.getLogger(__name__)

HEADERS = [
    "type", "title", "authors", "container", "publisher", "year",
    "volume", "issue", "pages", "doi", "url", "date_published", "citation",
]


# ── Helpers ──────────────────────────────────────────────────────────


def build_table_rows(
    records: list[CanonicalRecord], context: CitationContext
) -> tuple[list[str], list[list]]:
    """Header and one row per record, citation formatted in the context's style."""
    rows = []
    for rec in records:
        rows.append([
            rec.type.value,
            rec.title or "",
            "; ".join(p.literal for p in rec.authors),
            rec.container or "",
            rec.publisher or "",
            rec.effective_year or "",
            rec.volume or "",
            rec.issue or "",
            rec.pages or "",
            rec.doi or "",
            rec.url or "",
            rec.datePublished or "",
            format_citation(rec, context.style),
        ])
    return list(HEADERS), rows


# ── CSV Export ───────────────────────────────────────────────────────


def export_citations_csv(
    records: list[CanonicalRecord], context: CitationContext, output_path: str
) -> None:
    """Export the citation table as CSV."""
    headers, rows = build_table_rows(records, context)

    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(headers)
        writer.writerows(rows)

    logger.info("Citation CSV exported to %s (%d rows)", output_path, len(rows))


# ── Excel Export ─────────────────────────────────────────────────────


def export_citations_excel(
    records: list[CanonicalRecord], context: CitationContext, output_path: str
) -> None:
    """Export the citation table as Excel, one sheet named after the style."""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = f"{context.style.value.upper()} Citations"

    headers, rows = build_table_rows(records, context)
    ws.append(headers)
    for row in rows:
        ws.append(row)
    _style_header(ws)

    wb.save(output_path)
    logger.info("Citation Excel exported to %s (%d rows)", output_path, len(rows))


def _style_header(ws) -> None:
    """Bold the header row."""
    for cell in ws[1]:
        cell.font = Font(bold=True)
