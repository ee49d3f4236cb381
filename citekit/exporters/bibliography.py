"""Bibliography exports: plain text and DOCX."""

import logging

from docx import Document
from docx.shared import Inches, Pt

from citekit.core.config import CitationContext, EmphasisMarkers
from citekit.core.models import CanonicalRecord
from citekit.formatting.styles import render_citation

logger = logging.getLogger(__name__)

STYLE_HEADINGS = {
    "mla": "Works Cited",
    "apa": "References",
    "chicago": "Bibliography",
}


def bibliography_text(
    records: list[CanonicalRecord],
    context: CitationContext,
    emphasis: EmphasisMarkers | None = None,
) -> str:
    """One citation per paragraph, blank line between, trailing newline."""
    markers = emphasis or EmphasisMarkers()
    lines = [
        render_citation(rec, context.style).render(markers.open, markers.close)
        for rec in records
    ]
    return "\n\n".join(lines) + "\n"


def export_bibliography_text(
    records: list[CanonicalRecord],
    context: CitationContext,
    output_path: str,
    emphasis: EmphasisMarkers | None = None,
) -> None:
    """Write the bibliography as a plain-text file."""
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(bibliography_text(records, context, emphasis))

    logger.info("Bibliography text exported to %s (%d citations)", output_path, len(records))


def export_bibliography_docx(
    records: list[CanonicalRecord], context: CitationContext, output_path: str
) -> None:
    """Write the bibliography as DOCX with emphasized runs in italics."""
    doc = Document()

    heading = doc.add_paragraph()
    run = heading.add_run(STYLE_HEADINGS[context.style.value])
    run.bold = True
    run.font.size = Pt(14)

    for rec in records:
        citation = render_citation(rec, context.style)
        para = doc.add_paragraph()
        # Hanging indent
        para.paragraph_format.left_indent = Inches(0.5)
        para.paragraph_format.first_line_indent = Inches(-0.5)
        for segment in citation.segments:
            seg_run = para.add_run(segment.text)
            seg_run.italic = segment.emphasis
            seg_run.font.size = Pt(12)

    doc.save(output_path)
    logger.info("Bibliography DOCX exported to %s (%d citations)", output_path, len(records))
