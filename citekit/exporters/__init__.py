"""Export convenience function."""

import logging
from pathlib import Path

from citekit.core.config import EXPORT_FORMATS, CitationContext, EmphasisMarkers
from citekit.core.models import CanonicalRecord
from citekit.exporters.bibliography import export_bibliography_docx, export_bibliography_text
from citekit.exporters.citation_table import export_citations_csv, export_citations_excel

logger = logging.getLogger(__name__)


def export_all(
    records: list[CanonicalRecord],
    context: CitationContext,
    output_dir: str | Path,
    emphasis: EmphasisMarkers | None = None,
    formats: list[str] | None = None,
) -> dict:
    """Run the requested exports (all by default) and return dict of file paths created."""
    formats = list(EXPORT_FORMATS) if formats is None else formats
    unknown = [f for f in formats if f not in EXPORT_FORMATS]
    if unknown:
        raise ValueError(f"Unknown export formats: {unknown}")

    out = Path(output_dir)
    out.mkdir(parents=True, exist_ok=True)
    style = context.style.value

    paths = {}

    if "txt" in formats:
        txt_path = str(out / f"citations-{style}.txt")
        export_bibliography_text(records, context, txt_path, emphasis)
        paths["txt"] = txt_path

    if "docx" in formats:
        docx_path = str(out / f"citations-{style}.docx")
        export_bibliography_docx(records, context, docx_path)
        paths["docx"] = docx_path

    if "csv" in formats:
        csv_path = str(out / f"citations-{style}.csv")
        export_citations_csv(records, context, csv_path)
        paths["csv"] = csv_path

    if "xlsx" in formats:
        xlsx_path = str(out / f"citations-{style}.xlsx")
        export_citations_excel(records, context, xlsx_path)
        paths["xlsx"] = xlsx_path

    logger.info("All exports written to %s", out)
    return paths
