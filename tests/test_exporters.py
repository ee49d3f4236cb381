"""Tests for bibliography and citation table exports."""

import csv
from pathlib import Path

import openpyxl
import pytest
from docx import Document
from docx.shared import Inches

from citekit.core.config import CitationContext, EmphasisMarkers
from citekit.core.models import CanonicalRecord
from citekit.exporters import export_all
from citekit.exporters.bibliography import (
    bibliography_text,
    export_bibliography_docx,
    export_bibliography_text,
)
from citekit.exporters.citation_table import (
    HEADERS,
    export_citations_csv,
    export_citations_excel,
)


@pytest.fixture()
def records():
    return [
        CanonicalRecord(
            type="journal-article",
            title="the open web",
            authors=[{"family": "Smith", "given": "Jane"}],
            container="journal of testing",
            volume="4",
            issue="2",
            pages="10-20",
            year=2021,
            doi="10.1000/xyz",
        ),
        CanonicalRecord(
            type="webpage",
            title="my page",
            website="example blog",
            url="https://example.com/p",
            datePublished="2020-03-15",
        ),
    ]


MLA = CitationContext(style="mla")


# ── Plain Text ───────────────────────────────────────────────────────


def test_text_blank_line_between_citations(records):
    text = bibliography_text(records, MLA)
    paragraphs = text.rstrip("\n").split("\n\n")
    assert len(paragraphs) == 2
    assert paragraphs[0].startswith("Smith, Jane. “The Open Web.”")


def test_text_emphasis_markers(records):
    text = bibliography_text(records, MLA, EmphasisMarkers(open="_", close="_"))
    assert "_Journal Of Testing_," in text


def test_text_export_file(records, tmp_path):
    out = tmp_path / "bib.txt"
    export_bibliography_text(records, CitationContext(style="apa"), str(out))
    content = out.read_text(encoding="utf-8")
    assert content.startswith("Smith, J. (2021).")
    assert content.endswith("\n")


# ── DOCX ─────────────────────────────────────────────────────────────


def test_docx_heading_and_italics(records, tmp_path):
    out = str(tmp_path / "bib.docx")
    export_bibliography_docx(records, MLA, out)

    doc = Document(out)
    assert doc.paragraphs[0].text == "Works Cited"
    first = doc.paragraphs[1]
    assert first.text.startswith("Smith, Jane.")
    italic = [r.text for r in first.runs if r.italic]
    assert italic == ["Journal Of Testing"]


def test_docx_hanging_indent(records, tmp_path):
    out = str(tmp_path / "bib.docx")
    export_bibliography_docx(records, CitationContext(style="chicago"), out)

    doc = Document(out)
    assert doc.paragraphs[0].text == "Bibliography"
    fmt = doc.paragraphs[1].paragraph_format
    assert fmt.left_indent == Inches(0.5)
    assert fmt.first_line_indent == Inches(-0.5)


# ── Table ────────────────────────────────────────────────────────────


def test_csv_rows(records, tmp_path):
    out = str(tmp_path / "table.csv")
    export_citations_csv(records, MLA, out)

    with open(out, encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows[0] == HEADERS
    assert len(rows) == 3
    first = dict(zip(rows[0], rows[1]))
    assert first["authors"] == "Jane Smith"
    assert first["doi"] == "10.1000/xyz"
    assert first["citation"].endswith("https://doi.org/10.1000/xyz.")
    second = dict(zip(rows[0], rows[2]))
    assert second["year"] == "2020"


def test_excel_sheet(records, tmp_path):
    out = str(tmp_path / "table.xlsx")
    export_citations_excel(records, CitationContext(style="apa"), out)

    wb = openpyxl.load_workbook(out)
    assert wb.sheetnames == ["APA Citations"]
    ws = wb["APA Citations"]
    assert ws.max_row == 3
    assert ws.cell(row=1, column=1).font.bold
    wb.close()


# ── export_all ───────────────────────────────────────────────────────


def test_export_all(records, tmp_path):
    out_dir = tmp_path / "all_exports"
    paths = export_all(records, CitationContext(style="chicago"), out_dir)

    assert set(paths.keys()) == {"txt", "docx", "csv", "xlsx"}
    assert Path(paths["txt"]).name == "citations-chicago.txt"
    for key, path in paths.items():
        assert Path(path).exists(), f"{key} not found at {path}"


def test_export_all_subset(records, tmp_path):
    paths = export_all(records, MLA, tmp_path, formats=["txt"])
    assert list(paths) == ["txt"]
    assert not (tmp_path / "citations-mla.docx").exists()


def test_export_all_unknown_format(records, tmp_path):
    with pytest.raises(ValueError):
        export_all(records, MLA, tmp_path, formats=["pdf"])


def test_export_empty_list(tmp_path):
    paths = export_all([], MLA, tmp_path, formats=["txt", "csv"])
    assert Path(paths["txt"]).exists()
    with open(paths["csv"], encoding="utf-8") as f:
        assert len(list(csv.reader(f))) == 1
