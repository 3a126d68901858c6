# tailor_bill/utils/docx_helpers.py

from typing import Dict, Iterable

from docx.text.paragraph import Paragraph


def _replace_in_paragraph(p: Paragraph, mapping: Dict[str, str]) -> None:
    if "{{" not in p.text:
        return

    keys = [key for key in mapping if key in p.text]
    if not keys:
        return

    # Fast path: every placeholder sits inside a single run, formatting kept.
    for run in p.runs:
        for key in keys:
            if key in run.text:
                run.text = run.text.replace(key, mapping[key])

    if not any(key in p.text for key in keys):
        return

    # Word split a placeholder across runs: rewrite the text into the first run.
    text = p.text
    for key in keys:
        text = text.replace(key, mapping[key])
    runs = p.runs
    if not runs:
        return
    runs[0].text = text
    for run in runs[1:]:
        run.text = ""


def _iter_paragraphs(doc) -> Iterable[Paragraph]:
    yield from doc.paragraphs
    for table in doc.tables:
        for row in table.rows:
            for cell in row.cells:
                yield from cell.paragraphs


def replace_placeholders_in_document(doc, mapping: Dict[str, str]) -> None:
    """
    Replace every `{{key}}` in `mapping` with its value across the paragraphs
    and table cells of a python-docx Document.
    """
    for p in _iter_paragraphs(doc):
        _replace_in_paragraph(p, mapping)
