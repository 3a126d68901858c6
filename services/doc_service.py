# tailor_bill/services/doc_service.py

import io
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from docx import Document
from docx.shared import Inches

from domain.models import DocumentSection, PrintableDocument
from utils.barcode import BARCODE_IMG_DIR, ensure_barcode_image
from utils.docx_helpers import replace_placeholders_in_document

logger = logging.getLogger(__name__)

FABRIC_COLUMNS = ["Description", "Qty", "Rate", "Amount"]
STITCHING_COLUMNS = ["Description", "Measurements", "Qty", "Rate", "Amount"]


def build_placeholder_map(document: PrintableDocument) -> Dict[str, str]:
    """
    Values for the header placeholders a bill template may contain:
      {{business_name}}, {{business_address}}, {{business_phone}},
      {{business_email}}, {{tax_number}}, {{invoice_number}}, {{date}},
      {{customer_name}}, {{customer_mobile}}, {{total_sum}}
    """
    business = document.business
    customer = list(document.customer_lines) + ["", ""]
    return {
        "{{business_name}}": business.name,
        "{{business_address}}": business.address,
        "{{business_phone}}": business.phone,
        "{{business_email}}": business.email,
        "{{tax_number}}": business.tax_number,
        "{{invoice_number}}": document.invoice_number,
        "{{date}}": document.invoice_date,
        "{{customer_name}}": customer[0],
        "{{customer_mobile}}": customer[1],
        "{{total_sum}}": document.totals.total,
    }


def _write_header(doc, document: PrintableDocument) -> None:
    business = document.business
    doc.add_heading(business.name, level=0)
    for line in (business.address, business.phone, business.email):
        if line:
            doc.add_paragraph(line)
    if business.tax_number:
        doc.add_paragraph(f"GSTIN: {business.tax_number}")

    doc.add_heading(document.title, level=1)
    doc.add_paragraph(f"Invoice Number: {document.invoice_number}")
    doc.add_paragraph(f"Date: {document.invoice_date}")

    doc.add_heading("Bill To", level=2)
    for line in document.customer_lines:
        doc.add_paragraph(line)


def _write_section(doc, section: DocumentSection, stitching: bool, table_style: Optional[str]) -> None:
    doc.add_heading(section.title, level=2)

    columns = STITCHING_COLUMNS if stitching else FABRIC_COLUMNS
    table = doc.add_table(rows=1, cols=len(columns))
    if table_style:
        table.style = table_style

    for cell, title in zip(table.rows[0].cells, columns):
        cell.text = title

    for row in section.rows:
        values: List[str] = [row.description]
        if stitching:
            values.append(row.measurement_summary or "")
        values += [row.quantity, row.rate, row.amount]

        for cell, value in zip(table.add_row().cells, values):
            cell.text = value


def _write_footer(doc, document: PrintableDocument) -> None:
    totals = document.totals
    doc.add_paragraph(f"Subtotal: {totals.subtotal}")
    doc.add_paragraph(f"{totals.discount_label}: {totals.discount}")
    doc.add_paragraph(f"Total Amount: {totals.total}")

    if document.delivery_date:
        doc.add_paragraph(f"Delivery Date: {document.delivery_date}")

    if document.notes:
        doc.add_heading("Notes", level=2)
        doc.add_paragraph(document.notes)

    signatures = doc.add_table(rows=2, cols=len(document.signatures))
    for i, label in enumerate(document.signatures):
        signatures.rows[0].cells[i].text = "\n\n____________________"
        signatures.rows[1].cells[i].text = label


def build_bill_doc(
        document: PrintableDocument,
        template_path: Optional[Union[str, Path]] = None,
        with_barcode: bool = False,
        barcode_dir: Optional[Union[str, Path]] = None,
):
    """
    Lay `document` out as a python-docx Document.

    With `template_path`, the template's header placeholders are filled (see
    build_placeholder_map) and the item tables are appended after its content.
    Without one, a plain layout with its own header is produced.
    `with_barcode` adds a Code128 image of the invoice number.
    """
    if template_path:
        doc = Document(str(template_path))
        replace_placeholders_in_document(doc, build_placeholder_map(document))
        table_style = None
    else:
        doc = Document()
        _write_header(doc, document)
        table_style = "Table Grid"

    if with_barcode:
        img_path = ensure_barcode_image(document.invoice_number, barcode_dir or BARCODE_IMG_DIR)
        doc.add_picture(img_path, width=Inches(2.0))

    fabric, stitching = document.sections
    _write_section(doc, fabric, stitching=False, table_style=table_style)
    _write_section(doc, stitching, stitching=True, table_style=table_style)
    _write_footer(doc, document)
    return doc


def generate_bill_doc(
        document: PrintableDocument,
        output_path: Union[str, Path],
        template_path: Optional[Union[str, Path]] = None,
        with_barcode: bool = False,
) -> str:
    """Write the bill to `output_path` and return the path."""
    doc = build_bill_doc(document, template_path=template_path, with_barcode=with_barcode)

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    doc.save(str(output_path))

    logger.info("Bill %s written to %s", document.invoice_number, output_path)
    return str(output_path)


def bill_doc_bytes(
        document: PrintableDocument,
        template_path: Optional[Union[str, Path]] = None,
        with_barcode: bool = False,
        barcode_dir: Optional[Union[str, Path]] = None,
) -> bytes:
    """The bill as .docx bytes, for a download button."""
    buffer = io.BytesIO()
    doc = build_bill_doc(document, template_path=template_path, with_barcode=with_barcode, barcode_dir=barcode_dir)
    doc.save(buffer)
    return buffer.getvalue()
