# tailor_bill/utils/barcode.py

from pathlib import Path
from typing import Union

from barcode import Code128
from barcode.writer import ImageWriter

# Folder to store generated barcode images
BARCODE_IMG_DIR = Path("barcodes")


def ensure_barcode_image(barcode_text: str, directory: Union[str, Path] = BARCODE_IMG_DIR) -> str:
    """
    Generate a Code128 barcode PNG for `barcode_text` (e.g. an invoice number)
    unless it is already on disk. Returns the path to the PNG file.
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)

    filename = directory / f"{barcode_text}.png"
    if filename.exists():
        return str(filename)

    # python-barcode appends the extension itself
    code = Code128(barcode_text, writer=ImageWriter())
    full = Path(code.save(str(filename.with_suffix(""))))

    if full != filename and full.exists():
        full.rename(filename)

    return str(filename)
