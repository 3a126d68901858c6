# tailor_bill/services/invoice_number.py

import re
from datetime import datetime

INVOICE_NUMBER_RE = re.compile(r"INV-[0-9]{6}-[0-9]{6}")


def next_invoice_number(now: datetime) -> str:
    """
    INV-YYYYMM-NNNNNN where NNNNNN are the last 6 digits of `now` in epoch
    milliseconds.

    Same `now` -> same number. Numbers are NOT unique across processes or
    within the same 1000-second window; order_service.submit_invoice() retries
    with a fresh number when the database rejects a duplicate.
    """
    millis = int(now.timestamp()) * 1000 + now.microsecond // 1000
    suffix = str(millis)[-6:].zfill(6)
    return f"INV-{now.year:04d}{now.month:02d}-{suffix}"


def is_valid_invoice_number(value: str) -> bool:
    return isinstance(value, str) and INVOICE_NUMBER_RE.fullmatch(value) is not None
