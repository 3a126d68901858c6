# tailor_bill/domain/errors.py

from typing import List, Optional

DUPLICATE_INVOICE_NUMBER = "duplicate_invoice_number"


class BillingError(Exception):
    """Base class for everything the billing engine raises."""


class ValidationFailed(BillingError):
    """
    A line item field is invalid (empty description, bad price, bad qty).
    Recoverable: the caller shows `message` next to `field` and keeps its state.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field


class UnknownGarmentType(ValidationFailed):
    def __init__(self, raw_label: str):
        super().__init__(f"Unknown garment type: {raw_label!r}", field="clothing_type")
        self.raw_label = raw_label


class MeasurementsIncomplete(BillingError):
    """
    Carries the labels of the required measurements that are still empty,
    in the order the garment schema declares them.
    """

    def __init__(self, missing_labels: List[str]):
        self.missing_labels = list(missing_labels)
        super().__init__("Missing measurements: " + ", ".join(self.missing_labels))


class PersistenceRejected(BillingError):
    """
    The order header insert failed. Nothing was stored; the draft is intact.
    """

    def __init__(self, message: str, sub_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.sub_code = sub_code


class InvoiceNumberCollision(PersistenceRejected):
    def __init__(self, invoice_number: str):
        super().__init__(
            f"Invoice number {invoice_number} already exists",
            sub_code=DUPLICATE_INVOICE_NUMBER,
        )
        self.invoice_number = invoice_number


class PartialPersistence(BillingError):
    """
    The order header was stored but its line items were not.

    `invoice` is the persisted invoice (with `id` and `created_at`); retry the
    item insert against it instead of re-submitting the whole order.
    """

    def __init__(self, order_id: str, invoice, message: str):
        super().__init__(f"Order {order_id} stored without items: {message}")
        self.order_id = order_id
        self.invoice = invoice
        self.message = message
