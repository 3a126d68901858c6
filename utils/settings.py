# tailor_bill/utils/settings.py

import os
from decimal import Decimal
from typing import Optional

from dotenv import load_dotenv

from domain.models import BusinessProfile

load_dotenv()


def get_schema() -> str:
    return os.getenv("SCHEMA") or "public"


def get_discount_rate(default: Decimal = Decimal("10")) -> Decimal:
    raw = os.getenv("DISCOUNT_RATE")
    if raw is None or raw.strip() == "":
        return default
    return Decimal(raw.strip())


def get_business_profile() -> BusinessProfile:
    return BusinessProfile(
        name=os.getenv("BUSINESS_NAME") or "A1 Tailoring Services",
        address=os.getenv("BUSINESS_ADDRESS", ""),
        phone=os.getenv("BUSINESS_PHONE", ""),
        email=os.getenv("BUSINESS_EMAIL", ""),
        tax_number=os.getenv("BUSINESS_TAX_NUMBER", ""),
    )


def get_bill_template_path() -> Optional[str]:
    return os.getenv("BILL_TEMPLATE_PATH") or None
