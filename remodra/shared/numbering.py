"""Human-readable document numbers"""

import random
from datetime import datetime
from typing import Optional


def _document_number(prefix: str, now: Optional[datetime] = None) -> str:
    now = now or datetime.utcnow()
    return f"{prefix}-{now.strftime('%Y%m')}-{random.randint(100, 999)}"


def generate_invoice_number(now: Optional[datetime] = None) -> str:
    """OT-YYYYMM-NNN"""
    return _document_number("OT", now)


def generate_estimate_number(now: Optional[datetime] = None) -> str:
    """EST-YYYYMM-NNN"""
    return _document_number("EST", now)
