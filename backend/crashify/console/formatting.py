"""Display helpers shared by the console screens."""

from datetime import date, datetime
from typing import Any, Optional

STATUS_LABELS = {
    "pending": "Pending",
    "processing": "Processing",
    "completed": "Completed",
    "cancelled": "Cancelled",
}


def _parse_date(value: Any) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        return None
    text = str(value).strip().replace("Z", "+00:00")
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def format_date(value: Any) -> str:
    """dd/mm/yyyy, or the raw text when it is not a recognisable date."""
    parsed = _parse_date(value)
    if parsed is None:
        return str(value) if value else ""
    return parsed.strftime("%d/%m/%Y")


def format_odometer(value: Any) -> str:
    if value is None or value == "":
        return ""
    return f"{int(value):,} km"


def format_currency(value: Any) -> str:
    if value is None or value == "":
        return ""
    amount = float(value)
    if amount.is_integer():
        return f"${amount:,.0f}"
    return f"${amount:,.2f}"


def status_label(status: Optional[str]) -> str:
    return STATUS_LABELS.get(status or "", status or "")
