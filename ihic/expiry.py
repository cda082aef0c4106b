"""Expiry classification for item and halal certificate dates.

The same rules run a second time in the browser (see the script embedded by
``ihic.render``); both read their thresholds from the constants below.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

# Fewer days remaining than this: expired
EXPIRED_BEFORE_DAYS = 1
# Fewer days remaining than this: nearly expired, alert the PIC
NEARLY_EXPIRED_BEFORE_DAYS = 15

CLASS_VALID = "valid"
CLASS_EXPIRED = "expired"
CLASS_NOT_APPLICABLE = "na-value"


@dataclass(frozen=True)
class ExpiryStatus:
    display_class: str
    display_text: str = ""
    alert_triggered: bool = False
    alert_message: str = ""
    is_fully_expired: bool = False


NOT_APPLICABLE = ExpiryStatus(display_class=CLASS_NOT_APPLICABLE)


def days_remaining(expiry_date: date, today: Optional[date] = None) -> int:
    """Whole days from ``today`` until ``expiry_date`` (negative once past)."""
    today = today or date.today()
    return (expiry_date - today).days


def alert_message(is_certificate: bool, fully_expired: bool) -> str:
    if fully_expired:
        return "Certificate Expired. Contact PIC" if is_certificate else "Item Expired. Contact PIC"
    return "Certificate Nearly Expired. Contact PIC" if is_certificate else "Nearly Expired. Contact PIC"


def classify(expiry_date: Optional[date],
             is_certificate: bool = False,
             today: Optional[date] = None) -> ExpiryStatus:
    if expiry_date is None:
        return NOT_APPLICABLE

    days = days_remaining(expiry_date, today)
    if days < EXPIRED_BEFORE_DAYS:
        return ExpiryStatus(
            display_class=CLASS_EXPIRED,
            display_text="(Expired)",
            alert_triggered=True,
            alert_message=alert_message(is_certificate, fully_expired=True),
            is_fully_expired=True,
        )
    if days < NEARLY_EXPIRED_BEFORE_DAYS:
        return ExpiryStatus(
            display_class=CLASS_EXPIRED,
            display_text=f"(Expires in {days} days)",
            alert_triggered=True,
            alert_message=alert_message(is_certificate, fully_expired=False),
        )
    return ExpiryStatus(display_class=CLASS_VALID, display_text=f"(Expires in {days} days)")
