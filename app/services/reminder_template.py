# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Expiry reminder email content."""
from datetime import date
from html import escape
from typing import Optional

SUBJECT_TEMPLATE = "Your membership expires on {end_date}"

BODY_TEMPLATE = """\
<html>
  <body>
    <p>Hi {first_name},</p>
    <p>This is a friendly reminder that your membership expires on
       <strong>{end_date}</strong>.</p>
    <p>To keep your access without interruption, please renew before that date.
       If you have already renewed, you can ignore this message.</p>
    <p>See you soon!</p>
  </body>
</html>
"""


def format_end_date(end_date: date) -> str:
    """Long form, e.g. 'January 5, 2025'."""
    return f"{end_date:%B} {end_date.day}, {end_date.year}"


def capitalize_first_name(first_name: Optional[str]) -> str:
    if not first_name:
        return ""
    name = str(first_name).strip()
    return name[:1].upper() + name[1:].lower()


def render_reminder(first_name: Optional[str], end_date: date) -> tuple[str, str]:
    """Return (subject, html body) for one member."""
    formatted = format_end_date(end_date)
    subject = SUBJECT_TEMPLATE.format(end_date=formatted)
    body = BODY_TEMPLATE.format(
        first_name=escape(capitalize_first_name(first_name)),
        end_date=formatted,
    )
    return subject, body
