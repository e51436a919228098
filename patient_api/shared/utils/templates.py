# 📄 File: patient_api/shared/utils/templates.py
# 🧭 Purpose (Layman Explanation):
# Fills in the email and document layouts with a patient's details before they are sent.
# 🧪 Purpose (Technical Summary):
# Jinja2 environment over the package's templates directory with HTML autoescaping, plus small
# filters shared by the email and document templates.
# 🔗 Dependencies:
# jinja2
# 🔄 Connected Modules / Calls From:
# Contact, document and welcome email services

from datetime import date
from pathlib import Path
from typing import Any, Dict

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup, escape

TEMPLATES_DIR = Path(__file__).resolve().parent.parent.parent / "templates"


def ordinal_date(value: date) -> str:
    """Format a date as ``19th July, 2025``."""
    day = value.day
    if 3 < day < 21:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix} {value.strftime('%B')}, {value.year}"


def nl2br(value: Any) -> Markup:
    """Escape text and keep its line breaks."""
    return Markup("<br>").join(escape(line) for line in str(value or "").split("\n"))


jinja_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html", "xml"]),
    trim_blocks=True,
    lstrip_blocks=True,
)
jinja_env.filters["ordinal_date"] = ordinal_date
jinja_env.filters["nl2br"] = nl2br


def render_template(template_name: str, context: Dict[str, Any]) -> str:
    """Render a template from the package templates directory."""
    return jinja_env.get_template(template_name).render(**context)
