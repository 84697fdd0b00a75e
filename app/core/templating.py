"""Shared Jinja2 environment for the report page and the report email."""

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

jinja_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def _thousands(value) -> str:
    if value is None:
        return "—"
    return f"{value:,.0f}"


jinja_env.filters["thousands"] = _thousands
