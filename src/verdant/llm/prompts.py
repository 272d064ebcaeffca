"""Prompt templates shipped with the package, rendered with Jinja2."""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

_TEMPLATE_DIR = Path(__file__).parent.parent / "templates"

# Missing template variables raise instead of rendering empty
_env = Environment(
    loader=FileSystemLoader(str(_TEMPLATE_DIR)),
    trim_blocks=True,
    lstrip_blocks=True,
    undefined=StrictUndefined,
)


def render(template_name: str, **context: object) -> str:
    """Render a prompt template and strip surrounding whitespace."""
    return _env.get_template(template_name).render(**context).strip()
