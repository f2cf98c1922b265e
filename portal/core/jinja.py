"""Shared Jinja2 environment for the portal's HTML pages."""

from __future__ import annotations

from typing import Any

from fastapi.templating import Jinja2Templates

from .config import settings


def _initial(value: Any, fallback: str = "U") -> str:
    """First character of a display name, used for the avatar placeholder."""

    text = str(value or "").strip()
    return text[0] if text else fallback


def get_templates() -> Jinja2Templates:
    """Create a ``Jinja2Templates`` instance with our standard filters registered."""

    templates = Jinja2Templates(directory=str(settings.templates_dir))
    templates.env.filters["initial"] = _initial
    templates.env.globals["app_name"] = settings.APP_NAME
    return templates
