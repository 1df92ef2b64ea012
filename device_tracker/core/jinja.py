"""Builds the Jinja2 environment used for the single device page."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from fastapi.templating import Jinja2Templates


@lru_cache(maxsize=4)
def get_templates(directory: str | Path) -> Jinja2Templates:
    """Create (and cache) a ``Jinja2Templates`` instance for ``directory``."""

    return Jinja2Templates(directory=str(directory))
