"""Bundled package assets.

Locates the default templates shipped inside the sitestage package.
"""

from importlib.resources import files
from pathlib import Path


def get_default_templates_dir() -> Path:
    """Return path to the bundled default templates.

    Raises:
        FileNotFoundError: If the templates are missing from the installation.
    """
    templates = files("sitestage").joinpath("templates")
    if not templates.is_dir():
        msg = "Bundled templates not found. Reinstall sitestage."
        raise FileNotFoundError(msg)
    return Path(str(templates))
