"""Frontmatter parsing for content sources.

A source may start with a YAML block fenced by `---` or a TOML block
fenced by `+++`:

    ---
    title: Install
    weight: 20
    ---
    Body text...
"""

import re
import tomllib
from dataclasses import dataclass, field
from typing import Any

import yaml

_FRONTMATTER = re.compile(
    r"\A(?P<fence>\+\+\+|---)\r?\n(?P<frontmatter>.*?)\r?\n(?P=fence)(?:\r?\n|\Z)",
    re.DOTALL,
)


class FrontMatterError(ValueError):
    """Raised when a frontmatter block cannot be decoded."""


@dataclass(frozen=True)
class FrontMatter:
    """Parsed frontmatter and remaining body."""

    metadata: dict[str, Any] = field(default_factory=dict)
    body: str = ""


def parse_frontmatter(source: str) -> FrontMatter:
    """Split a source into frontmatter metadata and body.

    Args:
        source: Raw content source

    Returns:
        FrontMatter with decoded metadata (empty when no block is present)

    Raises:
        FrontMatterError: If the block is invalid or not a key/value mapping
    """
    match = _FRONTMATTER.match(source)
    if match is None:
        return FrontMatter(metadata={}, body=source)

    raw = match.group("frontmatter")
    body = source[match.end() :]

    if match.group("fence") == "+++":
        try:
            decoded: object = tomllib.loads(raw)
        except tomllib.TOMLDecodeError as e:
            raise FrontMatterError(f"Invalid TOML frontmatter: {e}") from e
    else:
        try:
            decoded = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise FrontMatterError(f"Invalid YAML frontmatter: {e}") from e

    if decoded is None:
        decoded = {}
    if not isinstance(decoded, dict):
        raise FrontMatterError("Invalid frontmatter: expected a key/value mapping")

    return FrontMatter(metadata=decoded, body=body)
