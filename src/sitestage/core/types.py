"""Core type definitions."""

from typing import NewType

# URL path for routing (e.g., "/guide/", "/blog/post/")
# Distinct from filesystem Path to catch type mismatches
URLPath = NewType("URLPath", str)

# Sentinel weight for pages without an integer `weight` field
MAX_WEIGHT = 2**63 - 1
