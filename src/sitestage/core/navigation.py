"""Navigation tree builder.

Builds navigation trees from section trees for UI presentation.
Navigation is a view layer over the site section hierarchy.
"""

from dataclasses import dataclass, field
from typing import TypedDict

from sitestage.core.page import ContentPage
from sitestage.core.section import Section, resolve_section_path
from sitestage.core.types import URLPath


class NavItemDict(TypedDict, total=False):
    """Dictionary representation of a navigation item."""

    title: str
    path: str | None
    children: list["NavItemDict"]


@dataclass
class NavItem:
    """Navigation item with children for UI tree."""

    title: str
    path: URLPath | None
    children: list["NavItem"] = field(default_factory=list)

    def to_dict(self) -> NavItemDict:
        """Convert to dictionary for JSON serialization."""
        result: NavItemDict = {"title": self.title, "path": self.path}
        if self.children:
            result["children"] = [child.to_dict() for child in self.children]
        return result


def build_navigation(tree: Section, path: str = "") -> list[NavItem]:
    """Build navigation items from a section tree.

    Direct pages come first (section index pages are represented by their
    section item instead), followed by child sections in section order.

    Args:
        tree: Root section to build navigation from
        path: Optional section path to build a subtree for

    Returns:
        List of NavItem trees, empty when the path does not exist
    """
    section = tree.flatten().get(path.strip("/"))
    if section is None:
        return []
    return _build_items(section)


def _build_items(section: Section) -> list[NavItem]:
    items = [
        NavItem(title=page.title, path=URLPath(page.url_path))
        for page in section.pages
        if section.is_root() or page is not section.index
    ]
    for child in section.children.values():
        index = child.index
        items.append(
            NavItem(
                title=child.label,
                path=URLPath(index.url_path) if index is not None else None,
                children=_build_items(child),
            )
        )
    return items


@dataclass
class BreadcrumbItem:
    """Breadcrumb navigation item."""

    title: str
    path: str

    def to_dict(self) -> dict[str, str]:
        """Convert to dictionary for JSON serialization."""
        return {"title": self.title, "path": self.path}


def build_breadcrumbs(tree: Section, page: ContentPage) -> list[BreadcrumbItem]:
    """Build breadcrumbs for a page.

    Starts with "Home" for non-root pages, followed by ancestor sections
    that have an index page. The page itself is not included.
    """
    if page.url_path == "/":
        return []

    breadcrumbs = [BreadcrumbItem(title="Home", path="/")]
    section_path = resolve_section_path(page)
    segments = [segment for segment in section_path.split("/") if segment]
    flat = tree.flatten()
    for depth in range(1, len(segments) + 1):
        section = flat.get("/".join(segments[:depth]))
        if section is None or section.index is None or section.index.slug == page.slug:
            continue
        breadcrumbs.append(BreadcrumbItem(title=section.label, path=section.index.url_path))
    return breadcrumbs
