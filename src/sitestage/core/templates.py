"""Page template rendering with Jinja2.

Project templates take precedence over the templates bundled with the
package, so a project only overrides what it needs.
"""

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from sitestage.assets import get_default_templates_dir
from sitestage.core.context import SiteContext
from sitestage.core.normalization import apply_base_path, optional_string

TEMPLATE_SUFFIX = ".html"


class PageTemplateRenderer:
    """Renders pages into full HTML documents."""

    def __init__(
        self,
        templates_dir: Path | None,
        default_template: str = "page",
        base_path: str | None = None,
    ) -> None:
        """Initialize renderer.

        Args:
            templates_dir: Project templates directory (may be missing)
            default_template: Template used when a page sets no `template`
            base_path: Site base path applied by the `with_base` filter
        """
        search_path = [str(templates_dir)] if templates_dir is not None else []
        search_path.append(str(get_default_templates_dir()))

        self._default_template = default_template
        self._env = Environment(
            loader=FileSystemLoader(search_path),
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._env.filters["with_base"] = lambda url_path: apply_base_path(url_path, base_path)

    @property
    def environment(self) -> Environment:
        return self._env

    def template_name(self, meta: dict[str, Any]) -> str:
        """Resolve the template file for a page's metadata."""
        name = optional_string(meta.get("template")) or self._default_template
        return name if name.endswith(TEMPLATE_SUFFIX) else f"{name}{TEMPLATE_SUFFIX}"

    def render(
        self,
        context: SiteContext,
        content: str,
        *,
        url: str,
        site: Any,
    ) -> str:
        """Render a page.

        Args:
            context: Site context for the page being rendered
            content: Rendered page body HTML
            url: Public page URL with base path applied
            site: Site configuration exposed to templates

        Raises:
            jinja2.TemplateNotFound: If the page template does not exist
        """
        page = context.page
        template = self._env.get_template(self.template_name(page.meta))
        return template.render(
            title=page.title,
            url=url,
            content=Markup(content),
            page=page,
            meta=page.meta,
            site=site,
            ctx=context,
        )
