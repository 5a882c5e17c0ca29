"""
Component service.
Assembles site pages by injecting the shared header and footer fragments.
"""

import asyncio
import re
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from fxwidget.core.config import settings
from fxwidget.core.exceptions import PageNotFoundError
from fxwidget.core.logging import get_logger
from fxwidget.services.base_service import BaseService

logger = get_logger(__name__)

DEFAULT_COMPONENTS: Tuple[Tuple[str, str], ...] = (
    ("header-placeholder", "/components/header.html"),
    ("footer-placeholder", "/components/footer.html"),
)

_SCRIPT_RE = re.compile(r"<script\b[^>]*>(.*?)</script\s*>", re.IGNORECASE | re.DOTALL)
_HEADER_RE = re.compile(r"<header\b.*?</header\s*>", re.IGNORECASE | re.DOTALL)
_ANCHOR_RE = re.compile(r"<a\b[^>]*>", re.IGNORECASE)
_HREF_RE = re.compile(r"\bhref\s*=\s*\"([^\"]*)\"", re.IGNORECASE)
_CLASS_RE = re.compile(r"\bclass\s*=\s*\"([^\"]*)\"", re.IGNORECASE)
_BODY_CLOSE_RE = re.compile(r"</body\s*>", re.IGNORECASE)
# "../pages/a.html" and "./pages/a.html" both compare as "/pages/a.html"
_RELATIVE_PREFIX_RE = re.compile(r"^\.{1,2}(?=/)")


def get_base_path(request_path: str) -> str:
    """Relative prefix from the current page back to the site root."""
    if "/pages/" in request_path:
        return ".."
    return "."


def rewrite_root_links(html: str, base_path: str) -> str:
    """Make root-relative ``href``/``src`` attributes relative to ``base_path``."""
    html = html.replace('href="/', f'href="{base_path}/')
    html = html.replace('src="/', f'src="{base_path}/')
    return html


def extract_scripts(html: str) -> Tuple[str, List[str]]:
    """Strip ``<script>`` elements and return their bodies in document order."""
    scripts = [match.group(1) for match in _SCRIPT_RE.finditer(html)]
    return _SCRIPT_RE.sub("", html), scripts


def append_scripts(html: str, scripts: Sequence[str]) -> str:
    """Add inline scripts at the end of ``<body>`` (or of the document)."""
    tags = "".join(f"<script>{body}</script>" for body in scripts if body.strip())
    if not tags:
        return html

    closing = list(_BODY_CLOSE_RE.finditer(html))
    if not closing:
        return html + tags
    position = closing[-1].start()
    return html[:position] + tags + html[position:]


def inject_into_placeholder(html: str, placeholder_id: str, fragment: str) -> Optional[str]:
    """
    Replace the content of the element whose id is ``placeholder_id``.

    Returns:
        The new document, or None when no such element exists
    """
    opening = re.search(
        rf"<(?P<tag>[a-zA-Z][\w-]*)\b[^>]*\bid\s*=\s*[\"']{re.escape(placeholder_id)}[\"'][^>]*?(?P<selfclose>/?)>",
        html,
    )
    if not opening:
        return None

    tag = opening.group("tag")
    content_start = opening.end()
    if opening.group("selfclose"):
        return f"{html[:opening.start()]}{html[opening.start():content_start - 2]}>{fragment}</{tag}>{html[content_start:]}"

    # Walk nested elements of the same tag to find the matching close
    tag_re = re.compile(rf"<(/?){re.escape(tag)}\b[^>]*>", re.IGNORECASE)
    depth = 1
    for match in tag_re.finditer(html, content_start):
        depth += -1 if match.group(1) else 1
        if depth == 0:
            return html[:content_start] + fragment + html[match.start():]

    # Unclosed placeholder: treat the rest of the document as its content
    return html[:content_start] + fragment


def _highlight_anchor(anchor: str, current_path: str) -> str:
    href_match = _HREF_RE.search(anchor)
    target = _RELATIVE_PREFIX_RE.sub("", href_match.group(1)) if href_match else ""
    if not target or not current_path.endswith(target):
        return anchor

    class_match = _CLASS_RE.search(anchor)
    if not class_match:
        return anchor[:2] + ' class="text-primary"' + anchor[2:]

    classes = [name for name in class_match.group(1).split() if name != "text-gray-700"]
    if "text-primary" not in classes:
        classes.append("text-primary")
    return f'{anchor[:class_match.start()]}class="{" ".join(classes)}"{anchor[class_match.end():]}'


def highlight_current_page(html: str, current_path: str) -> str:
    """Mark header navigation links that point at the current page."""
    def _rewrite_header(header: re.Match) -> str:
        return _ANCHOR_RE.sub(lambda anchor: _highlight_anchor(anchor.group(0), current_path), header.group(0))

    return _HEADER_RE.sub(_rewrite_header, html)


class ComponentService(BaseService):
    """Service that serves site pages with shared components injected."""

    def __init__(
        self,
        site_dir: Optional[str] = None,
        components: Sequence[Tuple[str, str]] = DEFAULT_COMPONENTS,
    ):
        self.site_dir = Path(site_dir or settings.SITE_DIR).resolve()
        self.components = tuple(components)

    def _resolve(self, relative_path: str) -> Path:
        path = (self.site_dir / relative_path.lstrip("/")).resolve()
        if path != self.site_dir and self.site_dir not in path.parents:
            raise PageNotFoundError(relative_path)
        return path

    async def read_file(self, relative_path: str) -> str:
        """Read a site file as text without blocking the event loop."""
        path = self._resolve(relative_path)
        return await asyncio.to_thread(path.read_text, encoding="utf-8")

    async def load_component(
        self,
        html: str,
        placeholder_id: str,
        component_path: str,
        base_path: str,
        current_path: str,
    ) -> str:
        """
        Inject one component into ``html``.

        A missing placeholder leaves the page as is; a component that cannot
        be read is logged and also leaves the page as is.
        """
        if inject_into_placeholder(html, placeholder_id, "") is None:
            return html

        try:
            fragment = await self.read_file(component_path)
        except (OSError, UnicodeDecodeError, PageNotFoundError) as e:
            logger.error(f"Error loading component: Failed to load {component_path}", extra={"error": repr(e)})
            return html

        fragment = rewrite_root_links(fragment, base_path)
        fragment, scripts = extract_scripts(fragment)

        html = inject_into_placeholder(html, placeholder_id, fragment)
        html = append_scripts(html, scripts)
        return highlight_current_page(html, current_path)

    @staticmethod
    def resolve_page(request_path: str) -> str:
        """Map a request path to a file under the site directory."""
        relative = request_path.strip("/")
        if not relative:
            return "index.html"
        if not Path(relative).suffix:
            relative = f"{relative}.html"
        return relative

    async def render_page(self, request_path: str) -> str:
        """
        Load a page and inject every configured component.

        Raises:
            PageNotFoundError: when the page does not exist
        """
        relative = self.resolve_page(request_path)
        try:
            html = await self.read_file(relative)
        except (OSError, UnicodeDecodeError) as e:
            raise PageNotFoundError(request_path) from e

        base_path = get_base_path(request_path)
        for placeholder_id, component_path in self.components:
            html = await self.load_component(html, placeholder_id, component_path, base_path, request_path)
        return html
