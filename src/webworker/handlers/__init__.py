"""
=============================================================================
CONTENT HANDLERS
=============================================================================

What gets served, independent of how it travels:

1. ResourceResolver
   - Reads files below a content root
   - Falls back to NOT_FOUND_PAGE on any failure
   - Path traversal protection (on by default)

2. TemplateRenderer
   - Replaces <cs371date> and <cs371server> markers
   - Single forward scan, every occurrence replaced

=============================================================================
USAGE
=============================================================================

    from webworker.handlers import ResourceResolver, TemplateRenderer

    resolver = ResourceResolver("./site")
    renderer = TemplateRenderer()

    page = renderer.render(resolver.resolve("index.html"))

=============================================================================
"""

from .resources import ResourceResolver, NOT_FOUND_PAGE
from .template import (
    TemplateRenderer,
    render,
    DATE_MARKER,
    SERVER_MARKER,
    SERVER_DESCRIPTION,
)

__all__ = [
    "ResourceResolver",
    "NOT_FOUND_PAGE",
    "TemplateRenderer",
    "render",
    "DATE_MARKER",
    "SERVER_MARKER",
    "SERVER_DESCRIPTION",
]
