"""
=============================================================================
RESOURCE RESOLUTION
=============================================================================

Maps a resource path to the bytes that will be served.

    "index.html"        →  contents of <content_root>/index.html
    "missing.html"      →  NOT_FOUND_PAGE
    None / ""           →  NOT_FOUND_PAGE

Resolution never fails from the caller's point of view. A missing file,
a directory, a permission problem or an invalid path all produce the same
not-found page, which is then served with a normal 200 status.

=============================================================================
SECURITY: PATH TRAVERSAL
=============================================================================

    GET /../../etc/passwd HTTP/1.1

With confinement on (the default) we resolve the full path, following ".."
and symlinks, and check it is still inside content_root:

    full_path = (root / path).resolve()
    full_path.relative_to(root)   # raises ValueError if outside

Escaping paths get NOT_FOUND_PAGE, same as a missing file, so the
response does not reveal whether the outside file exists.

With confine_to_root=False the path is read as given.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Optional, Union


logger = logging.getLogger(__name__)


NOT_FOUND_PAGE = (
    b"<html><head></head><body>\n"
    b"<h2>404 error: The page you were looking for cannot be found.</h2>\n"
    b"<h3>Sorry</h3>\n"
    b"</body></html>\n"
)
"""Served whenever a resource cannot be resolved."""


class ResourceResolver:
    """
    Resolves resource paths against a content root.

    Holds only configuration; safe to share between threads.
    """

    def __init__(
        self,
        content_root: Union[str, Path] = ".",
        confine_to_root: bool = True,
        not_found_page: bytes = NOT_FOUND_PAGE,
    ):
        """
        Initialize the resolver.

        Args:
            content_root: Directory paths are resolved against.
            confine_to_root: Refuse paths that resolve outside content_root.
            not_found_page: Payload for every resolution failure.
        """
        # Resolve to absolute path (the confinement check compares against it)
        self.content_root = Path(content_root).resolve()
        self.confine_to_root = confine_to_root
        self.not_found_page = not_found_page

    def resolve(self, path: Optional[str], log: Optional[logging.Logger] = None) -> bytes:
        """
        Return the bytes of the named resource, or the not-found page.

        Args:
            path: Resource path relative to the content root, or None if
                  the request never named one.
            log: Logger to report through (defaults to the module logger).

        Returns:
            Exact file bytes, or not_found_page.
        """
        log = log or logger

        if not path:
            log.info("No resource requested, serving not-found page")
            return self.not_found_page

        try:
            full_path = self._locate(path)
        except (ValueError, OSError, RuntimeError) as e:
            # Escaped the content root, invalid path, or a symlink loop
            # (RuntimeError before Python 3.13, OSError from 3.13)
            log.warning(f"Rejected resource path {path!r}: {e}")
            return self.not_found_page

        try:
            content = full_path.read_bytes()
        except OSError as e:
            log.info(f"Resource not found: {path} ({e.__class__.__name__})")
            return self.not_found_page

        log.debug(f"Resolved {path} to {full_path} ({len(content)} bytes)")
        return content

    def _locate(self, path: str) -> Path:
        """
        Build the filesystem path for a resource path.

        Raises:
            ValueError: If the path is invalid or escapes the content root.
            OSError, RuntimeError: If resolving runs into a symlink loop.
        """
        if "\x00" in path:
            raise ValueError("embedded null byte")

        if not self.confine_to_root:
            return self.content_root / path

        # resolve() follows symlinks and normalizes .. components
        full_path = (self.content_root / path).resolve()
        full_path.relative_to(self.content_root)
        return full_path
