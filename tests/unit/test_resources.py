"""
Unit tests for resource resolution.
"""

import os
from pathlib import Path

import pytest

from webworker.handlers.resources import ResourceResolver, NOT_FOUND_PAGE


class TestResourceResolver:
    """Tests for ResourceResolver.resolve()."""

    def test_existing_file_exact_bytes(self, content_root: Path):
        """Test that a file resolves to its exact bytes, markers untouched."""
        resolver = ResourceResolver(content_root)
        expected = (content_root / "index.html").read_bytes()

        assert resolver.resolve("index.html") == expected
        assert b"<cs371date>" in resolver.resolve("index.html")

    def test_binary_content_preserved(self, tmp_path: Path):
        """Test that non-text bytes come back unchanged."""
        data = bytes(range(256)) + "naïve ☕".encode("utf-8")
        (tmp_path / "blob.bin").write_bytes(data)

        assert ResourceResolver(tmp_path).resolve("blob.bin") == data

    def test_nested_path(self, content_root: Path):
        """Test a file in a subdirectory."""
        assert ResourceResolver(content_root).resolve("docs/guide.html") == b"<h1>Guide</h1>"

    def test_missing_file(self, content_root: Path):
        """Test that a missing file gives the not-found page."""
        assert ResourceResolver(content_root).resolve("missing.html") == NOT_FOUND_PAGE

    @pytest.mark.parametrize("path", [None, ""])
    def test_no_path(self, content_root: Path, path):
        """Test that a request without a path gives the not-found page."""
        assert ResourceResolver(content_root).resolve(path) == NOT_FOUND_PAGE

    def test_directory(self, content_root: Path):
        """Test that a directory is not a resource."""
        assert ResourceResolver(content_root).resolve("docs") == NOT_FOUND_PAGE

    def test_invalid_path(self, content_root: Path):
        """Test that an embedded NUL is rejected, not raised."""
        assert ResourceResolver(content_root).resolve("bad\x00.html") == NOT_FOUND_PAGE

    @pytest.mark.skipif(
        hasattr(os, "geteuid") and os.geteuid() == 0,
        reason="root can read any file",
    )
    def test_unreadable_file(self, content_root: Path):
        """Test that a permission error gives the not-found page."""
        secret = content_root / "secret.html"
        secret.write_bytes(b"secret")
        secret.chmod(0)
        try:
            assert ResourceResolver(content_root).resolve("secret.html") == NOT_FOUND_PAGE
        finally:
            secret.chmod(0o644)

    def test_not_found_page_wording(self):
        """Test the not-found page content."""
        assert b"404 error" in NOT_FOUND_PAGE
        assert NOT_FOUND_PAGE.startswith(b"<html>")

    def test_custom_not_found_page(self, content_root: Path):
        """Test overriding the not-found payload."""
        resolver = ResourceResolver(content_root, not_found_page=b"gone")
        assert resolver.resolve("missing.html") == b"gone"


class TestPathConfinement:
    """Tests for content root confinement."""

    @pytest.fixture
    def outside_file(self, tmp_path: Path) -> Path:
        """A site directory with a readable file next to it."""
        site = tmp_path / "site"
        site.mkdir()
        (site / "page.html").write_bytes(b"inside")
        outside = tmp_path / "outside.html"
        outside.write_bytes(b"outside")
        return outside

    def test_traversal_rejected(self, outside_file: Path):
        """Test that .. cannot leave the content root."""
        resolver = ResourceResolver(outside_file.parent / "site")
        assert resolver.resolve("../outside.html") == NOT_FOUND_PAGE

    def test_absolute_path_rejected(self, outside_file: Path):
        """Test that an absolute path (from GET //abs) is rejected."""
        resolver = ResourceResolver(outside_file.parent / "site")
        assert resolver.resolve(str(outside_file)) == NOT_FOUND_PAGE

    def test_dotdot_inside_root_allowed(self, outside_file: Path):
        """Test that .. staying inside the root still resolves."""
        site = outside_file.parent / "site"
        (site / "sub").mkdir()
        resolver = ResourceResolver(site)
        assert resolver.resolve("sub/../page.html") == b"inside"

    def test_unconfined_allows_traversal(self, outside_file: Path):
        """Test that confinement can be switched off."""
        resolver = ResourceResolver(outside_file.parent / "site", confine_to_root=False)
        assert resolver.resolve("../outside.html") == b"outside"

    def test_symlink_loop(self, content_root: Path):
        """Test that a self-referencing symlink gives the not-found page."""
        loop = content_root / "loop.html"
        try:
            os.symlink(loop, loop)
        except (OSError, NotImplementedError):
            pytest.skip("symlinks not supported")

        assert ResourceResolver(content_root).resolve("loop.html") == NOT_FOUND_PAGE

    def test_symlink_loop_unconfined(self, content_root: Path):
        """Test the same loop with confinement off."""
        loop = content_root / "loop.html"
        try:
            os.symlink(loop, loop)
        except (OSError, NotImplementedError):
            pytest.skip("symlinks not supported")

        resolver = ResourceResolver(content_root, confine_to_root=False)
        assert resolver.resolve("loop.html") == NOT_FOUND_PAGE

    def test_utf8_file_name(self, content_root: Path):
        """Test that a non-ASCII file name resolves."""
        (content_root / "café.html").write_bytes(b"<p>cafe</p>")
        assert ResourceResolver(content_root).resolve("café.html") == b"<p>cafe</p>"
