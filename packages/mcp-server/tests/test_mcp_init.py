"""Tests for leadpath_mcp package initialization."""

from __future__ import annotations


def test_version_defined():
    """Test that __version__ is defined."""
    from leadpath_mcp import __version__

    assert isinstance(__version__, str)
    assert __version__ == "0.1.0"


def test_server_entry_point():
    """Test that the server module exposes the CLI entry point."""
    from leadpath_mcp import server

    assert callable(server.main)
    assert server.mcp is not None
