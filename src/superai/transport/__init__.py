# src/superai/transport/__init__.py
"""
Page capability package.

Exports:
- PageCapability, ElementRef   (interface)
- launch_page                  (default Playwright-backed factory, imported lazily)
"""

from __future__ import annotations

from .base import ElementRef, PageCapability  # noqa: F401

__all__ = [
    "ElementRef",
    "PageCapability",
    "launch_page",
]


async def launch_page(options):
    """Launch a Playwright page; imported on first use so tests never load the engine."""
    from .playwright_page import launch_page as _launch

    return await _launch(options)
