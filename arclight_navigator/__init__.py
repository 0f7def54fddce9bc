"""Top-level package for the collection context navigator.

Front-ends (CLI, host integrations) should depend on the public API exposed
here rather than importing internal modules directly.
"""

from .core import ContextNavigation, NavigationSettings, Page, initialize, render_page

__version__ = "0.1.0"

__all__: list[str] = [
    "ContextNavigation",
    "NavigationSettings",
    "Page",
    "initialize",
    "render_page",
]
