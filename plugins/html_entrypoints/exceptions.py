from typing import List, Optional

from mkdocs.exceptions import PluginError


class HtmlEntrypointsError(PluginError):
    """Base class for errors that abort HTML generation."""


class HtmlConfigError(HtmlEntrypointsError):
    """A configured HTML file entry is invalid."""


class PreconditionError(HtmlEntrypointsError):
    """The bundler build was not configured the way the plugin requires."""


class UnmatchedEntryPointError(HtmlEntrypointsError):
    """One or more requested entry points produced no output."""

    def __init__(self, entry_points: List[str], unmatched: Optional[List[str]] = None):
        self.entry_points = list(entry_points)
        self.unmatched = list(unmatched if unmatched is not None else entry_points)
        super().__init__(f"Found no match for {', '.join(self.entry_points)}")


class TemplateRenderError(HtmlEntrypointsError):
    """The HTML template could not be rendered with the configured `define`."""
