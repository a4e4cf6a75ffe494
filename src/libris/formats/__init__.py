# ABOUTME: Metadata extraction plugins for supported book file formats.
# ABOUTME: Exports the plugin protocol, registry and extraction errors.

from libris.formats.plugin import (
    BookReadingError,
    ExtractionFailed,
    ExtractorNotFound,
    FormatPlugin,
    PluginCollection,
    default_plugins,
)

__all__ = [
    "BookReadingError",
    "ExtractionFailed",
    "ExtractorNotFound",
    "FormatPlugin",
    "PluginCollection",
    "default_plugins",
]
