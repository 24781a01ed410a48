"""Source files: model, classification and loading."""

from stylecheck.source.load import DiscoveryResult, discover_sources, load_source
from stylecheck.source.model import FileRole, Language, SourceFile, classify_path

__all__ = [
    "DiscoveryResult",
    "FileRole",
    "Language",
    "SourceFile",
    "classify_path",
    "discover_sources",
    "load_source",
]
