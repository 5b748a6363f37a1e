"""Content graph and manifest loading."""

from .graph import CurriculumGraph
from .manifest import ContentManifest, load_manifest, parse_manifest

__all__ = [
    "CurriculumGraph",
    "ContentManifest",
    "load_manifest",
    "parse_manifest",
]
