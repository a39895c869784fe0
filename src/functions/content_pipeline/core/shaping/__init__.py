"""Stage-one content shaping."""

from .content_shaper import DATA_BACKED_TYPES, SOURCE_DATA_KEY, TemplateContentShaper

__all__ = ["DATA_BACKED_TYPES", "SOURCE_DATA_KEY", "TemplateContentShaper"]
