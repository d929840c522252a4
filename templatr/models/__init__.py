"""Pydantic data types for placements, crops and templates"""

from .geometry import ContainerContext, CropRegion, PixelRect, Placement, Size
from .template import ComposablePair, SlideObject, SlideObjects, TemplateRequest, TemplateType

__all__ = [
    'ContainerContext',
    'CropRegion',
    'PixelRect',
    'Placement',
    'Size',
    'ComposablePair',
    'SlideObject',
    'SlideObjects',
    'TemplateRequest',
    'TemplateType'
]
