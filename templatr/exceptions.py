"""
Exception hierarchy for the composition engine.

Interactive editing never raises: pointer input is clamped. These errors
cover image loading and the geometry guards in front of the scaling math.
"""

from typing import Optional, Dict, Any


class TemplatrError(Exception):
    """Base exception for all composition errors"""

    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.cause = cause
        self.context = context or {}

    def __str__(self):
        parts = [super().__str__()]
        if self.cause:
            parts.append(f" (caused by: {type(self.cause).__name__}: {str(self.cause)})")
        if self.context:
            parts.append(f" Context: {self.context}")
        return "".join(parts)


class ImageDecodeError(TemplatrError):
    """A source image could not be fetched or decoded"""

    def __init__(self, image_ref: str, message: str = "Image could not be decoded", **kwargs):
        super().__init__(message, **kwargs)
        self.image_ref = image_ref


class DegenerateGeometryError(TemplatrError, ValueError):
    """A container or natural image size is zero or negative"""
    pass


class TemplateCardinalityError(TemplatrError, ValueError):
    """Question image count does not match the template type"""
    pass
