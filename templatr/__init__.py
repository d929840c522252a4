"""Templatr composition engine.

Combines a background image with a question image, lets a user adjust the
placement interactively, and renders the result as a raster image or as an
editable slide deck.
"""

__version__ = "0.1.0"
