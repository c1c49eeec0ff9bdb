"""Maskworks - interactive inpainting mask editor for AI image editing."""

__version__ = "0.1.0"

from maskworks.core.config import MaskworksConfig, config
from maskworks.core.session import MaskEditorSession

__all__ = [
    "MaskEditorSession",
    "MaskworksConfig",
    "config",
]
