"""
Render bridge implementations
"""

from .text_bridge import TextRenderBridge, TextRow

__all__ = ["TextRenderBridge", "TextRow"]
