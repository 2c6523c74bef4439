"""
Color representation shared by materials and presets

A spool is either a solid color or a gradient. Two encodings coexist:
- legacy two-stop: color_hex + gradient_color_hex
- multi-stop: gradient_colors (ordered list of at least two hex strings)

When gradient_colors is present it wins; otherwise the legacy pair is used.
"""
from typing import List, Optional

from sqlalchemy import Column, String, JSON

DEFAULT_COLOR_HEX = "#CCCCCC"


def resolve_color_stops(
    color_hex: Optional[str],
    gradient_color_hex: Optional[str] = None,
    gradient_colors: Optional[List[str]] = None,
) -> List[str]:
    """Ordered hex stops for the given encoding (one stop means solid)"""
    if gradient_colors and len(gradient_colors) >= 2:
        return list(gradient_colors)
    base = color_hex or DEFAULT_COLOR_HEX
    if gradient_color_hex:
        return [base, gradient_color_hex]
    return [base]


class ColorMixin:
    """Columns and helpers for the solid / gradient color model"""

    color_hex = Column(String(7), nullable=False, default=DEFAULT_COLOR_HEX)  # #RRGGBB
    gradient_color_hex = Column(String(7), nullable=True)  # Second stop of legacy two-stop gradients
    gradient_colors = Column(JSON, nullable=True)  # ["#FF6B35", "#F7931E", "#FFD700"]

    @property
    def color_stops(self) -> List[str]:
        return resolve_color_stops(self.color_hex, self.gradient_color_hex, self.gradient_colors)
