"""Style presets for compiled diagrams."""

import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StylePreset:
    """Colors and stroke settings applied to every compiled element."""
    name: str
    palette: tuple[str, ...]
    stroke_color: str = "#1e1e1e"
    stroke_width: float = 2
    roughness: float = 1
    background_color: Optional[str] = None  # Overrides the document background

    def fill_for(self, index: int) -> str:
        """Fill color for the node at `index`, cycling through the palette."""
        return self.palette[index % len(self.palette)]


PRESETS: dict[str, StylePreset] = {
    "default": StylePreset(
        name="default",
        palette=("#a5d8ff", "#b2f2bb", "#ffec99", "#ffc9c9", "#d0bfff"),
    ),
    "colorful": StylePreset(
        name="colorful",
        palette=("#ff6b6b", "#4ecdc4", "#45b7d1", "#96ceb4", "#ffeaa7"),
    ),
    "minimal": StylePreset(
        name="minimal",
        palette=("#f8f9fa", "#e9ecef", "#dee2e6", "#ced4da", "#adb5bd"),
        stroke_width=1,
        roughness=0,
    ),
    "blueprint": StylePreset(
        name="blueprint",
        palette=("#1e3a5f", "#2d5a87", "#3d7ab0", "#4d9ad8", "#5dbaff"),
        stroke_color="#ffffff",
        background_color="#0d1b2a",
    ),
}


def get_preset(name: Optional[str]) -> StylePreset:
    """Look up a preset by name, falling back to "default"."""
    if name is None:
        return PRESETS["default"]
    preset = PRESETS.get(name)
    if preset is None:
        logger.warning("Unknown style preset %r, using 'default'", name)
        return PRESETS["default"]
    return preset
