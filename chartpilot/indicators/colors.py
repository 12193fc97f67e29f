"""Line color palette and color-name resolution."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class PaletteColor:
    value: str
    name: str
    category: str


COLOR_PALETTE: tuple[PaletteColor, ...] = (
    # Grays and blues
    PaletteColor("#111827", "Dark Gray", "grays"),
    PaletteColor("#1F2937", "Darker Gray", "grays"),
    PaletteColor("#374151", "Medium Dark Gray", "grays"),
    PaletteColor("#4B5563", "Medium Gray", "grays"),
    PaletteColor("#1E3A8A", "Dark Blue", "blues"),
    PaletteColor("#3B82F6", "Blue", "blues"),
    PaletteColor("#2563EB", "Medium Blue", "blues"),
    PaletteColor("#1D4ED8", "Darker Blue", "blues"),
    # Light blues and purples
    PaletteColor("#60A5FA", "Light Blue", "blues"),
    PaletteColor("#93C5FD", "Lighter Blue", "blues"),
    PaletteColor("#A78BFA", "Purple", "purples"),
    PaletteColor("#8B5CF6", "Medium Purple", "purples"),
    PaletteColor("#7C3AED", "Darker Purple", "purples"),
    PaletteColor("#6D28D9", "Dark Purple", "purples"),
    PaletteColor("#5B21B6", "Very Dark Purple", "purples"),
    PaletteColor("#4C1D95", "Darkest Purple", "purples"),
    # Pinks, reds and oranges
    PaletteColor("#F472B6", "Pink", "pinks"),
    PaletteColor("#EC4899", "Medium Pink", "pinks"),
    PaletteColor("#F87171", "Light Red", "reds"),
    PaletteColor("#EF4444", "Red", "reds"),
    PaletteColor("#DC2626", "Dark Red", "reds"),
    PaletteColor("#F59E0B", "Orange", "oranges"),
    PaletteColor("#D97706", "Dark Orange", "oranges"),
    PaletteColor("#B45309", "Darker Orange", "oranges"),
    # Yellows and greens
    PaletteColor("#FBBF24", "Light Orange/Yellow", "yellows"),
    PaletteColor("#FDE047", "Yellow", "yellows"),
    PaletteColor("#FACC15", "Bright Yellow", "yellows"),
    PaletteColor("#EAB308", "Medium Yellow", "yellows"),
    PaletteColor("#34D399", "Light Green", "greens"),
    PaletteColor("#22D3EE", "Cyan", "cyans"),
    PaletteColor("#10B981", "Green", "greens"),
    PaletteColor("#059669", "Dark Green", "greens"),
)

# Plain color words agents tend to use
COLOR_NAME_MAP: dict[str, str] = {
    "purple": "#A78BFA",
    "blue": "#3B82F6",
    "yellow": "#FDE047",
    "green": "#10B981",
    "red": "#EF4444",
    "orange": "#F59E0B",
    "pink": "#F472B6",
    "cyan": "#22D3EE",
    "gray": "#4B5563",
    "grey": "#4B5563",
}


def normalize_color(color: Optional[str]) -> Optional[str]:
    """Map a plain color word to its palette hex value; hex strings pass through."""
    if not color:
        return color
    return COLOR_NAME_MAP.get(color.strip().lower(), color)


def is_valid_color(color: str) -> bool:
    return any(c.value.lower() == color.lower() for c in COLOR_PALETTE)


def get_color_by_name(name: str) -> Optional[str]:
    """First palette color whose name or category contains ``name``."""
    needle = name.lower()
    for color in COLOR_PALETTE:
        if needle in color.name.lower() or needle in color.category.lower():
            return color.value
    return None
