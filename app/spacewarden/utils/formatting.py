"""Rich console formatting utilities.

Provides consistent formatting for CLI output using Rich.
"""

import re
import sys

from rich.console import Console
from rich.theme import Theme

THEME = Theme(
    {
        "text": "#ffffff",
        "muted": "#b2bec3",
        "bold_header": "bold #69B9A1",
        "border": "#29526d",
        "success": "#03b971",
        "warning": "#f5b332",
        "error": "#f53263",
        "info": "#0ec1c8",
        "removed": "#f53263",
    }
)

_SIZE_UNITS: dict[str, int] = {
    "": 1,
    "B": 1,
    "K": 1024,
    "M": 1024**2,
    "G": 1024**3,
    "T": 1024**4,
}

_SIZE_PATTERN = re.compile(r"^\s*(\d+)\s*([KMGT]?)(?:I?B)?\s*$", re.IGNORECASE)


def _detect_color_system() -> str | None:
    """Detect the best color system for the current terminal.

    Returns "truecolor" for interactive terminals to enable full hex color support,
    None otherwise to let Rich auto-detect.
    """
    if sys.stdout.isatty():
        return "truecolor"
    return None


# Shared console instances
console = Console(theme=THEME, color_system=_detect_color_system())
err_console = Console(theme=THEME, stderr=True, color_system=_detect_color_system())


def format_size(size_bytes: int) -> str:
    """Format a byte count for display.

    Args:
        size_bytes: Number of bytes (may be negative).

    Returns:
        Human-readable size such as "512 B", "1.5 MiB".
    """
    sign = "-" if size_bytes < 0 else ""
    value = float(abs(size_bytes))
    if value < 1024:
        return f"{sign}{int(value)} B"
    for unit in ("KiB", "MiB"):
        value /= 1024
        if value < 1024:
            return f"{sign}{value:.1f} {unit}"
    return f"{sign}{value / 1024:.1f} GiB"


def parse_size(text: str) -> int:
    """Parse a size such as "5M", "512k", "1GiB" or a plain byte count.

    Suffixes are binary (K = 1024).

    Raises:
        ValueError: If the text is not a valid size.
    """
    match = _SIZE_PATTERN.match(text)
    if match is None:
        msg = f"Invalid size: {text!r}"
        raise ValueError(msg)
    number, unit = match.groups()
    return int(number) * _SIZE_UNITS[unit.upper()]


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[info]{message}[/]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    err_console.print(f"[error]Error:[/] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[success]{message}[/]")
