"""
Helper functions for formatting data into human-readable strings.
"""


def format_size(bytes_size: int) -> str:
    """Formats bytes into a human-readable size string (e.g., '14.3 MB')."""
    if bytes_size <= 0:
        return "0 B"
    units = ["B", "KB", "MB", "GB", "TB"]
    i = 0
    while bytes_size >= 1024 and i < len(units) - 1:
        bytes_size /= 1024
        i += 1
    return f"{bytes_size:.1f} {units[i]}"


def format_kilobytes(bytes_size: int) -> str:
    """Formats bytes as kilobytes with one decimal (e.g., '512.0 KB')."""
    return f"{bytes_size / 1024:.1f} KB"


def format_megabytes(bytes_size: int) -> str:
    return f"{bytes_size / (1024 * 1024):.2f} MB"


def format_number(value: float) -> str:
    """Formats a number without a trailing '.0' for whole values (2.0 -> '2')."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def format_percentage(fraction: float) -> str:
    """Formats a 0-1 fraction as a whole percentage (0.8 -> '80%')."""
    return f"{fraction * 100:.0f}%"


def yes_no(flag: bool) -> str:
    return "Yes" if flag else "No"

