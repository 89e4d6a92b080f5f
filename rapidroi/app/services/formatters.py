"""
Display formatting for reports and share text.
"""


def format_currency(value: float) -> str:
    """$1,234,567 (whole dollars)."""
    rounded = int(round(value))
    sign = "-" if rounded < 0 else ""
    return f"{sign}${abs(rounded):,}"


def format_number(value: float, decimals: int = 0) -> str:
    return f"{value:,.{decimals}f}"


def format_percent(value: float, decimals: int = 1) -> str:
    """Value already in percent units (25.0 -> '25.0%')."""
    return f"{value:.{decimals}f}%"
