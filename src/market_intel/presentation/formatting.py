"""Number-to-text formatting for dashboard widgets and chart axes."""

AXIS_COMPRESS_THRESHOLD = 1000.0
FUNDING_ELEVATED_THRESHOLD = 0.01


def format_price(value: float) -> str:
    """Currency with thousands separators and two decimals, e.g. '$95,000.00'."""
    return f"${value:,.2f}"


def format_change_percent(value: float) -> str:
    """Unsigned 24h change, e.g. '1.25%'. Direction is shown separately."""
    return f"{abs(value):.2f}%"


def format_funding_rate(rate: float) -> str:
    """Fractional funding rate as a percentage with 4 decimals (0.0001 -> '0.0100%')."""
    return f"{rate * 100:.4f}%"


def format_range_percent(value: float) -> str:
    return f"{value:.2f}%"


def format_axis_value(
    value: float,
    compress: bool = True,
    threshold: float = AXIS_COMPRESS_THRESHOLD,
) -> str:
    """Axis tick text: '$95.4k' at or above the threshold when compressing, plain '$2,650.00' otherwise."""
    if compress and abs(value) >= threshold:
        return f"${value / 1000:.1f}k"
    return f"${value:,.2f}"


def funding_is_elevated(rate: float) -> bool:
    """True when longs are paying an unusually high premium."""
    return rate > FUNDING_ELEVATED_THRESHOLD
