"""Display helpers shared by the terminal screens."""


def format_time(seconds: int) -> str:
    """Format a duration as m:ss."""
    mins, secs = divmod(max(0, int(seconds)), 60)
    return f"{mins}:{secs:02d}"


def format_level(level: float, width: int = 20) -> str:
    """Render a 0.0-1.0 input level as a fixed-width bar."""
    filled = round(min(max(level, 0.0), 1.0) * width)
    return "█" * filled + "░" * (width - filled)
