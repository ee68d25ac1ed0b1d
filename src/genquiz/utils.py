def format_time(seconds: int) -> str:
    """Formats a duration in seconds as ``m:ss``."""
    minutes, remaining = divmod(max(int(seconds), 0), 60)
    return f"{minutes}:{remaining:02d}"
