def escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains_pattern(value: str) -> str:
    """LIKE pattern for a literal substring; pair with ``escape="\\\\"``."""
    return f"%{escape_like(value)}%"
