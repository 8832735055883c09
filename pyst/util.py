def plural(count: int, word: str) -> str:
    """Render `count word` with an `s` suffix when count is not 1."""
    return f"{count} {word}{'' if count == 1 else 's'}"
