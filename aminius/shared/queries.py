"""Query helpers shared by the repositories"""

LIKE_ESCAPE = "\\"


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so user input only ever matches literally"""
    return term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2).replace("%", "\\%").replace("_", "\\_")


def contains_pattern(term: str) -> str:
    return f"%{escape_like(term.strip())}%"


def prefix_pattern(prefix: str) -> str:
    return f"{escape_like(prefix.strip())}%"
