from __future__ import annotations


def normalize_token(raw: str) -> str:
    return raw.strip().lower()


def format_win_rate(wins: int, total: int) -> str:
    """
    Percentage with one decimal, e.g. "66.7". Zero games played -> "0".
    """
    if total <= 0:
        return "0"
    return f"{wins / total * 100:.1f}"


def format_count(value: int) -> str:
    return f"{int(value):,}"
