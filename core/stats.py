"""Statistics over session logs."""

from .models import SessionLogEntry


def summarize_logs(logs: list[SessionLogEntry]) -> dict:
    """Totals across all sessions for one profile and language."""
    return {
        'sessions': len(logs),
        'total_duration': sum(entry.duration for entry in logs),
        'total_words': sum(entry.total_words for entry in logs),
        'total_new_words': sum(entry.new_words for entry in logs),
    }


def recent_logs(logs: list[SessionLogEntry]) -> list[SessionLogEntry]:
    """Logs newest first."""
    return sorted(logs, key=lambda entry: entry.timestamp, reverse=True)


def format_duration(ms: int) -> str:
    """Format a duration like '0s', '42s' or '3m 5s'."""
    if ms <= 0:
        return '0s'
    seconds = ms // 1000
    minutes = seconds // 60
    remaining = seconds % 60
    if minutes > 0:
        return f"{minutes}m {remaining}s"
    return f"{seconds}s"
