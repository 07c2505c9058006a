from datetime import datetime, timezone


def utc_now() -> datetime:
    """Current UTC time. Wrapped so tests can patch it."""
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    # 2024-01-05T09:12:33.120Z
    return utc_now().isoformat(timespec="milliseconds").replace("+00:00", "Z")


def today_iso() -> str:
    return utc_now().strftime("%Y-%m-%d")
