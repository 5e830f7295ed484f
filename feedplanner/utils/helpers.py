"""General-purpose utility helpers."""
import re
from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(timezone.utc)


def slugify(text: str) -> str:
    """Convert a workspace name to a URL-friendly slug ("Acme Co." -> "acme-co")."""
    text = text.lower().strip()
    text = re.sub(r"[^a-z0-9\s-]", "", text)
    text = re.sub(r"[\s_]+", "-", text)
    text = re.sub(r"-+", "-", text)
    return text.strip("-")


def sanitize_filename(name: str) -> str:
    """Replace every run of characters outside ``[A-Za-z0-9_.-]`` with ``_``."""
    return re.sub(r"[^A-Za-z0-9_.\-]+", "_", name)
