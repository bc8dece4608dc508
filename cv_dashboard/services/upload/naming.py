import re
import time

_PDF_SUFFIX = re.compile(r"\.pdf$", re.IGNORECASE)
NAME_PREFIX_LENGTH = 12


def storage_name(filename: str, now_ms: int | None = None) -> str:
    """Derive the ingestion name: `<epoch millis>_<first 12 chars of the name without .pdf>`."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    short_name = _PDF_SUFFIX.sub("", filename)[:NAME_PREFIX_LENGTH]
    return f"{now_ms}_{short_name}"
