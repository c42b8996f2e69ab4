import logging
import mimetypes
from typing import Optional, TextIO, Tuple

# Types that are text even though they do not live under text/*
_TEXTUAL_APPLICATION_TYPES = {
    "application/json",
    "application/javascript",
    "application/xml",
    "application/x-sh",
    "application/x-yaml",
    "application/yaml",
    "application/toml",
    "image/svg+xml",
}


def lookup_mime(filename: str) -> Tuple[Optional[str], Optional[str]]:
    """
    Look up the MIME type and Content-Type header value for a filename.

    Args:
        filename: A filename or path; only the extension is considered

    Returns:
        (mime, content_type). Both are None when the extension is unknown.
        content_type carries a utf-8 charset for textual types.

    Examples:
        >>> lookup_mime("notes.txt")
        ('text/plain', 'text/plain; charset=utf-8')
        >>> lookup_mime("archive.unknownext")
        (None, None)
    """
    mime, _ = mimetypes.guess_type(filename, strict=False)
    if mime is None:
        return None, None
    if mime.startswith("text/") or mime in _TEXTUAL_APPLICATION_TYPES:
        return mime, f"{mime}; charset=utf-8"
    return mime, mime


# --- Logging ---
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s [disk=%(disk_name)s] %(message)s"


class DiskLogFilter(logging.Filter):
    """Fills in disk_name for records logged without one (registry, config)."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "disk_name", None) is None:
            record.disk_name = "-"
        return True


def init_storage_logging(
    level: int = logging.INFO,
    stream: Optional[TextIO] = None,
    fmt: str = LOG_FORMAT,
) -> logging.Handler:
    """
    Attach a console handler to the 'diskstore' logger.

    Only the package logger is touched; the application's root logger keeps
    its own handlers. Calling this again swaps the previous diskstore handler
    for a new one instead of stacking them.

    Returns:
        The handler that was installed
    """
    package_logger = logging.getLogger(__name__.split(".")[0])

    for handler in package_logger.handlers[:]:
        if getattr(handler, "_diskstore_handler", False):
            package_logger.removeHandler(handler)
            handler.close()

    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(fmt))
    handler.addFilter(DiskLogFilter())
    handler._diskstore_handler = True

    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    return handler
