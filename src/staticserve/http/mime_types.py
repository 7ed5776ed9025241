"""
=============================================================================
MIME TYPE LOOKUP
=============================================================================

Maps a file extension to the Content-Type string sent with the file.

=============================================================================
HOW THE EXTENSION IS FOUND
=============================================================================

The path resolver hands us the text after the last "." of the final path
segment, WITHOUT the dot and in the case it appeared in the URL:

    /docs/report.PDF    →  "PDF"
    /archive.tar.gz     →  "gz"
    /v1.2/README        →  ""     (the dot is in a directory name)

Lookups are case-sensitive: "PDF" is not "pdf". A server that wants
case-insensitive types can register both spellings in the table.

Anything we don't know is served as application/octet-stream, which
makes browsers download the file instead of guessing how to render it.

=============================================================================
"""


# =============================================================================
# MIME TYPE DATABASE
# =============================================================================
#
# Extension (no dot) → MIME type. Covers the usual suspects of a static
# web root; extend it at startup if you need more, never per request.
#
# =============================================================================

MIME_TYPES = {
    # -------------------------------------------------------------------------
    # TEXT TYPES
    # -------------------------------------------------------------------------
    "html": "text/html",
    "htm": "text/html",
    "css": "text/css",
    "js": "text/javascript",
    "mjs": "text/javascript",
    "json": "application/json",
    "xml": "application/xml",
    "txt": "text/plain",
    "md": "text/markdown",
    "csv": "text/csv",

    # -------------------------------------------------------------------------
    # IMAGE TYPES
    # -------------------------------------------------------------------------
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "ico": "image/x-icon",
    "webp": "image/webp",
    "bmp": "image/bmp",

    # -------------------------------------------------------------------------
    # FONT TYPES
    # -------------------------------------------------------------------------
    "woff": "font/woff",
    "woff2": "font/woff2",
    "ttf": "font/ttf",
    "otf": "font/otf",

    # -------------------------------------------------------------------------
    # AUDIO / VIDEO TYPES
    # -------------------------------------------------------------------------
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "ogg": "audio/ogg",
    "flac": "audio/flac",
    "mp4": "video/mp4",
    "webm": "video/webm",
    "mkv": "video/x-matroska",

    # -------------------------------------------------------------------------
    # DOCUMENT / ARCHIVE TYPES
    # -------------------------------------------------------------------------
    "pdf": "application/pdf",
    "zip": "application/zip",
    "tar": "application/x-tar",
    "gz": "application/gzip",
    "7z": "application/x-7z-compressed",
    "wasm": "application/wasm",
}

DEFAULT_MIME_TYPE = "application/octet-stream"


def extension_to_type(extension: str) -> str:
    """
    Get the MIME type for an extension.

    Args:
        extension: Extension without the leading dot, case as given.

    Returns:
        The MIME type, or DEFAULT_MIME_TYPE when the extension is unknown
        (including the empty extension).

    Examples:
        >>> extension_to_type("html")
        'text/html'
        >>> extension_to_type("xyz")
        'application/octet-stream'
    """
    return MIME_TYPES.get(extension, DEFAULT_MIME_TYPE)
