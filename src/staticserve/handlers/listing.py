"""
=============================================================================
DIRECTORY LISTING
=============================================================================

Generates the page returned for a directory that has no index file.

=============================================================================
PAGE STRUCTURE
=============================================================================

The page is a fixed HTML/script shell followed by one script statement
per row. The shell defines start() and addRow(); each statement inserts
one row into the table:

    <!DOCTYPE html> ... function start(location) {...}
                        function addRow(name, url, isdir, size, date) {...}
    <script>start("/photos/2024");</script>
    <script>addRow("..", "..", 1, "0 B", "");</script>
    <script>addRow("raw", "raw", 1, "0 B", "2024/06/01 10:00:00");</script>
    <script>addRow("a b.jpg", "a%20b.jpg", 0, "1.50 MB", "...");</script>

=============================================================================
ROW ORDER
=============================================================================

    1. ".." (only when the listed path is not "/")
    2. Directories, sorted case-insensitively
    3. Regular files, sorted case-insensitively

Sorting lowercases the raw filename BYTES (ASCII only) and compares them
byte-wise. Locale-aware collation would make the order depend on the
machine; this way it is the same everywhere, at the price of non-ASCII
names not sorting the way a human might expect.

Symlinks, sockets, FIFOs and devices are not listed.

=============================================================================
BEST-EFFORT ENUMERATION
=============================================================================

A file can vanish or become unreadable between readdir() and stat().
So can a timestamp too far out for datetime to format. Such entries
come back as SkippedEntry, get logged, and are left out.
One bad entry never fails the whole listing.

=============================================================================
"""

import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Union

from ..http.mime_types import extension_to_type
from ..http.percent import encode
from ..http.reply import Reply
from ..http.status_codes import HTTPStatus
from .errors import NotFound


logger = logging.getLogger(__name__)


SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")

TIME_FORMAT = "%Y/%m/%d %H:%M:%S"


@dataclass(frozen=True)
class DirectoryEntry:
    """One child of a listed directory."""

    name: str
    is_dir: bool
    size: int = 0                   # Always 0 for directories
    mtime: Optional[float] = None   # None for the synthetic ".." row


@dataclass(frozen=True)
class SkippedEntry:
    """A child that could not be inspected, and why."""

    name: str
    reason: str


ScanResult = Union[DirectoryEntry, SkippedEntry]


@dataclass(frozen=True)
class ListingRow:
    """A row as it appears in the generated page."""

    name: str       # Display name, decoded
    link: str       # Percent-encoded URL segment
    is_dir: bool
    size: str       # Human-readable, e.g. "1.50 KB"
    modified: str   # TIME_FORMAT in local time, or ""


PARENT_ROW = ListingRow(name="..", link="..", is_dir=True, size="0 B", modified="")


# =============================================================================
# FORMATTING
# =============================================================================

def format_size(size: int) -> str:
    """
    Human-readable size.

    The unit is the largest power of 1024 that fits; bytes are shown as
    an integer, everything else with two decimals.

    Examples:
        >>> format_size(1023)
        '1023 B'
        >>> format_size(1536)
        '1.50 KB'
    """
    index = 0
    test = size >> 10
    while test and index < len(SIZE_UNITS) - 1:
        index += 1
        test >>= 10

    if index == 0:
        return f"{size} B"
    return f"{size / (1 << (10 * index)):.2f} {SIZE_UNITS[index]}"


def format_time(timestamp: float) -> str:
    """Format a POSIX timestamp as YYYY/MM/DD HH:MM:SS in local time."""
    return datetime.fromtimestamp(timestamp).strftime(TIME_FORMAT)


def sort_key(name: str):
    """ASCII case-insensitive, byte-wise ordering key for a filename."""
    raw = os.fsencode(name)
    return (raw.lower(), raw)


# =============================================================================
# ENUMERATION
# =============================================================================

def _inspect(entry: os.DirEntry) -> ScanResult:
    try:
        if entry.is_symlink():
            return SkippedEntry(entry.name, "symlink")
        if entry.is_dir(follow_symlinks=False):
            is_dir = True
        elif entry.is_file(follow_symlinks=False):
            is_dir = False
        else:
            return SkippedEntry(entry.name, "not a regular file or directory")
        stat = entry.stat(follow_symlinks=False)
    except OSError as e:
        return SkippedEntry(entry.name, f"stat failed: {e}")

    # 64-bit filesystems allow mtimes past year 9999
    try:
        format_time(stat.st_mtime)
    except (ValueError, OverflowError, OSError) as e:
        return SkippedEntry(entry.name, f"bad mtime: {e}")

    return DirectoryEntry(
        name=entry.name,
        is_dir=is_dir,
        size=0 if is_dir else stat.st_size,
        mtime=stat.st_mtime,
    )


def scan_directory(path: str) -> List[ScanResult]:
    """
    Inspect the immediate children of a directory.

    Args:
        path: Filesystem path of the directory.

    Returns:
        One DirectoryEntry or SkippedEntry per child, in readdir order.

    Raises:
        NotFound: If the directory itself cannot be opened.
    """
    try:
        iterator = os.scandir(path)
    except (OSError, ValueError) as e:
        raise NotFound(f"Cannot read directory {path}: {e}") from e

    results: List[ScanResult] = []
    with iterator:
        while True:
            try:
                entry = next(iterator)
            except StopIteration:
                break
            except OSError as e:
                logger.warning(f"Directory read of {path} stopped early: {e}")
                break

            result = _inspect(entry)
            if isinstance(result, SkippedEntry):
                logger.debug(f"Skipping {entry.path}: {result.reason}")
            results.append(result)

    return results


# =============================================================================
# ROWS
# =============================================================================

def _row(entry: DirectoryEntry) -> ListingRow:
    return ListingRow(
        name=entry.name,
        link=encode(entry.name),
        is_dir=entry.is_dir,
        size="0 B" if entry.is_dir else format_size(entry.size),
        modified=format_time(entry.mtime) if entry.mtime is not None else "",
    )


def build_rows(request_path: str, results: Iterable[ScanResult]) -> List[ListingRow]:
    """
    Order scan results into page rows.

    Sorts once over all children, then emits the directories pass and
    the files pass over that same sorted sequence. A ".." row leads
    whenever request_path is not the root.
    """
    entries = sorted(
        (result for result in results if isinstance(result, DirectoryEntry)),
        key=lambda entry: sort_key(entry.name),
    )

    rows = []
    if len(request_path) > 1:
        rows.append(PARENT_ROW)
    rows.extend(_row(entry) for entry in entries if entry.is_dir)
    rows.extend(_row(entry) for entry in entries if not entry.is_dir)
    return rows


# =============================================================================
# RENDERING
# =============================================================================

LISTING_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title id="title"></title>
<style>
    body { font-family: sans-serif; padding: 20px; }
    h1 { border-bottom: 1px solid #ccc; padding-bottom: 10px; word-break: break-all; }
    table { border-collapse: collapse; }
    th { text-align: left; border-bottom: 1px solid #ccc; }
    td, th { padding: 2px 16px 2px 0; white-space: nowrap; }
    td.size, td.date { text-align: right; color: #555; }
    a { text-decoration: none; color: #0066cc; }
    a:hover { text-decoration: underline; }
    a.dir::before { content: "\\1F4C1  "; }
    a.file::before { content: "\\1F4C4  "; }
</style>
<script>
function start(location) {
    var header = document.getElementById("header");
    header.textContent = "Index of " + location;
    document.getElementById("title").textContent = "Index of " + location;
}

function addRow(name, url, isdir, size, date) {
    var base = window.location.pathname;
    if (base.charAt(base.length - 1) != "/") {
        base += "/";
    }

    var row = document.createElement("tr");
    var nameCell = document.createElement("td");
    var link = document.createElement("a");
    link.className = isdir ? "dir" : "file";
    link.href = base + url + (isdir ? "/" : "");
    link.textContent = name;
    nameCell.appendChild(link);
    row.appendChild(nameCell);

    var sizeCell = document.createElement("td");
    sizeCell.className = "size";
    sizeCell.textContent = size;
    row.appendChild(sizeCell);

    var dateCell = document.createElement("td");
    dateCell.className = "date";
    dateCell.textContent = date;
    row.appendChild(dateCell);

    document.getElementById("tbody").appendChild(row);
}
</script>
</head>
<body>
<h1 id="header"></h1>
<table>
<thead><tr><th>Name</th><th>Size</th><th>Date Modified</th></tr></thead>
<tbody id="tbody"></tbody>
</table>
</body>
</html>
"""


def js_string(value: str) -> str:
    """
    Quote value as a JavaScript string literal safe inside <script>.

    Output is pure ASCII; "<", ">" and "&" are escaped so no filename can
    close the script element.
    """
    quoted = json.dumps(value, ensure_ascii=True)
    return (quoted
        .replace("<", "\\u003c")
        .replace(">", "\\u003e")
        .replace("&", "\\u0026"))


def render_row(row: ListingRow) -> str:
    """The addRow() statement for one row."""
    return (
        f"<script>addRow({js_string(row.name)}, {js_string(row.link)}, "
        f"{1 if row.is_dir else 0}, {js_string(row.size)}, "
        f"{js_string(row.modified)});</script>"
    )


def render_listing(request_path: str, rows: Iterable[ListingRow]) -> bytes:
    """Assemble the complete listing page."""
    lines = [LISTING_TEMPLATE, f"<script>start({js_string(request_path)});</script>"]
    lines.extend(render_row(row) for row in rows)
    return ("\n".join(lines) + "\n").encode("utf-8")


def list_directory(directory: str, request_path: str, reply: Reply) -> None:
    """
    Fill reply with the listing page for directory.

    Args:
        directory: Filesystem path of the directory.
        request_path: Decoded request path, shown as the page heading.
        reply: Reply to populate.

    Raises:
        NotFound: If the directory cannot be read at all.
    """
    results = scan_directory(directory)
    document = render_listing(request_path, build_rows(request_path, results))

    reply.status = HTTPStatus.OK
    reply.content = document
    reply.add_header("Content-Length", str(len(document)))
    reply.add_header("Content-Type", extension_to_type("html"))
