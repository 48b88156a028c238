"""
HTML conversion log.

One <p> block per file with its diagnostics; errors in red.
"""

import html
from datetime import datetime
from pathlib import Path
from typing import Optional

from .channels import ROLES, ChannelRoleMap
from .constants import LOG_TIMESTAMP_FORMAT
from .pipeline import FileResult

BR = "<br />"

_HEAD = (
    "<!doctype html>\n<html lang='en'>\n<head>\n"
    "<meta charset='utf-8'>\n\n  <title>EDF to CFS Log</title>\n"
    "<meta name='description' content='Conversion Log'>\n"
    "\n  </head>\n\n<body>\n"
)
_TAIL = "</body>\n</html>\n"


def render_header(role_map: ChannelRoleMap, started: datetime) -> str:
    lines = [f"<p>Logging Started at: {started.strftime(LOG_TIMESTAMP_FORMAT)}{BR}"]
    for role in ROLES:
        lines.append(f"{role.montage} Channel Label: {html.escape(role_map.label_for(role))}{BR}")
    lines.append("</p><hr>")
    return _HEAD + "\n".join(lines) + "\n"


def render_file_block(result: FileResult) -> str:
    parts = ["<p>"]
    for msg in result.messages:
        text = html.escape(msg)
        if msg.startswith("ERROR"):
            parts.append(f"<strong style='color:red;'>{text}</strong>{BR}")
        else:
            parts.append(f"{text}{BR}")
    parts.append("</p>")
    return "\n".join(parts) + "\n"


def render_footer(n_files: int, n_success: int, elapsed_s: float) -> str:
    return (
        f"<p>{n_files} Files processed in {int(elapsed_s)} seconds.{BR}\n"
        f"{n_success} Files converted successfully. "
        f"{n_files - n_success} Files could not be converted.{BR}</p>\n" + _TAIL
    )


class HtmlLog:
    """
    Append-only conversion log.

    Use as a context manager; blocks are written as results arrive so the log
    follows batch order.
    """

    def __init__(self, path: Path, role_map: ChannelRoleMap, started: Optional[datetime] = None):
        self.path = Path(path)
        self.role_map = role_map
        self.started = started or datetime.now()
        self._f = None

    def open(self) -> "HtmlLog":
        self._f = open(self.path, "w", encoding="utf-8")
        self._f.write(render_header(self.role_map, self.started))
        return self

    def add(self, result: FileResult) -> None:
        self._f.write(render_file_block(result))
        self._f.flush()

    def finish(self, n_files: int, n_success: int, elapsed_s: float) -> None:
        self._f.write(render_footer(n_files, n_success, elapsed_s))

    def close(self) -> None:
        if self._f is not None:
            self._f.close()
            self._f = None

    def __enter__(self):
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.close()
