"""Read the file recording written by ``latex -recorder``.

Each line of a ``.fls`` file is a directive and a path::

    PWD /home/me/paper
    INPUT /usr/share/texmf/tex/latex/base/article.cls
    INPUT paper.aux
    OUTPUT paper.log

``INPUT`` paths are declared to the queue as needed files and ``OUTPUT``
paths as generated files.  Relative paths are resolved against the latest
``PWD``.
"""

import logging
import os
from pathlib import Path

from .errors import EncodingError, FilesystemError, FormatError


def parse_recording(text, queue, cwd="."):
    pwd = Path(cwd)
    for lineno, line in enumerate(text.splitlines(), 1):
        if not line.strip():
            continue
        parts = line.split(" ", 1)
        if len(parts) != 2 or not parts[1]:
            raise FormatError(f"line {lineno}: can't parse {line!r}")
        directive, path = parts
        if "\0" in path:
            raise FormatError(f"line {lineno}: invalid path {path!r}")
        path = pwd / path
        if directive == "PWD":
            pwd = path
        elif directive == "INPUT":
            queue.needs(path)
        elif directive == "OUTPUT":
            queue.output(path)
        else:
            raise FormatError(
                f"line {lineno}: unknown directive {directive!r}"
            )


def read_recording(path, queue):
    """Feed the recording in ``path`` to ``queue``.

    A recording that was never written just means there are no dependencies
    to report.
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except FileNotFoundError:
        logging.debug("no recording at %s", path)
        return False
    except OSError as e:
        raise FilesystemError(f"can't read {path}: {e}") from e
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise EncodingError(f"{path} is not valid UTF-8: {e}") from e
    parse_recording(text, queue, cwd=os.path.dirname(os.path.abspath(path)))
    return True
