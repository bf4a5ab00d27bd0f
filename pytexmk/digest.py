"""Content digests that decide whether an expensive tool has to run again.

A tool's output is stamped with a tagged md5 of its input (sagetex does this
itself in the ``.sout`` file; we do the same for ``.bbl`` files).  If the
previous output already carries the tag for the current input, running the
tool again would produce the same thing.

Lines whose content changes on every run without meaning anything are left
out of the digest.
"""

import hashlib
import logging
from pathlib import Path

# lines sagetex writes into the .sage file that differ between runs
SAGE_VOLATILE_PREFIXES = (
    " _st_.goboom",
    "print('SageT",
    "_st_.current_tex_line",
    " _st_.current_tex_line",
)


def file_digest(path, ignore=(), keep=None):
    """md5 over the lines of ``path``.

    Lines starting with a prefix in ``ignore`` are skipped.  If ``keep`` is
    given, only lines starting with one of its prefixes count.
    """
    m = hashlib.md5()
    with open(path, encoding="utf-8") as fp:
        for line in fp:
            if ignore and line.startswith(tuple(ignore)):
                continue
            if keep is not None and not line.startswith(tuple(keep)):
                continue
            m.update(line.encode("utf-8"))
    return m.hexdigest()


def digest_tag(digest):
    "the comment line prefix that records ``digest`` in an output file"
    return f"%{digest}% md5sum"


def output_has_tag(output, tag):
    with open(output, encoding="utf-8") as fp:
        return any(line.startswith(tag) for line in fp)


def needs_rebuild(source, output, ignore=SAGE_VOLATILE_PREFIXES):
    """True unless ``output`` already records the digest of ``source``.

    Errors while reading either file mean rebuild: skipping a needed run is
    worse than an extra one.
    """
    try:
        tag = digest_tag(file_digest(source, ignore=ignore))
        if output_has_tag(output, tag):
            logging.debug("%s is unchanged since %s was made", source, output)
            return False
    except (OSError, UnicodeDecodeError) as e:
        logging.debug("can't compare %s with %s: %s", source, output, e)
    return True


def stamp(output, digest, note=""):
    """Append the tag line for ``digest`` to ``output``."""
    line = digest_tag(digest)
    if note:
        line += " " + note
    with open(Path(output), "a", encoding="utf-8") as fp:
        fp.write(line + "\n")
