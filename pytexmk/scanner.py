"""Signals scraped from the text a TeX engine prints.

These strings are what LaTeX prints today; if an engine ever reports missing
files or stale labels in a structured way, only this module has to change.
"""

MISSING_FILE_MARKER = "No file "

RERUN_WARNINGS = (
    "LaTeX Warning: Label(s) may have changed",
    "LaTeX Warning: There were undefined references",
)


def find_missing_files(text):
    """Return the names LaTeX reported with ``No file <name>.``

    >>> find_missing_files("No file doc.bbl.\\nNo file doc.toc.\\n")
    ['doc.bbl', 'doc.toc']
    """
    missing = []
    start = text.find(MISSING_FILE_MARKER)
    while start != -1:
        start += len(MISSING_FILE_MARKER)
        end = text.find("\n", start)
        if end == -1:
            end = len(text)
        name = text[start:end].strip().rstrip(".,;:")
        if name:
            missing.append(name)
        start = text.find(MISSING_FILE_MARKER, end)
    return missing


def needs_rerun(text):
    "True when LaTeX says its cross-references are not settled yet"
    return any(warning in text for warning in RERUN_WARNINGS)
