"""Build options, read from ``pytexmk.yaml`` and overridden on the command line."""

from pathlib import Path

import yaml

CONFIG_FILE = "pytexmk.yaml"
SETTINGS = ("files", "dvi", "clean", "max_passes")


class Options:
    files = ()
    # compile to dvi rather than pdf
    dvi = False
    # remove generated files after building
    clean = False
    # how often one target may be run before giving up
    max_passes = 5

    def __init__(self, files=(), dvi=False, clean=False, max_passes=5):
        self.files = [Path(f) for f in files]
        self.dvi = dvi
        self.clean = clean
        self.max_passes = max_passes

    def __repr__(self):
        return (
            f"Options(files={[str(f) for f in self.files]!r}, dvi={self.dvi!r},"
            f" clean={self.clean!r}, max_passes={self.max_passes!r})"
        )


def _check(cfg, source):
    unknown = sorted(set(cfg) - set(SETTINGS))
    if unknown:
        raise ValueError(
            f"unknown setting(s) in {source}: " + ", ".join(unknown)
        )
    if "files" in cfg and isinstance(cfg["files"], str):
        cfg["files"] = [cfg["files"]]
    if "max_passes" in cfg:
        cfg["max_passes"] = int(cfg["max_passes"])
        if cfg["max_passes"] < 1:
            raise ValueError(f"max_passes must be at least 1 ({source})")
    return cfg


def load_config(path=CONFIG_FILE):
    """Return the settings stored in ``path`` as a dict.

    A missing file means no settings.
    """
    path = Path(path)
    if not path.exists():
        return {}
    cfg = yaml.safe_load(path.read_text(encoding="utf-8"))
    if cfg is None:
        return {}
    if not isinstance(cfg, dict):
        raise ValueError(f"{path} should contain a mapping of settings")
    return _check(cfg, path)


def switch(on, off):
    """The value of an --x/--no-x pair of flags, None when neither was given."""
    if on and off:
        raise ValueError("conflicting on/off switches")
    if on:
        return True
    if off:
        return False
    return None


def load_options(path=CONFIG_FILE, **overrides):
    """Combine the config file with command line values.

    Overrides that are None or an empty file list leave the file's value
    alone; an explicit False replaces it.
    """
    cfg = load_config(path)
    for k, v in overrides.items():
        if v is None or v == () or v == []:
            continue
        cfg[k] = v
    return Options(**_check(cfg, "command line"))
