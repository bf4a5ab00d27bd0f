"""Latexmk like build tool.

latexmk supports way more options, but the defaults are good enough for most
people::

    pytexmk                     # build every .tex file in this directory
    pytexmk build paper.tex --clean
    pytexmk watch paper.tex
"""

import argparse
import logging
import sys

from . import continuous  # noqa: F401  registers the watch command
from .command_registry import _COMMAND_SPECS, register_command
from .config import CONFIG_FILE, load_options, switch
from . import job


@register_command(
    "build documents, rerunning tools until nothing changes",
    help={
        "files": "TeX files to compile [default: ./*.tex]",
        "dvi": "compile to dvi rather than pdf",
        "no_dvi": "compile to pdf even if the config file asks for dvi",
        "clean": (
            "remove generated files afterwards (this still runs the full"
            " build, since no record of generated files is kept between runs)"
        ),
        "no_clean": "keep generated files even if the config file says clean",
        "max_passes": "give up when a file needs more runs than this",
        "config": "YAML file with default settings",
    },
)
def build(
    *files,
    dvi=False,
    no_dvi=False,
    clean=False,
    no_clean=False,
    max_passes=None,
    config=CONFIG_FILE,
):
    options = load_options(
        config,
        files=files,
        dvi=switch(dvi, no_dvi),
        clean=switch(clean, no_clean),
        max_passes=max_passes,
    )
    logging.debug("options: %r", options)
    failures = job.run(options)
    return 1 if failures else 0


def build_parser():
    parser = argparse.ArgumentParser(
        prog="pytexmk",
        description="Command line tool to automatically build latex documents",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="print debugging output"
    )
    subparsers = parser.add_subparsers(dest="command")
    for name, spec in _COMMAND_SPECS.items():
        subparser = subparsers.add_parser(
            name, help=spec["help"], description=spec["description"]
        )
        for argument in spec["arguments"]:
            kwargs = dict(argument["kwargs"])
            if not argument["positional"]:
                kwargs["dest"] = argument["dest"]
            subparser.add_argument(*argument["flags"], **kwargs)
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )
    if args.command is None:
        return build()
    spec = _COMMAND_SPECS[args.command]
    positional = []
    kwargs = {}
    for argument in spec["arguments"]:
        value = getattr(args, argument["dest"])
        if argument["variadic"]:
            positional.extend(value)
        else:
            kwargs[argument["dest"]] = value
    return spec["handler"](*positional, **kwargs)


if __name__ == "__main__":
    sys.exit(main())
