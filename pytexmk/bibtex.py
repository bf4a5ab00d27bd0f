"""Make the ``.bbl`` bibliography from the ``.aux`` file with bibtex.

bibtex only looks at a few lines of the ``.aux`` file and at the ``.bib``
databases, while LaTeX rewrites the ``.aux`` on every pass.  The digest of
just those inputs is stamped into the ``.bbl`` so an unchanged bibliography
isn't rebuilt (which would in turn force another LaTeX pass).
"""

import hashlib
import logging

from .digest import digest_tag, file_digest, output_has_tag, stamp
from .recipe import Recipe

AUX_BIB_PREFIXES = ("\\citation", "\\bibdata", "\\bibstyle")


def bib_databases(aux):
    """The ``.bib`` files named by ``\\bibdata`` lines of ``aux``."""
    databases = []
    with open(aux, encoding="utf-8") as fp:
        for line in fp:
            if not line.startswith("\\bibdata{"):
                continue
            names = line.strip()[len("\\bibdata{"):].rstrip("}")
            for name in names.split(","):
                name = name.strip()
                if not name:
                    continue
                if not name.endswith(".bib"):
                    name += ".bib"
                databases.append(aux.parent / name)
    return databases


def bibliography_digest(aux):
    m = hashlib.md5()
    m.update(file_digest(aux, keep=AUX_BIB_PREFIXES).encode("ascii"))
    for bib in bib_databases(aux):
        if bib.exists():
            m.update(file_digest(bib).encode("ascii"))
    return m.hexdigest()


class BibtexRecipe(Recipe):
    key = "bbl"
    uses = "aux"
    generated = ("blg",)

    command = ["bibtex"]

    def needs_to_run(self, target, queue):
        try:
            tag = digest_tag(bibliography_digest(self.source_for(target)))
            return not output_has_tag(target, tag)
        except (OSError, UnicodeDecodeError) as e:
            logging.debug("rebuilding %s: %s", target, e)
            return True

    def run(self, target, queue):
        aux = self.source_for(target)
        print("Running rule on", aux.name)
        cmd = self.command + [self.job_name(target)]
        result = self.invoke(cmd, cwd=aux.parent)
        if result.returncode != 0:
            self.fail(target, cmd, result)
        self.register_outputs(target, queue)
        try:
            stamp(target, bibliography_digest(aux), "of bibliography inputs")
        except (OSError, UnicodeDecodeError) as e:
            # without a stamp the next pass just runs bibtex again
            logging.warning("could not record digest in %s: %s", target, e)


def recipes(options, registry):
    registry.register(BibtexRecipe())
