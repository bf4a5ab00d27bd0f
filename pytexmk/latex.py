"""Typesetting recipes: pdflatex for pdf output, dvilualatex for dvi."""

from .errors import FilesystemError
from .recipe import Recipe
from .recorder import read_recording
from .scanner import find_missing_files, needs_rerun


class LatexRecipe(Recipe):
    uses = "tex"
    generated = ("log", "aux", "fls", "synctex.gz")

    def __init__(self, key, command):
        self.key = key
        self.command = list(command)

    def needs_to_run(self, target, queue):
        # figures included as .pdf show up as inputs too; only the document
        # being built is ours to typeset
        return self.source_for(target) == queue.current_document()

    def run(self, target, queue):
        # intermediate targets still need the top level file compiled
        source = queue.current_document()
        print("Running rule on", source.name)
        cmd = self.command + [source.name]
        recording = source.with_suffix(".fls")
        # a run that dies before writing its recording must not leave the
        # previous one behind to be read
        try:
            recording.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise FilesystemError(f"can't remove old {recording}: {e}") from e
        result = self.invoke(cmd, cwd=source.parent)
        self.register_outputs(target, queue)
        # a failed run still records what it read, and the first pass of a
        # new document is expected to fail until these exist
        read_recording(recording, queue)
        for name in find_missing_files(result.stdout):
            queue.needs(source.parent / name)
        if result.returncode != 0:
            self.fail(target, cmd, result)
        if needs_rerun(result.stdout):
            queue.rerun()


def recipes(options, registry):
    registry.register(
        LatexRecipe(
            "pdf",
            [
                "pdflatex",
                "-recorder",
                "-file-line-error",
                "-interaction",
                "nonstopmode",
                "-synctex",
                "1",
            ],
        )
    )
    registry.register(
        LatexRecipe(
            "dvi",
            [
                "dvilualatex",
                "--recorder",
                "--file-line-error",
                "--interaction=nonstopmode",
                "--synctex=1",
            ],
        )
    )
