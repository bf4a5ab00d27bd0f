"""Recipes map a kind of target file to the tool invocation that builds it.

A recipe is registered under its dispatch key (the file extension it
produces, e.g. ``pdf`` or the two part ``sagetex.sout``) and knows which
extension it consumes.  Recipes are created once per run and shared by every
job of that kind, so they must not keep per-build state: everything a recipe
learns while running goes into the :class:`~pytexmk.job.JobQueue` it is
handed.
"""

import logging
import os
import subprocess
import sys
from collections import namedtuple
from pathlib import Path

from .errors import EncodingError, ToolInvocationFailure


class RecipeRegistrationError(Exception):
    """Exception raised when two recipes could claim the same file name."""


ToolOutput = namedtuple("ToolOutput", ["returncode", "stdout", "stderr"])


def replace_file_ext(path, cur_ext, new_ext):
    """Swap a (possibly multi part) extension, or return the path unchanged.

    >>> replace_file_ext(Path("doc.tex"), "tex", "pdf").name
    'doc.pdf'
    """
    path = Path(path)
    name = path.name
    if name.endswith(cur_ext):
        return path.with_name(name[: len(name) - len(cur_ext)] + new_ext)
    return path


class Recipe:
    """Build ``target`` from the file with extension ``uses``.

    Subclasses set ``key`` and ``uses`` and implement :meth:`run`.  Side files
    listed in ``generated`` (extensions appended to the job name) and
    ``generated_dirs`` (directory name templates formatted with ``name``)
    are registered as outputs by :meth:`register_outputs`.
    """

    key = None
    uses = None
    generated = ()
    generated_dirs = ()

    def source_for(self, target):
        "the file this recipe consumes to produce ``target``"
        return replace_file_ext(target, self.key, self.uses)

    def job_name(self, target):
        name = Path(target).name
        return name[: len(name) - len(self.key) - 1]

    def needs_to_run(self, target, queue):
        # recipes without a skip decision always run
        return True

    def run(self, target, queue):
        raise NotImplementedError(
            f"{type(self).__name__} does not implement run()"
        )

    def register_outputs(self, target, queue):
        target = Path(target)
        name = self.job_name(target)
        queue.output(target)
        for ext in self.generated:
            queue.output(target.with_name(f"{name}.{ext}"))
        for template in self.generated_dirs:
            queue.output(target.with_name(template.format(name=name)))

    def invoke(self, cmd, cwd):
        """Run ``cmd`` to completion in ``cwd`` and decode what it printed."""
        logging.debug("running: %s", " ".join(cmd))
        try:
            result = subprocess.run(cmd, cwd=cwd, capture_output=True)
        except OSError as e:
            raise ToolInvocationFailure(cmd, None, "", str(e)) from e
        try:
            stdout = result.stdout.decode("utf-8")
            stderr = result.stderr.decode("utf-8")
        except UnicodeDecodeError as e:
            raise EncodingError(
                f"output of {' '.join(cmd)} is not valid UTF-8: {e}"
            ) from e
        return ToolOutput(result.returncode, stdout, stderr)

    def fail(self, target, cmd, output):
        """Echo the captured output so the failure can be diagnosed, then raise."""
        print(f"Failed to build {target}")
        sys.stdout.write(output.stdout)
        sys.stdout.write(output.stderr)
        sys.stdout.flush()
        raise ToolInvocationFailure(
            cmd, output.returncode, output.stdout, output.stderr
        )

    def __repr__(self):
        return f"<{type(self).__name__} {self.uses} -> {self.key}>"


class RecipeRegistry:
    """Dispatch target file names to recipes by extension suffix.

    Keys are matched against the end of the file name, so multi part keys
    such as ``sagetex.sout`` work.  Registering a key that is a dotted suffix
    of another key (or the same key twice) would make dispatch depend on
    registration order, so it is refused.
    """

    def __init__(self, recipes=()):
        self._recipes = {}
        for recipe in recipes:
            self.register(recipe)

    def register(self, recipe):
        key = recipe.key
        for existing in self._recipes:
            if (
                existing == key
                or existing.endswith("." + key)
                or key.endswith("." + existing)
            ):
                raise RecipeRegistrationError(
                    f"Recipe key '{key}' overlaps with '{existing}'"
                )
        self._recipes[key] = recipe

    def lookup(self, path):
        "return the recipe that builds ``path``, or None"
        name = os.path.basename(os.fspath(path))
        for key, recipe in self._recipes.items():
            if name.endswith("." + key):
                return recipe
        return None

    def __contains__(self, key):
        return key in self._recipes

    def __getitem__(self, key):
        return self._recipes[key]

    def __iter__(self):
        return iter(self._recipes.values())

    def __len__(self):
        return len(self._recipes)


def recipes(options=None):
    """The builtin recipes: typesetting, sage preprocessing and bibtex."""
    from . import bibtex, latex, sage

    registry = RecipeRegistry()
    latex.recipes(options, registry)
    sage.recipes(options, registry)
    bibtex.recipes(options, registry)
    return registry
