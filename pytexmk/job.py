"""The job queue that drives a document to a fixed point.

Building a LaTeX document takes an unknown number of tool runs: each run can
reveal files it still needs (a bibliography, sage output) or report that its
cross-references are stale.  Recipes report this back through the queue while
they run, and :meth:`JobQueue.drain` keeps executing jobs until nothing new is
queued.
"""

import logging
import os
import shutil
import sys
from collections import deque
from pathlib import Path

from .config import Options
from .errors import BuildError, NotConvergedError, ToolInvocationFailure
from .recipe import recipes, replace_file_ext


def _normalize(path):
    return Path(os.path.abspath(os.fspath(path)))


class Job:
    """Produce ``target`` with ``recipe``.

    Jobs compare equal when their targets are equal, whatever the recipe.
    """

    def __init__(self, recipe, target):
        self.recipe = recipe
        self.target = _normalize(target)

    def execute(self, queue):
        queue.rerun_current_job = False
        self.recipe.run(self.target, queue)
        if queue.rerun_current_job:
            queue.register_job(self)

    def __eq__(self, other):
        if not isinstance(other, Job):
            return NotImplemented
        return self.target == other.target

    def __hash__(self):
        return hash(self.target)

    def __repr__(self):
        return f"Job({self.recipe!r}, {str(self.target)!r})"


class JobQueue:
    """Pending jobs plus everything learned while building one document."""

    def __init__(self, registry=None, max_passes=Options.max_passes):
        self.jobs = deque()
        self.files = set()
        self.inputs = set()
        self.recipes = registry if registry is not None else recipes()
        self.texfile = Path(".")
        self.rerun_current_job = False
        self.max_passes = max_passes
        self.passes = {}

    def current_document(self):
        "the top level .tex file, whichever job is running"
        return self.texfile

    def pending(self, target):
        target = _normalize(target)
        return any(job.target == target for job in self.jobs)

    def output(self, file):
        """Register an output file or directory that has been generated.

        The file does not need to exist, so files that are only sometimes
        generated can be added regardless.
        """
        self.files.add(_normalize(file))

    def needs(self, file):
        """Mark that the current job requires ``file`` to be built.

        This sets the rerun flag, but ONLY if a job for the file was actually
        queued.  Files no recipe knows how to build are just tracked.
        """
        file = _normalize(file)
        self.inputs.add(file)
        if self.pending(file):
            logging.debug("%s is already queued", file)
            return
        recipe = self.recipes.lookup(file)
        if recipe is None:
            return
        if recipe.needs_to_run(file, self):
            logging.debug("queueing %s for %s", recipe, file)
            self.jobs.append(Job(recipe, file))
            self.rerun_current_job = True
        else:
            logging.debug("%s is up to date", file)

    def insert(self, file, texfile):
        """Queue the top level job for ``texfile``; it always runs."""
        self.texfile = _normalize(texfile)
        recipe = self.recipes.lookup(file)
        if recipe is None:
            logging.warning("no recipe builds %s", file)
            return False
        self.jobs.append(Job(recipe, file))
        return True

    def rerun(self):
        "Mark the current job to be rerun."
        self.rerun_current_job = True

    def register_job(self, job):
        # a job declaring needs() on its own target is already queued
        if job in self.jobs:
            logging.debug("%s already queued, not requeueing", job.target)
            return
        print("Rerunning", job.target.name)
        self.jobs.append(job)

    def _count_pass(self, job):
        passes = self.passes.get(job.target, 0) + 1
        if passes > self.max_passes:
            raise NotConvergedError(job.target, self.max_passes)
        self.passes[job.target] = passes

    def drain(self):
        """Execute jobs until the queue is empty.

        The first job's tool is allowed to fail: a document that was never
        built usually errors on undefined references until its bibliography
        has been made, and whatever it queued is still run.  Any later
        failure, and any malformed recording, is raised.
        """
        first = True
        while self.jobs:
            job = self.jobs.popleft()
            self._count_pass(job)
            if not first:
                job.execute(self)
                continue
            first = False
            try:
                job.execute(self)
            except ToolInvocationFailure as e:
                logging.warning(
                    "first pass on %s failed, continuing: %s", job.target, e
                )
                if self.rerun_current_job:
                    self.register_job(job)
        self.rerun_current_job = False

    def build(self, document, dvi=False):
        self.insert(target_for(document, dvi), document)
        self.drain()


def target_for(document, dvi=False):
    return replace_file_ext(Path(document), "tex", "dvi" if dvi else "pdf")


def build(document, options=None, registry=None):
    """Build one document to convergence and return its queue.

    Raises :class:`~pytexmk.errors.BuildError` on the first hard failure.
    """
    if options is None:
        options = Options()
    queue = JobQueue(registry, max_passes=options.max_passes)
    queue.build(document, options.dvi)
    return queue


def default_files(directory="."):
    "every .tex file in ``directory``"
    return sorted(Path(directory).glob("*.tex"))


def clean_outputs(files):
    """Remove generated files, keeping pdf and dvi artifacts."""
    for file in sorted(files):
        file = Path(file)
        if file.name.endswith("pdf") or file.name.endswith("dvi"):
            continue
        if not os.path.lexists(file):
            continue
        try:
            if file.is_dir() and not file.is_symlink():
                shutil.rmtree(file)
            else:
                file.unlink()
        except OSError:
            print(f"Couldn't remove {file}")


def run(options):
    """Build every requested document and return how many failed.

    A failing document is reported and the remaining ones are still built.
    """
    files = list(options.files) or default_files()
    registry = recipes(options)
    generated = set()
    failures = 0
    for file in files:
        queue = JobQueue(registry, max_passes=options.max_passes)
        try:
            queue.build(file, options.dvi)
        except BuildError as e:
            failures += 1
            print(f"Failed to build {file}: {e}", file=sys.stderr)
        generated |= queue.files
    if options.clean:
        print("Cleaning up files")
        clean_outputs(generated)
    return failures
