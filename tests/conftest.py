import hashlib
import subprocess
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from pytexmk import recipe as recipe_module  # noqa: E402
from pytexmk.recipe import Recipe, RecipeRegistry  # noqa: E402


class FakeRecipe(Recipe):
    """Recipe whose behaviour is a plain python callable."""

    def __init__(self, key, uses="src", action=None, should_run=True):
        self.key = key
        self.uses = uses
        self.action = action
        self.should_run = should_run
        self.calls = []

    def needs_to_run(self, target, queue):
        return self.should_run

    def run(self, target, queue):
        self.calls.append(target)
        if self.action is not None:
            self.action(target, queue, len(self.calls))


class FakeTex:
    """Stand in for pdflatex, bibtex and sage.

    ``latex_output(pass_number, cwd, name)`` returns the exit status and
    stdout of each LaTeX run.  ``citations`` makes LaTeX write bibliography
    commands to the .aux file.
    """

    def __init__(self):
        self.calls = []
        self.latex_passes = 0
        self.citations = False
        self.sage_lines = None
        self.extra_inputs = []
        self.dies_early = False
        self.latex_output = self.default_output

    def default_output(self, n, cwd, name):
        stdout = ""
        if self.citations and not (cwd / f"{name}.bbl").exists():
            stdout += f"No file {name}.bbl.\n"
        if self.sage_lines is not None and not (
            cwd / f"{name}.sagetex.sout"
        ).exists():
            stdout += f"No file {name}.sagetex.sout.\n"
        return 0, stdout + "Output written.\n"

    def __call__(self, cmd, cwd=None, capture_output=False, **kwargs):
        cwd = Path(cwd if cwd is not None else ".")
        self.calls.append((cmd[0], cmd[-1]))
        if cmd[0] in ("pdflatex", "dvilualatex"):
            return self.latex(cmd, cwd)
        if cmd[0] == "bibtex":
            return self.bibtex(cmd, cwd)
        if cmd[0] == "sage":
            return self.sage(cmd, cwd)
        raise AssertionError(f"unexpected command {cmd}")

    def tools(self):
        return [tool for tool, _ in self.calls]

    def latex(self, cmd, cwd):
        self.latex_passes += 1
        if self.dies_early:
            return subprocess.CompletedProcess(
                cmd, 1, stdout=b"! I can't find file.\n", stderr=b""
            )
        name = Path(cmd[-1]).stem
        ext = "pdf" if cmd[0] == "pdflatex" else "dvi"
        aux = ["\\relax\n"]
        if self.citations:
            aux += [
                "\\citation{knuth}\n",
                "\\bibstyle{plain}\n",
                "\\bibdata{refs}\n",
            ]
            if (cwd / f"{name}.bbl").exists():
                aux.append("\\bibcite{knuth}{1}\n")
        (cwd / f"{name}.aux").write_text("".join(aux))
        (cwd / f"{name}.log").write_text("log\n")
        (cwd / f"{name}.{ext}").write_text("output\n")
        fls = [f"PWD {cwd}", f"INPUT {name}.tex", "INPUT /usr/share/texmf/article.cls"]
        if (cwd / f"{name}.bbl").exists():
            fls.append(f"INPUT {name}.bbl")
        if (cwd / f"{name}.sagetex.sout").exists():
            fls.append(f"INPUT {name}.sagetex.sout")
        fls += [f"INPUT {path}" for path in self.extra_inputs]
        fls += [f"OUTPUT {name}.{ext}", f"OUTPUT {name}.log", f"OUTPUT {name}.aux"]
        (cwd / f"{name}.fls").write_text("\n".join(fls) + "\n")
        if self.sage_lines is not None:
            (cwd / f"{name}.sagetex.sage").write_text(self.sage_lines)
        returncode, stdout = self.latex_output(self.latex_passes, cwd, name)
        return subprocess.CompletedProcess(
            cmd, returncode, stdout=stdout.encode("utf-8"), stderr=b""
        )

    def bibtex(self, cmd, cwd):
        name = cmd[-1]
        if not (cwd / f"{name}.aux").exists():
            return subprocess.CompletedProcess(
                cmd, 1, stdout=b"I couldn't open file name.aux\n", stderr=b""
            )
        (cwd / f"{name}.bbl").write_text(
            "\\begin{thebibliography}{1}\n"
            "\\bibitem{knuth} D. Knuth.\n"
            "\\end{thebibliography}\n"
        )
        (cwd / f"{name}.blg").write_text("This is BibTeX\n")
        return subprocess.CompletedProcess(cmd, 0, stdout=b"", stderr=b"")

    def sage(self, cmd, cwd):
        source = cwd / cmd[-1]
        m = hashlib.md5()
        with open(source, encoding="utf-8") as fp:
            for line in fp:
                if line.startswith(
                    (" _st_.goboom", "print('SageT", "_st_.current_tex_line")
                ):
                    continue
                m.update(line.encode("utf-8"))
        job = source.name[: -len(".sagetex.sage")]
        (cwd / f"{job}.sagetex.sout").write_text(
            "\\newlabel{@sageinline0}{{2}{}{}{}{}}\n"
            "%" + m.hexdigest() + "% md5sum of corresponding .sage file"
            ' (minus "goboom" and pause/unpause lines)\n'
        )
        (cwd / f"sage-plots-for-{job}.tex").mkdir(exist_ok=True)
        return subprocess.CompletedProcess(cmd, 0, stdout=b"", stderr=b"")


@pytest.fixture
def fake_recipe():
    return FakeRecipe


@pytest.fixture
def make_registry():
    def make(*recipes):
        return RecipeRegistry(recipes)

    return make


@pytest.fixture
def fake_tex(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    tex = FakeTex()
    monkeypatch.setattr(recipe_module.subprocess, "run", tex)
    return tex
