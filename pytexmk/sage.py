"""Run sage on the ``.sagetex.sage`` file that the sagetex package writes."""

from .digest import SAGE_VOLATILE_PREFIXES, needs_rebuild
from .recipe import Recipe


class SageRecipe(Recipe):
    key = "sagetex.sout"
    uses = "sagetex.sage"
    generated = ("sagetex.sage.py", "sagetex.scmd")
    generated_dirs = ("sage-plots-for-{name}.tex",)

    command = ["sage"]

    def needs_to_run(self, target, queue):
        return needs_rebuild(
            self.source_for(target), target, ignore=SAGE_VOLATILE_PREFIXES
        )

    def run(self, target, queue):
        source = self.source_for(target)
        print("Running rule on", source.name)
        cmd = self.command + [source.name]
        result = self.invoke(cmd, cwd=source.parent)
        if result.returncode != 0:
            self.fail(target, cmd, result)
        self.register_outputs(target, queue)


def recipes(options, registry):
    registry.register(SageRecipe())
