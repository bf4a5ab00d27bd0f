class BuildError(Exception):
    """Base class for failures that abort the build of one document."""


class ToolInvocationFailure(BuildError):
    """An external tool exited with a non-zero status or could not start."""

    def __init__(self, cmd, returncode, stdout="", stderr=""):
        self.cmd = list(cmd)
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        if returncode is None:
            msg = f"could not execute {' '.join(self.cmd)}"
        else:
            msg = f"{' '.join(self.cmd)} exited with status {returncode}"
        super().__init__(msg)


class FormatError(BuildError):
    """The recording file contains a line we do not understand."""


class EncodingError(BuildError):
    """Tool output or a recording file is not valid UTF-8."""


class FilesystemError(BuildError):
    """A file the build depends on exists but could not be read."""


class NotConvergedError(BuildError):
    """A target was requested more often than the pass limit allows."""

    def __init__(self, target, passes):
        self.target = target
        self.passes = passes
        super().__init__(
            f"{target} did not converge after {passes} passes"
        )
