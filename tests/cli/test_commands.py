import pytest

from pytexmk import command_line, job
from pytexmk.command_registry import (
    CommandRegistrationError,
    _COMMAND_SPECS,
    register_command,
)


@pytest.fixture
def captured_run(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    calls = []

    def fake_run(options):
        calls.append(options)
        return 0

    monkeypatch.setattr(job, "run", fake_run)
    return calls


def test_build_command(captured_run):
    assert command_line.main(["build", "a.tex", "b.tex", "--clean"]) == 0
    options = captured_run[0]
    assert [str(f) for f in options.files] == ["a.tex", "b.tex"]
    assert options.clean is True
    assert options.dvi is False


def test_no_command_builds_everything(captured_run):
    assert command_line.main([]) == 0
    assert captured_run[0].files == []


def test_max_passes_option(captured_run):
    command_line.main(["build", "--dvi", "--max-passes", "3"])
    assert captured_run[0].max_passes == 3
    assert captured_run[0].dvi is True


def test_config_file(captured_run, tmp_path):
    (tmp_path / "pytexmk.yaml").write_text("files: [paper.tex]\nclean: true\n")
    command_line.main(["build"])
    assert [str(f) for f in captured_run[0].files] == ["paper.tex"]
    assert captured_run[0].clean is True


def test_switches_override_config_file(captured_run, tmp_path):
    (tmp_path / "pytexmk.yaml").write_text("dvi: true\nclean: true\n")
    command_line.main(["build", "--no-clean", "--no-dvi"])
    assert captured_run[0].clean is False
    assert captured_run[0].dvi is False


def test_switches_default_to_config_file(captured_run, tmp_path):
    (tmp_path / "pytexmk.yaml").write_text("dvi: true\n")
    command_line.main(["build"])
    assert captured_run[0].dvi is True
    assert captured_run[0].clean is False


def test_failures_give_exit_status(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(job, "run", lambda options: 2)
    assert command_line.main(["build", "a.tex"]) == 1


def test_commands_registered():
    assert {"build", "watch"} <= set(_COMMAND_SPECS)
    parser = command_line.build_parser()
    args = parser.parse_args(["watch", "a.tex", "--max-passes", "4"])
    assert args.files == ["a.tex"]
    assert int(args.max_passes) == 4


def test_duplicate_command():
    with pytest.raises(CommandRegistrationError):

        @register_command("build again")
        def build():
            pass
