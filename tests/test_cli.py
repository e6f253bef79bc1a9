import pytest

import fdllm.cli as cli
from fdllm.core import ClipboardError


def _write_config(home, text):
    path = home / "fdllm" / "config.toml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def project(home):
    src = home / "proj" / "src"
    src.mkdir(parents=True)
    (src / "main.rs").write_text("fn main() {}", encoding="utf-8")
    (home / "proj" / "Cargo.toml").write_text("[package]", encoding="utf-8")
    _write_config(
        home,
        """\
files = ["~/proj/Cargo.toml"]

[profiles.rust]
files = ["~/proj/Cargo.toml"]
directories = ["~/proj/src"]

[profiles.rust.project]
path = "~/proj"
tree_level = 2

[profiles.empty]
directories = ["~/proj/nothing-here"]
""",
    )
    return home / "proj"


def test_legacy_mode(project, fake_tree, fake_clipboard, capsys):
    cli.main([], tree_provider=fake_tree, clipboard=fake_clipboard)

    assert fake_clipboard.contents == "# NOTE: ~/proj/Cargo.toml:\n[package]\n"
    assert fake_tree.calls == []
    out = capsys.readouterr().out
    assert "Using default configuration" in out
    assert "copied to clipboard" in out


def test_profile_mode(project, fake_tree, fake_clipboard, capsys):
    cli.main(["rust"], tree_provider=fake_tree, clipboard=fake_clipboard)

    main_rs = project / "src" / "main.rs"
    assert fake_clipboard.contents == (
        f"# NOTE: Project Tree: {project}\n{fake_tree.output}\n"
        "# NOTE: ~/proj/Cargo.toml:\n[package]\n"
        f"# NOTE: {main_rs}:\nfn main() {{}}\n"
    )
    assert fake_tree.calls == [(project, 2)]
    assert "Using profile: rust" in capsys.readouterr().out


def test_no_tree_flag(project, fake_tree, fake_clipboard):
    cli.main(["rust", "--no-tree"], tree_provider=fake_tree, clipboard=fake_clipboard)
    assert fake_tree.calls == []
    assert "Project Tree" not in fake_clipboard.contents


def test_files_override(project, fake_tree, fake_clipboard):
    cli.main(
        ["rust", "--files", "~/proj/src/main.rs"],
        tree_provider=fake_tree,
        clipboard=fake_clipboard,
    )
    assert fake_clipboard.contents.endswith("# NOTE: ~/proj/src/main.rs:\nfn main() {}\n")
    assert "Cargo.toml" not in fake_clipboard.contents


def test_unknown_profile_exits_before_reading(project, fake_tree, fake_clipboard, monkeypatch, capsys):
    def no_reads(*args, **kwargs):
        raise AssertionError("files must not be read")

    monkeypatch.setattr(cli, "resolve_files", no_reads)
    monkeypatch.setattr(cli, "assemble", no_reads)

    with pytest.raises(SystemExit) as exc:
        cli.main(["nope"], tree_provider=fake_tree, clipboard=fake_clipboard)

    assert exc.value.code == 1
    assert "Profile 'nope' not found" in capsys.readouterr().err
    assert fake_clipboard.writes == 0


def test_empty_file_set_exits_before_clipboard(project, fake_tree, fake_clipboard, capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main(["empty"], tree_provider=fake_tree, clipboard=fake_clipboard)

    assert exc.value.code == 1
    assert "No files provided" in capsys.readouterr().err
    assert fake_tree.calls == []
    assert fake_clipboard.writes == 0


def test_empty_content_exits(home, fake_tree, fake_clipboard, capsys):
    _write_config(home, 'files = ["~/missing.txt"]\n')

    with pytest.raises(SystemExit) as exc:
        cli.main([], tree_provider=fake_tree, clipboard=fake_clipboard)

    assert exc.value.code == 1
    assert "No valid files or project tree found" in capsys.readouterr().err
    assert fake_clipboard.writes == 0


def test_clipboard_failure_exits(project, fake_tree, capsys):
    class Broken:
        def write(self, text):
            raise ClipboardError("Failed to access clipboard: no display")

    with pytest.raises(SystemExit) as exc:
        cli.main([], tree_provider=fake_tree, clipboard=Broken())

    assert exc.value.code == 1
    assert "Failed to access clipboard" in capsys.readouterr().err


def test_bad_config_exits(home, fake_tree, fake_clipboard, capsys):
    path = _write_config(home, "files = [\n")

    with pytest.raises(SystemExit) as exc:
        cli.main([], tree_provider=fake_tree, clipboard=fake_clipboard)

    assert exc.value.code == 1
    assert str(path) in capsys.readouterr().err


def test_missing_home_exits(monkeypatch, fake_tree, fake_clipboard):
    monkeypatch.delenv("HOME", raising=False)

    with pytest.raises(SystemExit) as exc:
        cli.main([], tree_provider=fake_tree, clipboard=fake_clipboard)
    assert exc.value.code == 1


def test_first_run_writes_default_config(home, fake_tree, fake_clipboard, capsys):
    # the default config points at files that do not exist here
    with pytest.raises(SystemExit):
        cli.main([], tree_provider=fake_tree, clipboard=fake_clipboard)

    assert (home / "fdllm" / "config.toml").is_file()
    assert "Default config.toml created at" in capsys.readouterr().out


def test_explicit_config_path(tmp_path, home, fake_tree, fake_clipboard):
    note = tmp_path / "note.txt"
    note.write_text("hi", encoding="utf-8")
    config = tmp_path / "alt.toml"
    config.write_text(f'files = ["{note}"]\n', encoding="utf-8")

    cli.main(["--config", str(config)], tree_provider=fake_tree, clipboard=fake_clipboard)
    assert fake_clipboard.contents == f"# NOTE: {note}:\nhi\n"


def test_extra_positional_argument_exits_1(project, fake_tree, fake_clipboard, capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main(["rust", "extra"], tree_provider=fake_tree, clipboard=fake_clipboard)

    assert exc.value.code == 1
    assert "unrecognized arguments: extra" in capsys.readouterr().err
    assert fake_clipboard.writes == 0


def test_help_exits_0(fake_tree, fake_clipboard):
    with pytest.raises(SystemExit) as exc:
        cli.main(["--help"], tree_provider=fake_tree, clipboard=fake_clipboard)
    assert exc.value.code == 0
