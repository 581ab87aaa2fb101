import pytest

from cli import main


@pytest.fixture
def log_path(tmp_path, monkeypatch):
    path = tmp_path / "punch.log"
    monkeypatch.setenv("PUNCH_LOG_FILE", str(path))
    return path


def test_in_then_out(log_path, capsys):
    assert main(["in"]) == 0
    assert "Punched in at" in capsys.readouterr().out

    assert main(["out"]) == 0
    assert "Punched out at" in capsys.readouterr().out
    assert len(log_path.read_text().splitlines()) == 2


def test_double_in_fails(log_path, capsys):
    assert main(["in"]) == 0
    capsys.readouterr()

    assert main(["in"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Already punched in" in captured.err
    assert len(log_path.read_text().splitlines()) == 1


def test_card_modes(log_path, capsys):
    log_path.write_text(
        "2026-10-01T09:00:00_I\n"
        "2026-10-01T09:30:00_O\n"
        "2026-10-01T13:00:00_I\n"
        "2026-10-01T17:38:00_O\n"
    )

    assert main(["card"]) == 0
    assert "(04h38m)" in capsys.readouterr().out

    assert main(["card", "--week"]) == 0
    assert "Total:" in capsys.readouterr().out

    assert main(["card", "-m"]) == 0
    assert "Total:" in capsys.readouterr().out


def test_card_on_empty_log(log_path, capsys):
    assert main(["card"]) == 1
    assert "punch in first" in capsys.readouterr().err


def test_corrupt_log(log_path, capsys):
    log_path.write_text("garbage\n")
    assert main(["card", "-w"]) == 1
    assert "corrupt" in capsys.readouterr().err


def test_file_option_overrides_environment(log_path, tmp_path, capsys):
    other = tmp_path / "other.log"
    assert main(["--file", str(other), "in"]) == 0
    assert other.exists()
    assert not log_path.exists()


@pytest.mark.parametrize("argv", [
    [],
    ["lunch"],
    ["card", "-x"],
    ["card", "-w", "-m"],
    ["in", "--week"],
])
def test_usage_errors(log_path, capsys, argv):
    assert main(argv) == 2
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "usage:" in captured.err
    assert not log_path.exists()


def test_version(capsys):
    assert main(["--version"]) == 0
    assert "punch 0.1.0" in capsys.readouterr().out


def test_unknown_log_level(log_path, monkeypatch, capsys):
    monkeypatch.setenv("PUNCH_LOG_LEVEL", "loud")
    assert main(["card", "-w"]) == 2
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "punch: unknown PUNCH_LOG_LEVEL 'LOUD'" in captured.err
