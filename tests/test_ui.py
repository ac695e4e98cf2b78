import pytest

from drills import ui


@pytest.fixture(autouse=True)
def _plain_terminal(monkeypatch):
    monkeypatch.delenv("FORCE_COLOR", raising=False)


def test_no_emoji_reflects_environment(monkeypatch):
    monkeypatch.setenv("NO_EMOJI", "1")
    assert ui.no_emoji() is True
    monkeypatch.delenv("NO_EMOJI")
    assert ui.no_emoji() is False


def test_no_emoji_true_for_empty_value(monkeypatch):
    monkeypatch.setenv("NO_EMOJI", "")
    assert ui.no_emoji() is True


def test_warn_without_emoji(monkeypatch, capsys):
    monkeypatch.setenv("NO_EMOJI", "1")
    ui.warn("Ran x.rs with errors")
    assert capsys.readouterr().out == "! Ran x.rs with errors\n"


def test_success_without_emoji(monkeypatch, capsys):
    monkeypatch.setenv("NO_EMOJI", "1")
    ui.success("Successfully ran x.rs")
    assert capsys.readouterr().out == "✓ Successfully ran x.rs\n"


def test_warn_with_emoji(monkeypatch, capsys):
    monkeypatch.delenv("NO_EMOJI", raising=False)
    ui.warn("broken")
    assert capsys.readouterr().out == "⚠️  broken\n"


def test_success_with_emoji(monkeypatch, capsys):
    monkeypatch.delenv("NO_EMOJI", raising=False)
    ui.success("fine")
    assert capsys.readouterr().out == "✅ fine\n"


def test_message_with_brackets_is_kept_verbatim(monkeypatch, capsys):
    monkeypatch.setenv("NO_EMOJI", "1")
    ui.warn("[bold]:smile: [x]")
    assert capsys.readouterr().out.rstrip("\n").endswith("[bold]:smile: [x]")