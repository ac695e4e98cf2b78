import subprocess

import pytest

from drills.exercise import Exercise, Mode
from drills.verify import (
    VerificationFailed,
    prompt_for_completion,
    test,
    verify,
)

PENDING = "// fake_exercise\n\n// I AM NOT DONE\n\nfn main() {\n\n}\n"
FINISHED = "// fake_exercise\n\nfn main() {\n\n}\n"


class FakeToolchain:
    def __init__(self):
        self.calls = []
        self.compile_ok = True
        self.compile_stderr = ""
        self.run_ok = True
        self.run_stdout = ""
        self.run_stderr = ""

    def __call__(self, args, **kwargs):
        self.calls.append(list(args))
        if args[0] in ("rustc", "cargo"):
            code = 0 if self.compile_ok else 1
            return subprocess.CompletedProcess(args, code, b"", self.compile_stderr.encode())
        code = 0 if self.run_ok else 101
        return subprocess.CompletedProcess(
            args, code, self.run_stdout.encode(), self.run_stderr.encode()
        )


@pytest.fixture
def fake(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("NO_EMOJI", raising=False)
    toolchain = FakeToolchain()
    monkeypatch.setattr(subprocess, "run", toolchain)
    return toolchain


def make(tmp_path, name, text, mode):
    path = tmp_path / f"{name}.rs"
    path.write_text(text)
    return Exercise(name=name, path=path, mode=mode, hint="Hello!")


def test_verify_all_done_compile_exercises(fake, tmp_path, capsys):
    first = make(tmp_path, "one", FINISHED, Mode.COMPILE)
    second = make(tmp_path, "two", FINISHED, Mode.COMPILE)
    fake.run_stdout = "program output"
    assert verify([first, second]) is None
    out = capsys.readouterr().out
    assert f"Successfully ran {first}!" in out
    assert f"Successfully ran {second}!" in out
    assert 'Compiling: "one"' in out


def test_verify_pending_exercise_fails_with_prompt(fake, tmp_path, capsys):
    pending = make(tmp_path, "pending", PENDING, Mode.COMPILE)
    fake.run_stdout = "hello from main"
    with pytest.raises(VerificationFailed) as info:
        verify([pending])
    assert info.value.exercise is pending
    out = capsys.readouterr().out
    assert "🎉 🎉  The code is compiling! 🎉 🎉" in out
    assert "Output:" in out
    assert "====================" in out
    assert "hello from main" in out
    assert " 3 |  // I AM NOT DONE" in out
    assert " 1 |  // fake_exercise" in out
    assert " 5 |  fn main() {" in out


def test_verify_stops_at_first_compile_failure(fake, tmp_path, capsys):
    broken = make(tmp_path, "broken", FINISHED, Mode.COMPILE)
    later = make(tmp_path, "later", FINISHED, Mode.COMPILE)
    fake.compile_ok = False
    fake.compile_stderr = "error: expected pattern"
    with pytest.raises(VerificationFailed) as info:
        verify([broken, later])
    assert info.value.exercise is broken
    assert all(str(later.path) not in call for call in fake.calls)
    out = capsys.readouterr().out
    assert f"Compiling of {broken} failed! Please try again. Here's the output:" in out
    assert "error: expected pattern" in out


def test_verify_run_failure(fake, tmp_path, capsys):
    exercise = make(tmp_path, "crash", FINISHED, Mode.COMPILE)
    fake.run_ok = False
    fake.run_stderr = "thread 'main' panicked"
    with pytest.raises(VerificationFailed):
        verify([exercise])
    out = capsys.readouterr().out
    assert f"Ran {exercise} with errors" in out
    assert "thread 'main' panicked" in out


def test_verify_test_mode_verbose_shows_output(fake, tmp_path, capsys):
    exercise = make(tmp_path, "testSuccess", FINISHED, Mode.TEST)
    fake.run_stdout = "THIS TEST TOO SHALL PASS"
    verify([exercise], verbose=True)
    out = capsys.readouterr().out
    assert "THIS TEST TOO SHALL PASS" in out
    assert f"Successfully tested {exercise}" in out
    assert ["rustc", "--test", str(exercise.path)] == fake.calls[0][:3]
    assert fake.calls[-1][1] == "--show-output"


def test_verify_test_mode_quiet_hides_output(fake, tmp_path, capsys):
    exercise = make(tmp_path, "testSuccess", FINISHED, Mode.TEST)
    fake.run_stdout = "THIS TEST TOO SHALL PASS"
    verify([exercise], verbose=False)
    out = capsys.readouterr().out
    assert "THIS TEST TOO SHALL PASS" not in out
    assert f"Successfully tested {exercise}" in out


def test_verify_pending_test_exercise_prompts(fake, tmp_path, capsys):
    exercise = make(tmp_path, "pending_test", PENDING, Mode.TEST)
    with pytest.raises(VerificationFailed):
        verify([exercise])
    out = capsys.readouterr().out
    assert "The code is compiling, and the tests pass!" in out


def test_test_does_not_prompt_for_pending(fake, tmp_path, capsys):
    exercise = make(tmp_path, "pending_test", PENDING, Mode.TEST)
    assert test(exercise, False) is None
    out = capsys.readouterr().out
    assert "I AM NOT DONE" not in out
    assert "You can keep working on this exercise," not in out


def test_test_failure_raises(fake, tmp_path, capsys):
    exercise = make(tmp_path, "testFailure", FINISHED, Mode.TEST)
    fake.run_ok = False
    fake.run_stdout = "assertion failed"
    with pytest.raises(VerificationFailed) as info:
        test(exercise, False)
    assert info.value.exercise is exercise
    out = capsys.readouterr().out
    assert f"Testing of {exercise} failed! Please try again. Here's the output:" in out
    assert "assertion failed" in out


def test_verify_clippy_mode(fake, tmp_path, capsys):
    (tmp_path / "exercises" / "clippy").mkdir(parents=True)
    exercise = make(tmp_path, "clippy1", FINISHED, Mode.CLIPPY)
    verify([exercise])
    out = capsys.readouterr().out
    assert f"Successfully compiled {exercise}!" in out
    assert any(call[:2] == ["cargo", "clippy"] for call in fake.calls)


def test_prompt_for_completion_done(tmp_path, capsys):
    exercise = make(tmp_path, "done", FINISHED, Mode.COMPILE)
    assert prompt_for_completion(exercise, None) is True
    assert capsys.readouterr().out == ""


def test_prompt_for_completion_no_emoji(monkeypatch, tmp_path, capsys):
    monkeypatch.setenv("NO_EMOJI", "1")
    exercise = make(tmp_path, "clip", PENDING, Mode.CLIPPY)
    assert prompt_for_completion(exercise, None) is False
    out = capsys.readouterr().out
    assert "~*~ The code is compiling, and Clippy is happy! ~*~" in out
    assert "Output:" not in out
    assert "or jump into the next one by removing the `I AM NOT DONE` comment:" in out