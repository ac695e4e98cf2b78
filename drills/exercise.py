"""Exercises: loading, compiling, running and checking their progress marker."""

from __future__ import annotations

import enum
import os
import re
import subprocess
import threading
import tomllib
from dataclasses import dataclass
from pathlib import Path

RUSTC_COLOR_ARGS = ("--color", "always")
I_AM_DONE_REGEX = re.compile(r"^\s*///?\s*I\s+AM\s+NOT\s+DONE", re.MULTILINE)
CONTEXT = 2
CLIPPY_CARGO_TOML_PATH = "./exercises/clippy/Cargo.toml"


def temp_file() -> str:
    """Return a temporary binary name unique to this process and thread."""
    return f"./temp_{os.getpid()}_{threading.get_ident()}"


def clean() -> None:
    """Remove the temporary binary, ignoring any error."""
    try:
        os.remove(temp_file())
    except OSError:
        pass


class Mode(enum.Enum):
    """How an exercise is checked."""

    COMPILE = "compile"
    TEST = "test"
    CLIPPY = "clippy"


@dataclass(frozen=True)
class ContextLine:
    """A source line shown around the progress marker."""

    line: str
    number: int
    important: bool


@dataclass(frozen=True)
class State:
    """Progress of an exercise: done when there is no pending context."""

    context: tuple[ContextLine, ...] = ()

    @property
    def done(self) -> bool:
        return not self.context


DONE = State()


@dataclass(frozen=True)
class ExerciseOutput:
    """Captured standard output and error of a command."""

    stdout: str
    stderr: str

    @classmethod
    def _from_process(cls, proc: subprocess.CompletedProcess) -> ExerciseOutput:
        return cls(
            stdout=proc.stdout.decode("utf-8", errors="replace"),
            stderr=proc.stderr.decode("utf-8", errors="replace"),
        )


class CompileError(Exception):
    """Compiling an exercise failed."""

    def __init__(self, output: ExerciseOutput) -> None:
        super().__init__(output.stderr)
        self.output = output


class RunError(Exception):
    """Running a compiled exercise exited unsuccessfully."""

    def __init__(self, output: ExerciseOutput) -> None:
        super().__init__(output.stderr)
        self.output = output


def _lines(source: str) -> list[str]:
    lines = source.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def _capture(args: list[str]) -> subprocess.CompletedProcess:
    return subprocess.run(args, capture_output=True)


@dataclass
class Exercise:
    """One exercise as described in info.toml."""

    name: str
    path: Path
    mode: Mode
    hint: str

    def __post_init__(self) -> None:
        self.path = Path(self.path)
        self.mode = Mode(self.mode)

    def __str__(self) -> str:
        return str(self.path)

    def compile(self) -> CompiledExercise:
        """Build the exercise; raise CompileError with the output on failure."""
        path = str(self.path)
        match self.mode:
            case Mode.COMPILE:
                proc = _capture(["rustc", path, "-o", temp_file(), *RUSTC_COLOR_ARGS])
            case Mode.TEST:
                proc = _capture(
                    ["rustc", "--test", path, "-o", temp_file(), *RUSTC_COLOR_ARGS]
                )
            case Mode.CLIPPY:
                proc = self._clippy()
        if proc.returncode == 0:
            return CompiledExercise(self)
        clean()
        raise CompileError(ExerciseOutput._from_process(proc))

    def _clippy(self) -> subprocess.CompletedProcess:
        name = self.name
        cargo_toml = (
            f'[package]\nname = "{name}"\nversion = "0.0.1"\nedition = "2018"\n'
            f'[[bin]]\nname = "{name}"\npath = "{name}.rs"'
        )
        try:
            Path(CLIPPY_CARGO_TOML_PATH).write_text(cargo_toml)
        except OSError as err:
            message = (
                "Failed to write Clippy Cargo.toml file."
                if "NO_EMOJI" in os.environ
                else "Failed to write 📎 Clippy 📎 Cargo.toml file."
            )
            raise RuntimeError(message) from err
        # Build a binary too so the exercise can be run afterwards; a failure
        # here shows up again in clippy's own output.
        _capture(["rustc", str(self.path), "-o", temp_file(), *RUSTC_COLOR_ARGS])
        # A clean is needed for clippy to report every lint.
        _capture(["cargo", "clean", "--manifest-path", CLIPPY_CARGO_TOML_PATH, *RUSTC_COLOR_ARGS])
        return _capture(
            [
                "cargo", "clippy", "--manifest-path", CLIPPY_CARGO_TOML_PATH,
                *RUSTC_COLOR_ARGS, "--", "-D", "warnings", "-D", "clippy::float_cmp",
            ]
        )

    def _run(self) -> ExerciseOutput:
        arg = "--show-output" if self.mode is Mode.TEST else ""
        proc = _capture([temp_file(), arg])
        output = ExerciseOutput._from_process(proc)
        if proc.returncode != 0:
            raise RunError(output)
        return output

    def state(self) -> State:
        """Return DONE, or the lines around the first progress marker."""
        source = self.path.read_text(encoding="utf-8")
        if not I_AM_DONE_REGEX.search(source):
            return DONE
        lines = _lines(source)
        matched = next(i for i, line in enumerate(lines) if I_AM_DONE_REGEX.search(line))
        low = max(matched - CONTEXT, 0)
        high = matched + CONTEXT
        return State(
            tuple(
                ContextLine(line=line, number=i + 1, important=i == matched)
                for i, line in enumerate(lines)
                if low <= i <= high
            )
        )

    def looks_done(self) -> bool:
        """Whether the progress marker has been removed."""
        return self.state().done


class CompiledExercise:
    """A built exercise; closing it removes the temporary binary."""

    def __init__(self, exercise: Exercise) -> None:
        self.exercise = exercise

    def run(self) -> ExerciseOutput:
        """Run the binary; raise RunError with the output on failure."""
        return self.exercise._run()

    def close(self) -> None:
        clean()

    def __enter__(self) -> CompiledExercise:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def load_exercises(path: str | os.PathLike) -> list[Exercise]:
    """Read the exercise list from an info.toml file."""
    with open(path, "rb") as fh:
        data = tomllib.load(fh)
    return [
        Exercise(
            name=entry["name"],
            path=Path(entry["path"]),
            mode=Mode(entry["mode"]),
            hint=entry["hint"],
        )
        for entry in data["exercises"]
    ]