"""Checking exercises one after another and reporting on each."""

from __future__ import annotations

import enum
import json
from collections.abc import Iterable

from rich.console import Console
from rich.status import Status
from rich.text import Text

from .exercise import CompileError, CompiledExercise, Exercise, Mode, RunError
from .ui import no_emoji, success, warn

_SEPARATOR = "===================="


class RunMode(enum.Enum):
    """Whether a passing exercise is followed by the completion prompt."""

    INTERACTIVE = enum.auto()
    NON_INTERACTIVE = enum.auto()


class VerificationFailed(Exception):
    """An exercise failed to build, failed to run, or is not marked done."""

    def __init__(self, exercise: Exercise) -> None:
        super().__init__(f"{exercise} did not pass")
        self.exercise = exercise


def _console() -> Console:
    return Console(highlight=False, markup=False, emoji=False, soft_wrap=True)


def _quoted(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


class _Spinner:
    """A transient status spinner, shown only on a terminal."""

    def __init__(self, message: str) -> None:
        console = _console()
        self._status: Status | None = None
        if console.is_terminal:
            self._status = console.status(message)
            self._status.start()

    def update(self, message: str) -> None:
        if self._status is not None:
            self._status.update(message)

    def stop(self) -> None:
        if self._status is not None:
            self._status.stop()

    def __enter__(self) -> _Spinner:
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()


def verify(exercises: Iterable[Exercise], verbose: bool = False) -> None:
    """Check each exercise in order; raise VerificationFailed at the first that fails."""
    for exercise in exercises:
        match exercise.mode:
            case Mode.TEST:
                done = _compile_and_test(exercise, RunMode.INTERACTIVE, verbose)
            case Mode.COMPILE:
                done = _compile_and_run_interactively(exercise)
            case Mode.CLIPPY:
                done = _compile_only(exercise)
        if not done:
            raise VerificationFailed(exercise)


def test(exercise: Exercise, verbose: bool = False) -> None:
    """Build and run an exercise's tests without prompting."""
    _compile_and_test(exercise, RunMode.NON_INTERACTIVE, verbose)


def _compile(exercise: Exercise, spinner: _Spinner) -> CompiledExercise:
    try:
        return exercise.compile()
    except CompileError as err:
        spinner.stop()
        warn(f"Compiling of {exercise} failed! Please try again. Here's the output:")
        print(err.output.stderr)
        raise VerificationFailed(exercise) from err


def _compile_only(exercise: Exercise) -> bool:
    with _Spinner(f"Compiling {exercise}...") as spinner:
        _compile(exercise, spinner).close()
    success(f"Successfully compiled {exercise}!")
    return prompt_for_completion(exercise, None)


def _compile_and_run_interactively(exercise: Exercise) -> bool:
    with _Spinner(f"Compiling {exercise}...") as spinner:
        compiled = _compile(exercise, spinner)
        with compiled:
            print(f"Compiling: {_quoted(exercise.name)}")
            spinner.update(f"Running {exercise}...")
            try:
                output = compiled.run()
                error = None
            except RunError as err:
                error = err

    if error is not None:
        warn(f"Ran {exercise} with errors")
        print(error.output.stdout)
        print(error.output.stderr)
        raise VerificationFailed(exercise) from error

    success(f"Successfully ran {exercise}!")
    return prompt_for_completion(exercise, output.stdout)


def _compile_and_test(exercise: Exercise, run_mode: RunMode, verbose: bool) -> bool:
    with _Spinner(f"Testing {exercise}...") as spinner:
        with _compile(exercise, spinner) as compiled:
            try:
                output = compiled.run()
                error = None
            except RunError as err:
                error = err

    if error is not None:
        warn(f"Testing of {exercise} failed! Please try again. Here's the output:")
        print(error.output.stdout)
        raise VerificationFailed(exercise) from error

    if verbose:
        print(output.stdout)
    success(f"Successfully tested {exercise}")
    if run_mode is RunMode.INTERACTIVE:
        return prompt_for_completion(exercise, None)
    return True


def prompt_for_completion(exercise: Exercise, prompt_output: str | None) -> bool:
    """Return True if the exercise is done, else show where its marker is and return False."""
    state = exercise.state()
    if state.done:
        return True

    plain = no_emoji()
    match exercise.mode:
        case Mode.COMPILE:
            message = "The code is compiling!"
        case Mode.TEST:
            message = "The code is compiling, and the tests pass!"
        case Mode.CLIPPY:
            message = (
                "The code is compiling, and Clippy is happy!"
                if plain
                else "The code is compiling, and 📎 Clippy 📎 is happy!"
            )

    console = _console()
    print()
    print(f"~*~ {message} ~*~" if plain else f"🎉 🎉  {message} 🎉 🎉")
    print()

    if prompt_output is not None:
        print("Output:")
        console.print(Text(_SEPARATOR, style="bold"))
        print(prompt_output)
        console.print(Text(_SEPARATOR, style="bold"))
        print()

    print("You can keep working on this exercise,")
    console.print(
        Text.assemble(
            "or jump into the next one by removing the ",
            ("`I AM NOT DONE`", "bold"),
            " comment:",
        )
    )
    print()
    for context_line in state.context:
        console.print(
            Text.assemble(
                (f"{context_line.number:>2}", "blue bold"),
                " ",
                ("|", "blue"),
                "  ",
                (context_line.line, "bold" if context_line.important else ""),
            )
        )
    return False