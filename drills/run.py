"""Running a single exercise and showing its output."""

from __future__ import annotations

from .exercise import CompileError, Exercise, Mode, RunError
from .ui import success, warn
from .verify import VerificationFailed, _quoted, _Spinner, test


class ExerciseFailed(Exception):
    """The exercise failed to build, or ran with errors."""

    def __init__(self, exercise: Exercise) -> None:
        super().__init__(f"{exercise} failed")
        self.exercise = exercise


def run(exercise: Exercise, verbose: bool = False) -> None:
    """Build and run one exercise; raise ExerciseFailed if that does not succeed."""
    if exercise.mode is Mode.TEST:
        try:
            test(exercise, verbose)
        except VerificationFailed as err:
            raise ExerciseFailed(exercise) from err
    else:
        _compile_and_run(exercise)


def _compile_and_run(exercise: Exercise) -> None:
    with _Spinner(f"Compiling {exercise}...") as spinner:
        print(f"Compiling: {_quoted(exercise.name)}")
        try:
            compiled = exercise.compile()
        except CompileError as err:
            spinner.stop()
            warn(f"Compilation of {exercise} failed!, Compiler error message:\n")
            print(err.output.stderr)
            raise ExerciseFailed(exercise) from err

        spinner.update(f"Running {exercise}...")
        with compiled:
            try:
                output = compiled.run()
                error = None
            except RunError as err:
                error = err

    if error is not None:
        print(error.output.stdout)
        print(error.output.stderr)
        warn(f"Ran {exercise} with errors")
        raise ExerciseFailed(exercise) from error

    print(output.stdout)
    success(f"Successfully ran {exercise}")