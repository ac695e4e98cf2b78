"""Command line entry point: run, hint, verify and watch homework exercises."""

from __future__ import annotations

import argparse
import enum
import errno
import queue
import subprocess
import sys
import threading
from collections.abc import Iterable, Sequence
from itertools import chain, dropwhile
from pathlib import Path
from typing import TextIO

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .exercise import Exercise, load_exercises
from .run import ExerciseFailed, run
from .ui import no_emoji
from .verify import VerificationFailed, verify

VERSION = "4.7.0"
INFO_FILE = "info.toml"
HOMEWORKS_DIR = "./homeworks"
_DEBOUNCE_SECONDS = 2.0
_POLL_SECONDS = 1.0

WELCOME = """       welcome to...
      _      _ _ _
   __| |_ __(_) | |___
  / _` | '__| | | / __|
 | (_| | |  | | | \\__ \\
  \\__,_|_|  |_|_|_|___/"""

DEFAULT_OUT = """Thanks for installing drills!

Is this your first time? Don't worry, these exercises are made for beginners.
Before you start, here is how things work:

1. You learn by solving exercises. Each exercise usually has an error in it,
   either a syntax error that stops it compiling or a logic error that makes
   its tests fail. Your job is to find the error and fix it. Once it compiles
   and its tests pass, you can move on to the next exercise.
2. In homework mode the first unfinished exercise is checked straight away.
   Don't be alarmed by an error message when you start: that error is part
   of the exercise. Open the exercise file in an editor and start digging!
3. If you are stuck, type 'hint' in homework mode, or run
   `drills hint exercise_name` to see a hint for an exercise.
4. When you have finished an exercise, remove its `I AM NOT DONE` comment
   to move on to the next one.

Got all that? Great! Run `drills homework <number>` to get the first exercise
of a homework. Make sure to have your editor open!"""

FINISH_LINE = """+------------------------------------------------+
|    You made it to the end of this homework!    |
+------------------------------------------------+

We hope you enjoyed working through these exercises.
If you noticed any issues, please let us know so we can fix them.
You can also contribute exercises of your own to help others learn!"""

_WATCH_HELP = """Commands available to you in watch mode:
  hint  - prints the current exercise's hint
  clear - clears the screen
  quit  - quits watch mode
  help  - displays this help message

Watch mode automatically re-evaluates the current exercise
when you edit a file's contents."""


class WatchStatus(enum.Enum):
    """How a homework watch session ended."""

    FINISHED = enum.auto()
    UNFINISHED = enum.auto()


class WatchShell:
    """Reads commands from standard input while a homework is being watched."""

    def __init__(self, hint: str | None = None, stdin: TextIO | None = None) -> None:
        self.hint = hint
        self.quit_requested = threading.Event()
        self._stdin = stdin

    def handle(self, line: str) -> None:
        """Act on one command line typed by the user."""
        command = line.strip()
        match command:
            case "hint":
                if self.hint is not None:
                    print(self.hint)
            case "clear":
                print("\x1b[2J\x1b[1;1H")
            case "quit":
                self.quit_requested.set()
                print("Bye!")
            case "help":
                print(_WATCH_HELP)
            case _:
                print(f"unknown command: {command}")

    def start(self) -> threading.Thread:
        """Start reading commands on a background thread and return that thread."""
        print(
            "Welcome to watch mode! You can type 'help' to get an overview "
            "of the commands you can use here."
        )
        thread = threading.Thread(target=self._read_commands, daemon=True)
        thread.start()
        return thread

    def _read_commands(self) -> None:
        stream = self._stdin if self._stdin is not None else sys.stdin
        while True:
            try:
                line = stream.readline()
            except (OSError, ValueError) as err:
                print(f"error reading command: {err}")
                return
            if not line:
                return
            self.handle(line)


class _Parser(argparse.ArgumentParser):
    """Argument parser that exits with status 1 on bad usage."""

    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _build_parser() -> _Parser:
    parser = _Parser(
        prog="drills",
        description="A collection of small exercises to get you used to "
        "writing and reading Rust code",
    )
    parser.add_argument(
        "--nocapture", action="store_true", help="show outputs from the test exercises"
    )
    parser.add_argument(
        "-v", "--version", action="store_true", help="show the executable version"
    )
    commands = parser.add_subparsers(dest="command")
    commands.add_parser("verify", help="Verifies all exercises according to the recommended order")
    run_parser = commands.add_parser("run", help="Runs/Tests a single exercise")
    run_parser.add_argument("name", help="the name of the exercise")
    hint_parser = commands.add_parser("hint", help="Returns a hint for the given exercise")
    hint_parser.add_argument("name", help="the name of the exercise")
    homework_parser = commands.add_parser("homework", help="Watches the exercises of one homework")
    homework_parser.add_argument("name", help="the day of the homework")
    return parser


def rustc_exists() -> bool:
    """Whether `rustc --version` can be run successfully."""
    try:
        proc = subprocess.run(["rustc", "--version"], stdout=subprocess.DEVNULL)
    except OSError:
        return False
    return proc.returncode == 0


def find_exercise(name: str, exercises: Sequence[Exercise]) -> Exercise:
    """Return the named exercise, or the first unfinished one for "next".

    Raises LookupError when there is no such exercise.
    """
    if name == "next":
        for exercise in exercises:
            if not exercise.looks_done():
                return exercise
        raise LookupError(
            "🎉 Congratulations! You have done all the exercises!\n"
            "🔚 There are no more exercises to do next!"
        )
    for exercise in exercises:
        if exercise.name == name:
            return exercise
    raise LookupError(f"No exercise found for '{name}'!")


def homework_exercises(
    exercises: Iterable[Exercise], homework_dir: str | Path
) -> list[Exercise]:
    """Keep the exercises whose topic directory appears in the homework directory."""
    homework_dir = Path(homework_dir)
    if not homework_dir.is_dir():
        raise LookupError("Can't find homework. Have you run the wrong homework number?")
    present = {entry.name for entry in homework_dir.iterdir()}
    selected = []
    for exercise in exercises:
        parts = exercise.path.as_posix().split("/")
        if len(parts) > 3 and parts[2] in present:
            selected.append(exercise)
    return selected


class _ChangeCollector(FileSystemEventHandler):
    def __init__(self, events: queue.Queue[str]) -> None:
        super().__init__()
        self._events = events

    def _record(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            path = event.src_path
            self._events.put(path.decode() if isinstance(path, bytes) else path)

    def on_created(self, event: FileSystemEvent) -> None:
        self._record(event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._record(event)


def _clear_screen() -> None:
    print("\x1bc")


def _ends_with(path: Path, suffix: Path) -> bool:
    tail = Path(suffix).parts
    parts = path.parts
    return len(tail) <= len(parts) and parts[len(parts) - len(tail):] == tail


def _debounced(first: str, events: queue.Queue[str]) -> list[str]:
    """Collect changed paths until the events go quiet, without duplicates."""
    paths = {first: None}
    while True:
        try:
            paths[events.get(timeout=_DEBOUNCE_SECONDS)] = None
        except queue.Empty:
            return list(paths)


def homework(
    exercises: Sequence[Exercise], verbose: bool = False, homework_number: str = ""
) -> WatchStatus:
    """Verify one homework's exercises, then re-check them whenever a file changes."""
    if not Path(HOMEWORKS_DIR).is_dir():
        raise FileNotFoundError(errno.ENOENT, "No such directory", HOMEWORKS_DIR)
    events: queue.Queue[str] = queue.Queue()
    observer = Observer()
    observer.schedule(_ChangeCollector(events), HOMEWORKS_DIR, recursive=True)
    observer.start()
    try:
        return _watch_homework(exercises, verbose, homework_number, events)
    finally:
        observer.stop()
        observer.join()


def _watch_homework(
    exercises: Sequence[Exercise],
    verbose: bool,
    homework_number: str,
    events: queue.Queue[str],
) -> WatchStatus:
    _clear_screen()
    selected = homework_exercises(exercises, Path(HOMEWORKS_DIR) / f"homework{homework_number}")
    print("\n")

    try:
        verify(selected, verbose)
        return WatchStatus.FINISHED
    except VerificationFailed as err:
        shell = WatchShell(err.exercise.hint)

    print("Spawning homework watch shell")
    shell.start()
    while True:
        try:
            first = events.get(timeout=_POLL_SECONDS)
        except queue.Empty:
            first = None
        if first is not None:
            for changed in _debounced(first, events):
                path = Path(changed)
                if path.suffix != ".rs" or not path.exists():
                    continue
                filepath = path.resolve()
                pending = chain(
                    dropwhile(lambda e: not _ends_with(filepath, e.path), selected),
                    (
                        e
                        for e in selected
                        if not e.looks_done() and not _ends_with(filepath, e.path)
                    ),
                )
                _clear_screen()
                try:
                    verify(pending, verbose)
                    return WatchStatus.FINISHED
                except VerificationFailed as err:
                    shell.hint = err.exercise.hint
        if shell.quit_requested.is_set():
            return WatchStatus.UNFINISHED


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line and return the process exit status."""
    try:
        args = _build_parser().parse_args(argv)
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 1

    if args.version:
        print(f"v{VERSION}")
        return 0

    if args.command is None:
        print(f"\n{WELCOME}\n")

    if not Path(INFO_FILE).exists():
        program = sys.argv[0] or "drills"
        print(f"{program} must be run from the directory holding {INFO_FILE}")
        print("Try `cd` into the exercises directory first!")
        return 1

    if not rustc_exists():
        print("We cannot find `rustc`.")
        print("Try running `rustc --version` to diagnose your problem.")
        print("For instructions on how to install Rust, check the README.")
        return 1

    exercises = load_exercises(INFO_FILE)
    verbose = args.nocapture

    if args.command is None:
        print(f"{DEFAULT_OUT}\n")
        return 0

    match args.command:
        case "run":
            try:
                run(find_exercise(args.name, exercises), verbose)
            except (LookupError, ExerciseFailed) as err:
                if isinstance(err, LookupError):
                    print(err)
                return 1
        case "hint":
            try:
                exercise = find_exercise(args.name, exercises)
            except LookupError as err:
                print(err)
                return 1
            print(exercise.hint)
        case "verify":
            try:
                verify(exercises, verbose)
            except VerificationFailed:
                return 1
        case "homework":
            try:
                status = homework(exercises, verbose, args.name)
            except LookupError as err:
                print(err)
                return 1
            except OSError as err:
                print(f"Error: Could not watch your progress. Error message was {err!r}.")
                print(
                    "Most likely you've run out of disk space or your "
                    "'inotify limit' has been reached."
                )
                return 1
            if status is WatchStatus.FINISHED:
                emoji = "★" if no_emoji() else "🎉"
                print(f"{emoji} All exercises completed! {emoji}")
                print(f"\n{FINISH_LINE}\n")
            else:
                print("We hope you're enjoying learning about Rust!")
                print(
                    "If you want to continue working on the exercises at a later "
                    "point, you can simply run `drills homework` again"
                )
    return 0


if __name__ == "__main__":
    sys.exit(main())