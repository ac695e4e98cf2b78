# drills

`drills` walks a learner through a set of small programming exercises. Each
exercise is a Rust source file that does not compile or whose tests fail; the
learner fixes it, and `drills` compiles it, runs it and reports the result.

## Installing

```
pip install .
```

The exercises are compiled with `rustc` (and, for lint exercises,
`cargo clippy`), so those tools must be on your `PATH`. The command checks
for `rustc` at start-up and stops if it cannot run `rustc --version`.

## The exercise list

`drills` must be started from a directory that holds an `info.toml` file
listing the exercises in their recommended order:

```toml
[[exercises]]
name = "variables1"
path = "homeworks/homework5/variables/variables1.rs"
mode = "compile"
hint = "Declare the variable with `let`."
```

`mode` is one of:

- `compile`: build the file and run the resulting program;
- `test`: build the file as a test harness and run its tests;
- `clippy`: build the file and lint it with `cargo clippy`, treating warnings
  as errors. The manifest for this is written to
  `./exercises/clippy/Cargo.toml`.

An exercise counts as pending while its file still has a comment line reading
`I AM NOT DONE`. When a pending exercise builds and passes, `drills verify`
shows the lines around that comment and stops there; remove the line to move
on to the next exercise.

## Commands

```
drills                      # show the introduction
drills --version            # print the version
drills verify               # check every exercise in order, stop at the first failure
drills run NAME             # compile and run one exercise ("next" picks the first pending one)
drills hint NAME            # print the hint for an exercise
drills homework N           # watch the exercises of ./homeworks/homeworkN
drills --nocapture run NAME # also show the output of test exercises
```

`drills homework N` takes the exercises whose topic directory (the third part
of the exercise path) appears under `./homeworks/homeworkN`, verifies them,
and then watches `./homeworks`, re-checking whenever a `.rs` file changes.
While it is watching, type one of these commands:

- `hint`: print the hint of the exercise that failed last
- `clear`: clear the screen
- `quit`: leave watch mode
- `help`: list the commands

Set the environment variable `NO_EMOJI` to replace the emoji in messages with
plain symbols.

The command exits with status 1 when an exercise fails, when no exercise of
the given name exists, when the arguments are wrong, when `info.toml` is
missing from the current directory, or when `rustc` cannot be found.

## What it does not do

There is no command to list the exercises with their done or pending state,
and no watch mode over the whole exercise list: watching is only offered per
homework, through `drills homework N`.

## Library modules

The command is built from `drills.exercise` (loading `info.toml` with
`load_exercises`, compiling and running an `Exercise`), `drills.verify`
(`verify`, `test`) and `drills.run` (`run`). The package also carries a few
small worked examples that can be used on their own:

- `drills.rps`: a commit-and-reveal rock-paper-scissors `Game` for two
  players. Each player places a SHA-256 hash of their hand string with
  `Game.place_hash`, then reveals the string with `Game.place_hand`; the hand
  is the first character of its first word. Once both hands are in,
  `Game.winner` holds the winning player, or `"DRAW"`. `Hand.from_char` reads
  `"0"`, `"1"` and `"2"` as rock, paper and scissors; rejected actions raise
  `GameError`.
- `drills.compute`: `is_prime` and `nth_prime`, and `process_instruction`,
  which finds the n-th prime from the first byte of an instruction payload.
- `drills.pda_instruction`: `unpack` decodes an instruction payload into a
  `PdaCreate` or `PdaWrite` value, raising `InstructionError` on bad input.

```python
from drills.compute import nth_prime
from drills.pda_instruction import unpack

nth_prime(5)                       # 11
unpack(bytes([1, 3]) + b"abc")     # PdaWrite(seed='abc')
```

## Running the tests

```
pip install ".[test]"
pytest
```