"""Run, check and watch small programming exercises from the terminal, with a few worked examples."""

__version__ = "4.7.0"