"""
Entry point for running the scheduler as a module.

Usage:
    python -m scheduler init --sample
    python -m scheduler autofill
    python -m scheduler check
    python -m scheduler view --class 1A
"""

from scheduler.cli import main

if __name__ == "__main__":
    main()
