"""
Entry point for running makeaplan as a module.

Usage:
    python -m cli new --idea "A habit tracker for teams"
    python -m cli resume
    python -m cli list
    python -m cli export <session-id> --format both
"""

from .commands import run

if __name__ == "__main__":
    run()
