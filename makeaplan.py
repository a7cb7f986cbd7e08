#!/usr/bin/env python3
"""
makeaplan: from product idea to technical plan

Walks a product idea through three rounds of AI-generated multiple-choice
questions, then generates a technical specification, a project file
structure and a JSON tree of that structure. Sessions are saved after every
step and can be resumed.

Usage:
    python makeaplan.py new --idea "A habit tracker for small teams"
    python makeaplan.py resume
    python makeaplan.py list

This file is a thin wrapper around the cli/ and plan_platform/ packages.
"""

from cli.commands import run

if __name__ == "__main__":
    run()
