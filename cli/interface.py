"""
Terminal rendering helpers for the makeaplan CLI.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional

from plan_platform.models import Question, SessionSummary, utcnow
from plan_platform.session_state_machine import step_label
from plan_platform.user_config import UserConfig, mask_key

WIDTH = 60


def print_header(title: str):
    print("\n" + "=" * WIDTH)
    print(title)
    print("=" * WIDTH)


def print_banner():
    print_header("MAKEAPLAN  ·  from idea to technical plan")


def print_question(question: Question, index: int, total: int):
    """Print one question with its numbered choices and the extra options."""
    print(f"\n[{index}/{total}] {question.question}")
    for i, choice in enumerate(question.choices, 1):
        print(f"    {i}) {choice}")
    print("    0) Write your own answer")
    print("    s) Skip this question")


def print_round_header(round_number: int):
    print_header(f"ROUND {round_number} QUESTIONS")
    print("  Tip: type the number of a choice to select it.")


def format_relative_date(when: datetime, now: Optional[datetime] = None) -> str:
    """Short relative time: '5m ago', '3h ago', 'yesterday', '4d ago', then the date."""
    now = now or utcnow()
    delta = now - when
    days = delta.days
    if days <= 0:
        minutes = max(int(delta.total_seconds() // 60), 0)
        if minutes < 60:
            return f"{minutes}m ago"
        return f"{minutes // 60}h ago"
    if days == 1:
        return "yesterday"
    if days < 7:
        return f"{days}d ago"
    return when.strftime("%Y-%m-%d")


def format_age(when: datetime, now: Optional[datetime] = None) -> str:
    """Age in whole days: 'today', 'yesterday' or 'N days ago'."""
    now = now or utcnow()
    days = (now - when).days
    if days <= 0:
        return "today"
    if days == 1:
        return "yesterday"
    return f"{days} days ago"


def print_session_table(summaries: list[SessionSummary], now: Optional[datetime] = None):
    """Print stored sessions, one row each."""
    if not summaries:
        print("No sessions found. Start one with: makeaplan new")
        return

    print(f"\n  {'ID':<10}{'STEP':<16}{'UPDATED':<12}IDEA")
    print("  " + "-" * (WIDTH - 2))
    for s in summaries:
        print(f"  {s.id:<10}{step_label(s.step):<16}{format_relative_date(s.updated_at, now):<12}{s.idea}")
    print(f"\n  {len(summaries)} session(s)")


def print_clean_preview(summaries: list[SessionSummary], days: int, now: Optional[datetime] = None):
    print(f"\nSessions not updated in the last {days} day(s):")
    for s in summaries:
        print(f"  • {s.id}  {s.idea}  ({format_age(s.updated_at, now)})")


def print_exported(paths: list[Path]):
    for path in paths:
        print(f"  ✓ Exported to {path}")


def print_config(config: UserConfig, config_path: Path, sessions_dir: Path):
    print_header("CONFIGURATION")
    print(f"  Config file:       {config_path}")
    print(f"  Sessions dir:      {sessions_dir}")
    print(f"  Default provider:  {config.default_provider}")
    print(f"  Default model:     {config.default_model or '(provider default)'}")
    print(f"  Anthropic API key: {mask_key(config.anthropic_api_key)}")
    print(f"  OpenAI API key:    {mask_key(config.openai_api_key)}")
