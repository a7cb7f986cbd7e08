"""
Console implementation of the answer collector and the other interactive prompts.
"""

from typing import Callable, Optional

from plan_platform.errors import ValidationError
from plan_platform.models import ExportFormat, Question, SessionConfig, SessionSummary
from plan_platform.runtime.config import (
    ANSWERS_PER_QUESTION_RANGE,
    AVAILABLE_MODELS,
    DEFAULT_ANSWERS_PER_QUESTION,
    DEFAULT_FIRST_ROUND_QUESTIONS,
    DEFAULT_MODEL_BY_PROVIDER,
    DEFAULT_SUBSEQUENT_ROUND_QUESTIONS,
    FIRST_ROUND_QUESTIONS_RANGE,
    SUBSEQUENT_ROUND_QUESTIONS_RANGE,
    SUPPORTED_PROVIDERS,
)
from plan_platform.session_state_machine import step_label

from .interface import format_relative_date, print_question, print_round_header

EXPORT_CHOICES: list[tuple[str, ExportFormat]] = [
    ("Markdown", "markdown"),
    ("JSON", "json"),
    ("Both", "both"),
]


class ConsoleAnswerCollector:
    """Prompts on stdin/stdout. ``input_func`` is swappable for tests.

    EOF and Ctrl-C propagate as ``KeyboardInterrupt`` so the CLI can exit
    with the interrupt status.
    """

    def __init__(self, input_func: Optional[Callable[[str], str]] = None):
        self._input = input_func

    def _ask(self, prompt: str) -> str:
        read = self._input or input
        try:
            return read(prompt).strip()
        except EOFError:
            raise KeyboardInterrupt from None

    # --- AnswerCollector port ---

    def ask_questions(self, questions: list[Question], round_number: int) -> list[str]:
        print_round_header(round_number)
        answers = []
        for i, question in enumerate(questions, 1):
            print_question(question, i, len(questions))
            answers.append(self._ask_one(question))
        return answers

    def _ask_one(self, question: Question) -> str:
        while True:
            raw = self._ask("  > ")
            lowered = raw.lower()
            if lowered == "s":
                return ""
            if lowered == "0":
                custom = ""
                while not custom:
                    custom = self._ask("  Your answer: ")
                return custom
            if raw.isdigit() and 1 <= int(raw) <= len(question.choices):
                return question.choices[int(raw) - 1]
            print(f"  Enter 1-{len(question.choices)}, 0 for your own answer, or s to skip.")

    def confirm_continue(self, prompt: str = "Continue to next step?") -> bool:
        return self.confirm(prompt, default=True)

    def select_export_format(self) -> ExportFormat:
        print("\nExport format:")
        for i, (label, _) in enumerate(EXPORT_CHOICES, 1):
            print(f"  {i}) {label}")
        index = self._choose(len(EXPORT_CHOICES))
        return EXPORT_CHOICES[index][1]

    # --- CLI prompts ---

    def confirm(self, prompt: str, default: bool = False) -> bool:
        hint = "(Y/n)" if default else "(y/N)"
        while True:
            raw = self._ask(f"{prompt} {hint}: ").lower()
            if not raw:
                return default
            if raw in ("y", "yes"):
                return True
            if raw in ("n", "no"):
                return False

    def _choose(self, count: int, allow_back: bool = False) -> Optional[int]:
        """Read a 1-based choice; returns the 0-based index, or None for back."""
        while True:
            raw = self._ask("  > ")
            if allow_back and raw.lower() in ("b", "back"):
                return None
            if raw.isdigit() and 1 <= int(raw) <= count:
                return int(raw) - 1
            print(f"  Enter a number between 1 and {count}.")

    def ask_for_idea(self) -> str:
        while True:
            idea = self._ask("What's your product idea? ")
            if idea:
                return idea
            print("  Please enter a product idea.")

    def _ask_int(self, prompt: str, default: int, bounds: tuple[int, int]) -> int:
        low, high = bounds
        while True:
            raw = self._ask(f"{prompt} [{default}]: ")
            if not raw:
                return default
            if raw.isdigit() and low <= int(raw) <= high:
                return int(raw)
            print(f"  Please enter a number between {low} and {high}.")

    def ask_provider(self, default: str) -> str:
        print("\nAI provider:")
        for i, provider in enumerate(SUPPORTED_PROVIDERS, 1):
            marker = " (default)" if provider == default else ""
            print(f"  {i}) {provider}{marker}")
        while True:
            raw = self._ask("  > ")
            if not raw:
                return default
            if raw.isdigit() and 1 <= int(raw) <= len(SUPPORTED_PROVIDERS):
                return SUPPORTED_PROVIDERS[int(raw) - 1]
            if raw in SUPPORTED_PROVIDERS:
                return raw
            print(f"  Enter a number between 1 and {len(SUPPORTED_PROVIDERS)}.")

    def ask_model(self, provider: str) -> Optional[str]:
        """Pick one of the provider's models; Enter keeps the provider default (None)."""
        names = [k for k, v in AVAILABLE_MODELS.items() if v["provider"] == provider]
        print(f"\nModel (Enter for {DEFAULT_MODEL_BY_PROVIDER[provider]}):")
        for i, name in enumerate(names, 1):
            print(f"  {i}) {name}  {AVAILABLE_MODELS[name]['label']}")
        while True:
            raw = self._ask("  > ")
            if not raw:
                return None
            if raw.isdigit() and 1 <= int(raw) <= len(names):
                return names[int(raw) - 1]
            print(f"  Enter a number between 1 and {len(names)}.")

    def ask_session_config(self, default_provider: str, provider: Optional[str] = None,
                           model: Optional[str] = None) -> SessionConfig:
        """Prompt for the round sizes, then provider and model unless already fixed."""
        print("\nSession configuration (press Enter to accept defaults):")
        first = self._ask_int(
            "  Number of questions in first round",
            DEFAULT_FIRST_ROUND_QUESTIONS, FIRST_ROUND_QUESTIONS_RANGE,
        )
        subsequent = self._ask_int(
            "  Number of questions in subsequent rounds",
            DEFAULT_SUBSEQUENT_ROUND_QUESTIONS, SUBSEQUENT_ROUND_QUESTIONS_RANGE,
        )
        per_question = self._ask_int(
            "  Number of answer choices per question",
            DEFAULT_ANSWERS_PER_QUESTION, ANSWERS_PER_QUESTION_RANGE,
        )
        if provider is None:
            provider = self.ask_provider(default_provider)
        if model is None:
            model = self.ask_model(provider)
        return SessionConfig(
            first_round_questions=first,
            subsequent_round_questions=subsequent,
            answers_per_question=per_question,
            provider=provider,
            model=model,
        )

    def select_session(self, summaries: list[SessionSummary],
                       title: str = "Select a session to resume:") -> Optional[str]:
        """Let the user pick a session; None means back."""
        if not summaries:
            print("No existing sessions found.")
            return None

        print(f"\n{title}")
        for i, s in enumerate(summaries, 1):
            print(f"  {i}) {s.idea} - {step_label(s.step)} - {format_relative_date(s.updated_at)}")
        print("  b) Back")
        index = self._choose(len(summaries), allow_back=True)
        return None if index is None else summaries[index].id

    def ask_api_key(self, provider: str) -> str:
        key = self._ask(f"Enter your {provider} API key: ")
        if not key:
            raise ValidationError(f"An API key is required for provider '{provider}'.")
        return key

    def select_menu_action(self, actions: list[tuple[str, str]]) -> str:
        print("\nWhat would you like to do?")
        for i, (label, _) in enumerate(actions, 1):
            print(f"  {i}) {label}")
        index = self._choose(len(actions))
        return actions[index][1]
