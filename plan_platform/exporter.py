"""
Session export to Markdown and JSON files.
"""

import json
import logging
import re
from pathlib import Path
from typing import Optional

from contracts.v1.adapters import (
    session_to_export_document,
    session_to_file_structure_document,
    session_to_specification_document,
)
from contracts.v1.schemas import dump_document
from plan_platform.errors import ExportError, ValidationError
from plan_platform.models import Session

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("markdown", "json", "both")
SLUG_SOURCE_LENGTH = 30


def base_filename(session: Session, suffix: str = "") -> str:
    """``<slug of the first 30 idea chars>-<id><suffix>``."""
    slug = re.sub(r"[^a-z0-9]", "-", session.idea[:SLUG_SOURCE_LENGTH], flags=re.IGNORECASE)
    return f"{slug.lower()}-{session.id}{suffix}"


def _generated_on(session: Session) -> str:
    return f"> Generated on {session.created_at.strftime('%Y-%m-%d')} using makeaplan"


def generate_markdown(session: Session) -> str:
    """Render the full session report."""
    lines = [
        f"# {session.idea}",
        "",
        _generated_on(session),
        "",
        "## Table of Contents",
        "",
        "1. [Product Idea](#product-idea)",
        "2. [Discovery Process](#discovery-process)",
    ]
    if session.writeup:
        lines.append("3. [Technical Specification](#technical-specification)")
    if session.file_structure:
        lines.append("4. [File Structure](#file-structure)")

    lines.extend(["", "---", "", "## Product Idea", "", session.idea, ""])

    lines.extend([
        "## Discovery Process",
        "",
        "The following questions were asked to better understand the requirements:",
        "",
    ])
    for round_ in session.question_rounds:
        lines.extend([f"### Round {round_.round_number}", ""])
        for i, (question, answer) in enumerate(round_.qa_pairs(), 1):
            if answer:
                lines.extend([f"**Q{i}: {question}**", f"> {answer}", ""])

    if session.writeup:
        lines.extend(["---", "", "## Technical Specification", "", session.writeup, ""])

    if session.file_structure:
        lines.extend(["---", "", "## File Structure", "", "```", session.file_structure, "```", ""])

    config = session.config
    lines.extend([
        "---",
        "",
        "## Configuration",
        "",
        f"- **AI Provider**: {config.provider}",
    ])
    if config.model:
        lines.append(f"- **Model**: {config.model}")
    lines.extend([
        f"- **First Round Questions**: {config.first_round_questions}",
        f"- **Subsequent Round Questions**: {config.subsequent_round_questions}",
        f"- **Answers Per Question**: {config.answers_per_question}",
    ])

    return "\n".join(lines) + "\n"


class Exporter:
    """Writes session exports into ``output_dir`` (the working directory by default)."""

    def __init__(self, output_dir: Optional[Path] = None):
        self.output_dir = Path(output_dir) if output_dir is not None else None

    def _target_dir(self) -> Path:
        return self.output_dir if self.output_dir is not None else Path.cwd()

    @staticmethod
    def _check_format(fmt: str) -> None:
        if fmt not in EXPORT_FORMATS:
            raise ValidationError(
                f"Unknown export format '{fmt}'. Choose from: {', '.join(EXPORT_FORMATS)}"
            )

    def _write_text(self, filename: str, content: str) -> Path:
        path = self._target_dir() / filename
        path.write_text(content, encoding="utf-8")
        logger.info("Exported %s", path)
        return path

    def _write_json(self, filename: str, data: dict) -> Path:
        return self._write_text(filename, json.dumps(data, indent=2, ensure_ascii=False))

    def generate_markdown(self, session: Session) -> str:
        return generate_markdown(session)

    def export_session(self, session: Session, fmt: str) -> list[Path]:
        """Export the whole session. Returns the written paths, markdown first."""
        self._check_format(fmt)
        base = base_filename(session)
        paths = []
        if fmt in ("markdown", "both"):
            paths.append(self._write_text(f"{base}.md", generate_markdown(session)))
        if fmt in ("json", "both"):
            paths.append(self._write_json(f"{base}.json", dump_document(session_to_export_document(session))))
        return paths

    def export_specification_only(self, session: Session, fmt: str) -> list[Path]:
        self._check_format(fmt)
        if not session.writeup:
            raise ExportError("No specification found to export")

        base = base_filename(session, "-spec")
        paths = []
        if fmt in ("markdown", "both"):
            content = "\n".join([
                f"# {session.idea} - Technical Specification",
                "",
                _generated_on(session),
                "",
                session.writeup,
                "",
                "---",
                "",
                f"*Session ID: {session.id}*",
            ]) + "\n"
            paths.append(self._write_text(f"{base}.md", content))
        if fmt in ("json", "both"):
            paths.append(self._write_json(
                f"{base}.json", dump_document(session_to_specification_document(session)),
            ))
        return paths

    def export_file_structure_only(self, session: Session, fmt: str) -> list[Path]:
        self._check_format(fmt)
        if not session.file_structure:
            raise ExportError("No file structure found to export")

        base = base_filename(session, "-structure")
        paths = []
        if fmt in ("markdown", "both"):
            content = "\n".join([
                f"# {session.idea} - File Structure",
                "",
                _generated_on(session),
                "",
                "```",
                session.file_structure,
                "```",
                "",
                "---",
                "",
                f"*Session ID: {session.id}*",
            ]) + "\n"
            paths.append(self._write_text(f"{base}.md", content))
        if fmt in ("json", "both"):
            paths.append(self._write_json(
                f"{base}.json", dump_document(session_to_file_structure_document(session)),
            ))
        return paths
