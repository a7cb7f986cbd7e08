"""Adapters between platform dataclasses and v1 contracts."""

from __future__ import annotations

from typing import Any

from plan_platform.models import (
    FileStructureItem,
    Question,
    QuestionRound,
    Session,
    SessionConfig,
)

from .schemas import (
    ExportMetadata,
    ExportOutputs,
    FileStructureExportDocument,
    FileStructureItemContract,
    QuestionContract,
    QuestionRoundContract,
    SessionConfigContract,
    SessionExportDocument,
    SessionRecord,
    SpecificationExportDocument,
)


def config_to_contract(config: SessionConfig) -> SessionConfigContract:
    return SessionConfigContract(
        first_round_questions=config.first_round_questions,
        subsequent_round_questions=config.subsequent_round_questions,
        answers_per_question=config.answers_per_question,
        provider=config.provider,
        model=config.model,
    )


def contract_to_config(contract: SessionConfigContract) -> SessionConfig:
    return SessionConfig(
        first_round_questions=contract.first_round_questions,
        subsequent_round_questions=contract.subsequent_round_questions,
        answers_per_question=contract.answers_per_question,
        provider=contract.provider,
        model=contract.model,
    )


def tree_to_contract(item: FileStructureItem) -> FileStructureItemContract:
    children = None
    if item.children is not None:
        children = [tree_to_contract(child) for child in item.children]
    return FileStructureItemContract(
        type=item.type,
        name=item.name,
        description=item.description,
        children=children,
    )


def contract_to_tree(contract: FileStructureItemContract) -> FileStructureItem:
    children = None
    if contract.children is not None:
        children = [contract_to_tree(child) for child in contract.children]
    return FileStructureItem(
        type=contract.type,
        name=contract.name,
        description=contract.description,
        children=children,
    )


def round_to_contract(round_: QuestionRound) -> QuestionRoundContract:
    return QuestionRoundContract(
        round_number=round_.round_number,
        questions=[QuestionContract(question=q.question, choices=list(q.choices)) for q in round_.questions],
        answers=list(round_.answers),
        timestamp=round_.timestamp,
    )


def contract_to_round(contract: QuestionRoundContract) -> QuestionRound:
    return QuestionRound(
        round_number=contract.round_number,
        questions=[Question(question=q.question, choices=list(q.choices)) for q in contract.questions],
        answers=list(contract.answers),
        timestamp=contract.timestamp,
    )


def session_to_record(session: Session) -> SessionRecord:
    """Convert a ``Session`` to its on-disk ``SessionRecord``."""
    return SessionRecord(
        id=session.id,
        idea=session.idea,
        current_step=session.current_step,
        question_rounds=[round_to_contract(r) for r in session.question_rounds],
        writeup=session.writeup,
        file_structure=session.file_structure,
        file_structure_json=(
            tree_to_contract(session.file_structure_json)
            if session.file_structure_json is not None else None
        ),
        created_at=session.created_at,
        updated_at=session.updated_at,
        config=config_to_contract(session.config),
    )


def record_to_session(record: SessionRecord) -> Session:
    """Convert a validated ``SessionRecord`` back to a ``Session``."""
    return Session(
        id=record.id,
        idea=record.idea,
        config=contract_to_config(record.config),
        current_step=record.current_step,
        question_rounds=[contract_to_round(r) for r in record.question_rounds],
        writeup=record.writeup,
        file_structure=record.file_structure,
        file_structure_json=(
            contract_to_tree(record.file_structure_json)
            if record.file_structure_json is not None else None
        ),
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def session_to_export_document(session: Session) -> SessionExportDocument:
    """Full export: metadata, idea, every round and all generated outputs."""
    return SessionExportDocument(
        metadata=ExportMetadata(
            id=session.id,
            created_at=session.created_at,
            updated_at=session.updated_at,
            config=config_to_contract(session.config),
        ),
        idea=session.idea,
        question_rounds=[round_to_contract(r) for r in session.question_rounds],
        outputs=ExportOutputs(
            writeup=session.writeup,
            file_structure=session.file_structure,
            file_structure_json=(
                tree_to_contract(session.file_structure_json)
                if session.file_structure_json is not None else None
            ),
        ),
    )


def session_to_specification_document(session: Session) -> SpecificationExportDocument:
    return SpecificationExportDocument(
        metadata=ExportMetadata(
            id=session.id,
            created_at=session.created_at,
            updated_at=session.updated_at,
            type="specification",
        ),
        idea=session.idea,
        specification=session.writeup or "",
    )


def session_to_file_structure_document(session: Session) -> FileStructureExportDocument:
    return FileStructureExportDocument(
        metadata=ExportMetadata(
            id=session.id,
            created_at=session.created_at,
            updated_at=session.updated_at,
            type="file-structure",
        ),
        idea=session.idea,
        file_structure=session.file_structure or "",
    )


def parse_file_tree(data: Any) -> FileStructureItem:
    """Validate a raw JSON value as a file tree (raises pydantic ``ValidationError``)."""
    return contract_to_tree(FileStructureItemContract.model_validate(data))
