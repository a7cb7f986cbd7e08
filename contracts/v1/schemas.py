"""Pydantic contracts for the v1 session record and export documents."""

from datetime import datetime, timezone
from typing import Annotated, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from plan_platform.models import SessionStep


def _assume_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# Records without an offset are read as UTC
UtcDatetime = Annotated[datetime, AfterValidator(_assume_utc)]


class _CamelModel(BaseModel):
    """Base model serialised with camelCase keys; unknown fields are ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class QuestionContract(_CamelModel):
    question: str = Field(min_length=1)
    choices: list[str] = Field(default_factory=list)


class QuestionRoundContract(_CamelModel):
    round_number: int = Field(ge=1, le=3)
    questions: list[QuestionContract]
    answers: list[str]
    timestamp: UtcDatetime

    @model_validator(mode="after")
    def _answers_align_with_questions(self):
        if len(self.answers) != len(self.questions):
            raise ValueError(
                f"Round {self.round_number} has {len(self.questions)} questions "
                f"but {len(self.answers)} answers"
            )
        return self


class FileStructureItemContract(_CamelModel):
    type: Literal["file", "directory"]
    name: str = Field(min_length=1)
    description: Optional[str] = None
    children: Optional[list["FileStructureItemContract"]] = None


FileStructureItemContract.model_rebuild()


class SessionConfigContract(_CamelModel):
    first_round_questions: int = Field(gt=0)
    subsequent_round_questions: int = Field(gt=0)
    answers_per_question: int = Field(gt=0)
    provider: Literal["anthropic", "openai"]
    model: Optional[str] = None


class SessionRecord(_CamelModel):
    """On-disk snapshot of a session, one file per id."""

    id: str = Field(min_length=1)
    idea: str
    current_step: SessionStep
    question_rounds: list[QuestionRoundContract] = Field(default_factory=list, max_length=3)
    writeup: Optional[str] = None
    file_structure: Optional[str] = None
    file_structure_json: Optional[FileStructureItemContract] = None
    created_at: UtcDatetime
    updated_at: UtcDatetime
    config: SessionConfigContract


class GeneratedQuestionsContract(_CamelModel):
    """Payload of the ``submit_questions`` tool call."""

    questions: list[QuestionContract]


# ---------------------------------------------------------------------------
# Export documents
# ---------------------------------------------------------------------------

class ExportMetadata(_CamelModel):
    id: str
    created_at: UtcDatetime
    updated_at: UtcDatetime
    config: Optional[SessionConfigContract] = None
    type: Optional[Literal["specification", "file-structure"]] = None


class ExportOutputs(_CamelModel):
    writeup: Optional[str] = None
    file_structure: Optional[str] = None
    file_structure_json: Optional[FileStructureItemContract] = None


class SessionExportDocument(_CamelModel):
    metadata: ExportMetadata
    idea: str
    question_rounds: list[QuestionRoundContract]
    outputs: ExportOutputs


class SpecificationExportDocument(_CamelModel):
    metadata: ExportMetadata
    idea: str
    specification: str


class FileStructureExportDocument(_CamelModel):
    metadata: ExportMetadata
    idea: str
    file_structure: str


def dump_document(model: BaseModel) -> dict:
    """JSON-ready dict with camelCase keys and absent optional fields dropped."""
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)
