"""v1 contract schemas and adapters for session records and exports."""

__version__ = "1.0.0"

from .adapters import (
    contract_to_tree,
    parse_file_tree,
    record_to_session,
    session_to_export_document,
    session_to_file_structure_document,
    session_to_record,
    session_to_specification_document,
    tree_to_contract,
)
from .schemas import (
    ExportMetadata,
    ExportOutputs,
    FileStructureExportDocument,
    FileStructureItemContract,
    GeneratedQuestionsContract,
    QuestionContract,
    QuestionRoundContract,
    SessionConfigContract,
    SessionExportDocument,
    SessionRecord,
    SpecificationExportDocument,
    dump_document,
)

__all__ = [
    "__version__",
    "ExportMetadata",
    "ExportOutputs",
    "FileStructureExportDocument",
    "FileStructureItemContract",
    "GeneratedQuestionsContract",
    "QuestionContract",
    "QuestionRoundContract",
    "SessionConfigContract",
    "SessionExportDocument",
    "SessionRecord",
    "SpecificationExportDocument",
    "dump_document",
    "contract_to_tree",
    "parse_file_tree",
    "record_to_session",
    "session_to_export_document",
    "session_to_file_structure_document",
    "session_to_record",
    "session_to_specification_document",
    "tree_to_contract",
]
