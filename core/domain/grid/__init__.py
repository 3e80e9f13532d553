"""Grid domain: column model, data pipeline, selection, and inline editing."""

from core.domain.grid.models import (
    ColumnType,
    SortDirection,
    ColumnDefinition,
    FormFieldType,
    FormColumn,
    SortState,
    PaginationState,
    EditSession,
    ColumnConfigRecord,
    is_empty,
    to_text,
)
from core.domain.grid.columns import (
    PROTECTED_FIELDS,
    FORM_EXCLUDED_FIELDS,
    DEFAULT_COLUMN_TEMPLATES,
    is_protected,
    normalize,
    filter_columns,
    search_columns,
    display_columns,
    find_column,
    set_column_flag,
)
from core.domain.grid.cell_types import (
    ValidationResult,
    CellTypeStrategy,
    get_cell_strategy,
    is_url,
)
from core.domain.grid.pipeline import PipelineResult, apply, unique_values
from core.domain.grid.selection import SelectionModel
from core.domain.grid.edit_session import CommitStatus, CommitOutcome

__all__ = [
    # Models
    "ColumnType",
    "SortDirection",
    "ColumnDefinition",
    "FormFieldType",
    "FormColumn",
    "SortState",
    "PaginationState",
    "EditSession",
    "ColumnConfigRecord",
    "is_empty",
    "to_text",
    # Columns
    "PROTECTED_FIELDS",
    "FORM_EXCLUDED_FIELDS",
    "DEFAULT_COLUMN_TEMPLATES",
    "is_protected",
    "normalize",
    "filter_columns",
    "search_columns",
    "display_columns",
    "find_column",
    "set_column_flag",
    # Cell types
    "ValidationResult",
    "CellTypeStrategy",
    "get_cell_strategy",
    "is_url",
    # Pipeline
    "PipelineResult",
    "apply",
    "unique_values",
    # Selection / editing
    "SelectionModel",
    "CommitStatus",
    "CommitOutcome",
]
