# Domain layer - grid logic with no UI dependencies
from .grid import (
    ColumnType,
    ColumnDefinition,
    FormColumn,
    SortState,
    PaginationState,
    EditSession,
    ColumnConfigRecord,
    SelectionModel,
    PipelineResult,
    CommitStatus,
    CommitOutcome,
    normalize,
)

__all__ = [
    # Grid
    'ColumnType',
    'ColumnDefinition',
    'FormColumn',
    'SortState',
    'PaginationState',
    'EditSession',
    'ColumnConfigRecord',
    'SelectionModel',
    'PipelineResult',
    'CommitStatus',
    'CommitOutcome',
    'normalize',
]
