# Service layer - orchestrates domain operations
from .grid_service import GridService, GridState
from .grid_export_service import GridExportService
from .column_config_service import (
    ColumnConfigStore,
    RemoteResult,
    DbColumnStatus,
    AddColumnsResult,
    WorkflowResult,
)

__all__ = [
    'GridService',
    'GridState',
    'GridExportService',
    'ColumnConfigStore',
    'RemoteResult',
    'DbColumnStatus',
    'AddColumnsResult',
    'WorkflowResult',
]
