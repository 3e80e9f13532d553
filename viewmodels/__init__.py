# ViewModel layer - Qt integration for domain/service layers
from .debounced_intent import DebouncedIntent
from .grid_viewmodel import GridViewModel
from .column_config_viewmodel import ColumnConfigViewModel

__all__ = [
    'DebouncedIntent',
    'GridViewModel',
    'ColumnConfigViewModel',
]
