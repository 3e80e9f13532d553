"""
RemoteCallWorker - Background QThread for col-def requests.

Runs one blocking store call (load, save, check_columns, ...) off the UI
thread and reports the return value through finished. Store methods
return RemoteResult values for backend failures, so error only fires for
unexpected exceptions.
"""

from PyQt6.QtCore import QThread, pyqtSignal


class RemoteCallWorker(QThread):
    """Background thread for one remote operation."""

    finished = pyqtSignal(object)          # return value of the call
    error = pyqtSignal(str)                # error message string
    error_exc = pyqtSignal(object)         # actual exception object

    def __init__(self, call, *args, label: str = '', **kwargs):
        """
        Args:
            call: The callable to run in the background thread
                  (e.g., ColumnConfigStore.load)
            label: Short name used in diagnostics
            *args, **kwargs: Arguments passed to call
        """
        super().__init__()
        self._call = call
        self._args = args
        self._kwargs = kwargs
        self.label = label or getattr(call, '__name__', 'call')

    def run(self):
        try:
            result = self._call(*self._args, **self._kwargs)
            self.finished.emit(result)
        except Exception as e:
            import traceback
            print(f"[col-def] {self.label} failed: {e}")
            self.error_exc.emit(e)
            self.error.emit(f"{str(e)}\n\n{traceback.format_exc()}")
