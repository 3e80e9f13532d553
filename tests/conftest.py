import os

import pytest

from core.ports.column_config_port import ColumnConfigError, ColumnConfigPort

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


class FakePort(ColumnConfigPort):
    def __init__(self):
        self.calls = []
        self.config = {}
        self.schema = {}
        self.failing = set()
        self.refuse_add = {}

    def _record(self, name, *args):
        self.calls.append((name,) + args)
        if name in self.failing:
            raise ColumnConfigError(f"{name} unavailable")

    def load_config(self, page_name, table_name):
        self._record("load_config", page_name, table_name)
        return self.config

    def save_config(self, payload):
        self._record("save_config", payload)
        return {"success": True}

    def check_columns(self, table_name, fields):
        self._record("check_columns", table_name, list(fields))
        return {f: f in self.schema for f in fields}

    def get_all_columns(self, table_name):
        self._record("get_all_columns", table_name)
        return [{"field": f, "type": t} for f, t in self.schema.items()]

    def add_columns(self, table_name, specs):
        self._record("add_columns", table_name, specs)
        added, failed = [], []
        for spec in specs:
            if spec["field"] in self.refuse_add:
                failed.append({"name": spec["field"], "error": self.refuse_add[spec["field"]]})
            else:
                self.schema[spec["field"]] = spec["type"]
                added.append(spec["field"])
        return {"addedColumns": added, "failedColumns": failed}

    def delete_column(self, table_name, field):
        self._record("delete_column", table_name, field)
        if field not in self.schema:
            return {"success": False, "message": "no such column"}
        del self.schema[field]
        return {"success": True}


@pytest.fixture(scope="session")
def qapp():
    from PyQt6.QtWidgets import QApplication

    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the config file at a temp dir so tests never read the user's settings."""
    from core import config

    monkeypatch.setattr(config, "get_config_dir", lambda: tmp_path)
    return tmp_path


@pytest.fixture
def order_columns():
    return [
        {"field": "id", "headerName": "ID", "type": "number"},
        {"field": "title", "headerName": "Title", "editable": True, "searchable": True},
        {"field": "status", "headerName": "Status", "filterable": True},
        {"field": "amount", "headerName": "Amount", "type": "currency", "editable": True},
        {"field": "due", "headerName": "Due", "type": "date", "editable": True},
    ]


@pytest.fixture
def order_rows():
    return [
        {"id": 1, "title": "Alpha", "status": "open", "amount": 100, "due": "2024-03-05T00:00:00"},
        {"id": 2, "title": "bravo", "status": "closed", "amount": 2500.5, "due": None},
        {"id": 3, "title": "Charlie", "status": "open", "amount": None, "due": "2024-01-10"},
        {"id": 4, "title": "delta", "status": "open", "amount": 7, "due": "2023-12-31"},
        {"id": 5, "title": "Echo", "status": "closed", "amount": 100, "due": "2024-02-01"},
    ]


@pytest.fixture
def port():
    port = FakePort()
    port.schema = {"id": "number", "title": "string", "memo": "string"}
    return port
