"""
HTTP adapter for the col-def endpoint.

Implements ColumnConfigPort with urllib against `{api_base_url}/col-def`.
Every failure (connection, HTTP status, bad JSON) surfaces as
ColumnConfigError; the service layer turns those into RemoteResult values.
"""

import json
import urllib.error
import urllib.parse
import urllib.request
from typing import List, Dict, Any, Optional, Callable

from core import config
from core.ports.column_config_port import ColumnConfigPort, ColumnConfigError
from version_info import VERSION_STRING


# (method, url, json_body_or_None, timeout) -> decoded JSON
Transport = Callable[[str, str, Optional[Dict[str, Any]], float], Any]

ENDPOINT = "col-def"
USER_AGENT = f"BlackGrid/{VERSION_STRING}"


def urllib_transport(method: str, url: str, body: Optional[Dict[str, Any]], timeout: float) -> Any:
    """Send one JSON request and decode the JSON reply."""
    data = None
    if body is not None:
        data = json.dumps(body).encode('utf-8')

    req = urllib.request.Request(url, data=data, method=method)
    req.add_header('Accept', 'application/json')
    req.add_header('User-Agent', USER_AGENT)
    if data is not None:
        req.add_header('Content-Type', 'application/json')

    try:
        with urllib.request.urlopen(req, timeout=timeout) as response:
            raw = response.read().decode('utf-8')
    except urllib.error.HTTPError as e:
        raise ColumnConfigError(f"{method} {url} failed: HTTP {e.code} {e.reason}", status=e.code) from e
    except (urllib.error.URLError, OSError) as e:
        raise ColumnConfigError(f"{method} {url} failed: {e}") from e

    if not raw:
        return {}
    try:
        return json.loads(raw)
    except ValueError as e:
        raise ColumnConfigError(f"{method} {url} returned invalid JSON: {e}") from e


class ColDefHttpAdapter(ColumnConfigPort):
    """col-def client; base_url and timeout default to the user config."""

    def __init__(self, base_url: str = None, timeout: float = None,
                 transport: Transport = None):
        self._base_url = (base_url or config.get_api_base_url()).rstrip('/')
        self._timeout = timeout if timeout is not None else config.get_request_timeout()
        self._transport = transport or urllib_transport

    @property
    def base_url(self) -> str:
        return self._base_url

    def _url(self, query: Dict[str, Any] = None) -> str:
        url = f"{self._base_url}/{ENDPOINT}"
        if query:
            url += '?' + urllib.parse.urlencode(query)
        return url

    def _request(self, method: str, query: Dict[str, Any] = None, body: Dict[str, Any] = None) -> Dict[str, Any]:
        response = self._transport(method, self._url(query), body, self._timeout)
        if response is None:
            return {}
        if not isinstance(response, dict):
            raise ColumnConfigError(f"Unexpected col-def response: {type(response).__name__}")
        return response

    # --- Grid configuration ---

    def load_config(self, page_name: str, table_name: str) -> Dict[str, Any]:
        return self._request('GET', query={'page_name': page_name, 'table_name': table_name})

    def save_config(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request('POST', body=payload)

    # --- Database schema ---

    def check_columns(self, table_name: str, fields: List[str]) -> Dict[str, bool]:
        response = self._request('POST', body={'check_columns': list(fields), 'table_name': table_name})
        columns = response.get('columns') or {}
        return {name: bool(exists) for name, exists in columns.items()}

    def get_all_columns(self, table_name: str) -> List[Dict[str, Any]]:
        response = self._request('POST', body={
            'check_columns': [],
            'table_name': table_name,
            'get_all_columns': True,
        })
        return list(response.get('allColumns') or [])

    def add_columns(self, table_name: str, specs: List[Dict[str, Any]]) -> Dict[str, Any]:
        return self._request('POST', body={'add_columns': list(specs), 'table_name': table_name})

    def delete_column(self, table_name: str, field: str) -> Dict[str, Any]:
        return self._request('DELETE', query={'table_name': table_name, 'column_name': field})
