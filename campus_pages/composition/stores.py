"""Concrete storage collaborators for :class:`~.repository.PageRepository`.

Three stores share one persistence rule set: every write replaces the whole
record (last write wins), bumps ``revision``, stamps ``updated_at`` (and
``created_at`` on the first write), and assigns keys to sections that arrive
without one.

- :class:`InMemoryPageStore` keeps records in a dictionary; used by tests and
  previews.
- :class:`YamlPageStore` keeps one ``<id>.yaml`` document per page on disk,
  preserving comments in hand-authored files.
- :class:`HttpPageStore` talks JSON to a REST content service.
"""

from __future__ import annotations

import collections.abc as cabc
import copy
import datetime as dt
import json
import logging
import os
import re
import shutil
import tempfile
import typing as typ
import uuid
from http import HTTPStatus
from pathlib import Path
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap
from ruamel.yaml.error import YAMLError
from urllib3.util.retry import Retry

from campus_pages._constants import MINTED_KEY_LENGTH

from .errors import TransportError

if typ.TYPE_CHECKING:
    from .repository import PageRecord

logger = logging.getLogger(__name__)

_PAGE_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")
_LEGACY_FIELDS = ("content_data", "components", "version", "_rev", "is_published")
_REVISION_FIELDS = ("revision", "version", "_rev")


def mint_key() -> str:
    """Return a fresh random section key."""
    return uuid.uuid4().hex[:MINTED_KEY_LENGTH]


def _stamp_record(
    record: PageRecord, previous: PageRecord | None
) -> dict[str, typ.Any]:
    """Apply the shared write rules to a copy of ``record``."""
    stamped = copy.deepcopy(dict(record))
    now = dt.datetime.now(dt.UTC).isoformat()
    stamped["revision"] = _stored_revision(previous or stamped) + 1
    stamped["updated_at"] = now
    created = previous.get("created_at") if previous else None
    if isinstance(created, dt.datetime):
        created = created.isoformat()
    stamped["created_at"] = created or stamped.get("created_at") or now

    sections = stamped.get("sections") or []
    used = {
        section.get("key")
        for section in sections
        if isinstance(section, cabc.Mapping) and section.get("key")
    }
    for section in sections:
        if isinstance(section, dict) and not section.get("key"):
            key = mint_key()
            while key in used:
                key = mint_key()
            used.add(key)
            section["key"] = key
    return stamped


def _stored_revision(record: PageRecord) -> int:
    """Return the revision held by ``record``, reading legacy field names."""
    for name in _REVISION_FIELDS:
        match record.get(name):
            case bool() | None:
                continue
            case int() as value:
                return value
            case str() as value if value.strip().isdigit():
                return int(value)
            case _:
                continue
    return 0


def _record_id(record: PageRecord) -> str:
    page_id = record.get("id")
    if not page_id:
        msg = "Cannot persist a page record without an 'id'."
        raise TransportError(msg)
    return str(page_id)


class InMemoryPageStore:
    """Dictionary-backed store holding deep copies of page records."""

    def __init__(self, records: cabc.Mapping[str, PageRecord] | None = None) -> None:
        """Seed the store with ``records`` keyed by page id (stored as-is)."""
        self._records: dict[str, dict[str, typ.Any]] = {
            key: copy.deepcopy(dict(value)) for key, value in (records or {}).items()
        }

    def fetch_page_record(self, page_id: str) -> PageRecord | None:
        record = self._records.get(page_id)
        return copy.deepcopy(record) if record is not None else None

    def persist_page_record(self, record: PageRecord) -> PageRecord:
        page_id = _record_id(record)
        stamped = _stamp_record(record, self._records.get(page_id))
        self._records[page_id] = stamped
        return copy.deepcopy(stamped)


class YamlPageStore:
    """Store each page as ``<directory>/<id>.yaml``.

    Reads use the safe YAML 1.2 loader. Writes load the existing document with
    the round-trip loader, update it in place so comments and unrelated keys
    survive, and replace the file atomically.
    """

    def __init__(self, directory: Path) -> None:
        """Use ``directory`` as the page root; it is created on first write."""
        self.directory = directory

    def path_for(self, page_id: str) -> Path:
        """Return the file path that stores ``page_id``."""
        if not _PAGE_ID_PATTERN.match(page_id):
            msg = f"Page id '{page_id}' cannot be mapped to a file name."
            raise TransportError(msg)
        return self.directory / f"{page_id}.yaml"

    def fetch_page_record(self, page_id: str) -> PageRecord | None:
        if not _PAGE_ID_PATTERN.match(page_id):
            return None
        path = self.path_for(page_id)
        if not path.exists():
            return None
        loader = YAML(typ="safe")
        loader.version = (1, 2)
        try:
            with path.open("r", encoding="utf-8") as handle:
                loaded = loader.load(handle)
        except (OSError, YAMLError) as exc:
            msg = f"Failed to read page '{page_id}' from {path}: {exc}"
            raise TransportError(msg) from exc
        if not isinstance(loaded, dict):
            msg = f"Page file {path} must contain a mapping."
            raise TransportError(msg)
        loaded.setdefault("id", page_id)
        return loaded

    def persist_page_record(self, record: PageRecord) -> PageRecord:
        page_id = _record_id(record)
        path = self.path_for(page_id)
        yaml = _build_roundtrip_yaml()
        document = CommentedMap()
        if path.exists():
            try:
                with path.open("r", encoding="utf-8") as handle:
                    existing = yaml.load(handle)
            except (OSError, YAMLError) as exc:
                msg = f"Failed to read page '{page_id}' from {path}: {exc}"
                raise TransportError(msg) from exc
            if isinstance(existing, CommentedMap):
                document = existing

        stamped = _stamp_record(record, document or None)
        for legacy in _LEGACY_FIELDS:
            if legacy in document:
                del document[legacy]
        for key, value in stamped.items():
            document[key] = value

        temp_path: Path | None = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.directory,
                prefix=f".{page_id}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                temp_path = Path(handle.name)
                yaml.dump(document, handle)
            _match_file_mode(temp_path, path)
            temp_path.replace(path)
        except (OSError, YAMLError) as exc:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            msg = f"Failed to write page '{page_id}' to {path}: {exc}"
            raise TransportError(msg) from exc
        logger.debug("wrote page %s revision %s", page_id, stamped["revision"])
        return stamped


def _match_file_mode(temp_path: Path, path: Path) -> None:
    """Give ``temp_path`` the mode of ``path``, or a umask-default mode if new."""
    if path.exists():
        shutil.copymode(path, temp_path)
        return
    umask = os.umask(0)
    os.umask(umask)
    temp_path.chmod(0o666 & ~umask)


def _build_roundtrip_yaml() -> YAML:
    yaml = YAML()
    yaml.preserve_quotes = True
    yaml.width = 120
    yaml.indent(mapping=2, sequence=4, offset=2)
    return yaml


class HttpPageStore:
    """JSON client for a REST page service.

    ``GET {base_url}/pages/{id}`` returns a page record (HTTP 404 when the
    page does not exist) and ``PUT {base_url}/pages/{id}`` replaces it,
    replying with the stored record.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        session: requests.Session | None = None,
        timeout: float = 10.0,
    ) -> None:
        """Initialise the client with optional authentication and transport.

        Parameters
        ----------
        base_url : str
            Root URL of the page service.
        token : str, optional
            Bearer token sent with every request.
        session : requests.Session, optional
            Preconfigured session. When omitted, a session retrying idempotent
            requests on 5xx responses is created.
        timeout : float, optional
            Per-request timeout in seconds.
        """
        self._base_url = base_url.rstrip("/")
        self._session = session or _build_retrying_session()
        self.timeout = timeout
        self._headers = {
            "Accept": "application/json",
            "User-Agent": "campus-pages/0.1",
        }
        if token:
            self._headers["Authorization"] = f"Bearer {token}"

    def _url(self, page_id: str) -> str:
        return f"{self._base_url}/pages/{quote(page_id, safe='')}"

    def fetch_page_record(self, page_id: str) -> PageRecord | None:
        try:
            response = self._session.get(
                self._url(page_id), headers=self._headers, timeout=self.timeout
            )
        except requests.RequestException as exc:
            msg = f"Failed to reach page service for '{page_id}': {exc}"
            raise TransportError(msg) from exc
        if response.status_code == HTTPStatus.NOT_FOUND:
            return None
        return self._decode(response, page_id)

    def persist_page_record(self, record: PageRecord) -> PageRecord:
        page_id = _record_id(record)
        try:
            response = self._session.put(
                self._url(page_id),
                json=dict(record),
                headers=self._headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            msg = f"Failed to reach page service for '{page_id}': {exc}"
            raise TransportError(msg) from exc
        return self._decode(response, page_id)

    @staticmethod
    def _decode(response: requests.Response, page_id: str) -> PageRecord:
        if response.status_code >= HTTPStatus.BAD_REQUEST:
            snippet = response.text[:200]
            msg = (
                f"Page service request for '{page_id}' failed with "
                f"status {response.status_code}: {snippet}"
            )
            raise TransportError(msg)
        try:
            payload = response.json()
        except (json.JSONDecodeError, requests.JSONDecodeError) as exc:
            msg = f"Page service response for '{page_id}' was not valid JSON"
            raise TransportError(msg) from exc
        if not isinstance(payload, dict):
            msg = f"Page service response for '{page_id}' was not a JSON object"
            raise TransportError(msg)
        return payload


def _build_retrying_session() -> requests.Session:
    session = requests.Session()
    retry = Retry(
        total=3,
        connect=3,
        read=3,
        backoff_factor=0.5,
        status_forcelist=(500, 502, 503, 504),
        allowed_methods=("GET", "HEAD", "PUT"),
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


__all__ = ["HttpPageStore", "InMemoryPageStore", "YamlPageStore", "mint_key"]
