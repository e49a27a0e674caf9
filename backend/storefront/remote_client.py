"""
Storefront Edge API — Remote Data Client (Supabase over httpx)
===============================================================

What:  Thin async client for the remote structured store (PostgREST) and the
       remote blob store (Supabase Storage).
Why:   Every record and file lives in Supabase; this module is the only place
       that knows its wire format.
How:   One `httpx.AsyncClient` per credential level, created once at startup
       (see main.lifespan) and wrapped in:
       - RemoteReader:      anon key, read operations only
       - RemoteDataClient:  service role key, reads + writes
Who:   Injected into the edge layer (reader) and the write services (admin).

Credential split:
    The anon handle is a RemoteReader, which has no write methods at all.
    A read path therefore cannot write, even by mistake, and the key it holds
    would be rejected by the store's row-level security if it tried.

Failure policy:
    No retries and no pooling logic beyond httpx's own. Every transport error
    or non-2xx answer becomes a RemoteError immediately. Missing-column answers
    become SchemaCompatibilityError so callers can react to that one case.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import quote

import httpx

from storefront.exceptions import NotFoundError, RemoteError, SchemaCompatibilityError

logger = logging.getLogger(__name__)

# PostgREST: column missing from schema cache / Postgres: undefined_column
SCHEMA_ERROR_CODES = frozenset({"PGRST204", "42703"})

_COLUMN_PATTERNS = (
    re.compile(r"'(\w+)' column"),
    re.compile(r'column "?(?:\w+\.)?(\w+)"? (?:of relation "?\w+"? )?does not exist'),
)

# (column, ascending)
Ordering = Tuple[str, bool]


def build_headers(api_key: str, client_info: str) -> Dict[str, str]:
    """Default headers shared by every request made with one credential."""
    return {
        "apikey": api_key,
        "Authorization": f"Bearer {api_key}",
        "X-Client-Info": client_info,
    }


def _filter_value(value: Any) -> str:
    """Render a Python value as a PostgREST equality filter."""
    if value is None:
        return "is.null"
    if isinstance(value, bool):
        return f"eq.{str(value).lower()}"
    return f"eq.{value}"


def _extract_column(message: str) -> Optional[str]:
    for pattern in _COLUMN_PATTERNS:
        match = pattern.search(message)
        if match:
            return match.group(1)
    return None


class RemoteReader:
    """
    Read-only view of the remote store.

    Operations:
        query()          list rows matching equality filters, optionally ordered
        query_one()      single row by key, NotFoundError when absent
        list_blobs()     objects in a storage bucket
        public_url_for() pure URL derivation, no network call
        probe_column()   startup schema capability check
    """

    def __init__(self, http: httpx.AsyncClient, base_url: str):
        self._http = http
        self.base_url = base_url.rstrip("/")

    # ── Structured store ──────────────────────────────────────────────────

    async def query(
        self,
        table: str,
        filters: Optional[Mapping[str, Any]] = None,
        order: Optional[Ordering] = None,
        limit: Optional[int] = None,
        select: str = "*",
    ) -> List[Dict[str, Any]]:
        params: Dict[str, str] = {"select": select}
        for column, value in (filters or {}).items():
            params[column] = _filter_value(value)
        if order:
            column, ascending = order
            params["order"] = f"{column}.{'asc' if ascending else 'desc'}"
        if limit is not None:
            params["limit"] = str(limit)

        response = await self._send("GET", f"/rest/v1/{table}", table=table, params=params)
        rows = response.json()
        return rows if isinstance(rows, list) else []

    async def query_one(self, table: str, key: Mapping[str, Any]) -> Dict[str, Any]:
        rows = await self.query(table, filters=key, limit=1)
        if not rows:
            raise NotFoundError(resource=table, resource_id=_describe_key(key))
        return rows[0]

    async def probe_column(self, table: str, column: str) -> Optional[bool]:
        """
        Check once whether `table.column` exists.

        Returns True/False when the store gave a definite answer and None when
        the probe itself failed (store unreachable, permissions).
        """
        try:
            await self.query(table, select=column, limit=0)
            return True
        except SchemaCompatibilityError:
            return False
        except RemoteError as e:
            logger.warning("Schema probe for %s.%s failed: %s", table, column, e.message)
            return None

    # ── Blob store ────────────────────────────────────────────────────────

    def public_url_for(self, bucket: str, name: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{bucket}/{quote(name, safe='/')}"

    async def list_blobs(
        self, bucket: str, prefix: str = "", limit: int = 100
    ) -> List[Dict[str, Any]]:
        response = await self._send(
            "POST",
            f"/storage/v1/object/list/{bucket}",
            table=bucket,
            json={
                "prefix": prefix,
                "limit": limit,
                "offset": 0,
                "sortBy": {"column": "name", "order": "asc"},
            },
        )
        blobs = response.json()
        return blobs if isinstance(blobs, list) else []

    # ── Transport ─────────────────────────────────────────────────────────

    async def _send(self, method: str, path: str, table: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise RemoteError(
                message="Remote store request timed out",
                details=str(e) or type(e).__name__,
                context={"path": path},
            ) from e
        except httpx.HTTPError as e:
            raise RemoteError(
                message="Remote store unreachable",
                details=str(e) or type(e).__name__,
                context={"path": path},
            ) from e

        if response.is_error:
            raise self._error_from_response(response, table)
        return response

    @staticmethod
    def _error_from_response(response: httpx.Response, table: str) -> RemoteError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        message = body.get("message") or body.get("error") or response.text or "Unknown error"
        code = body.get("code")
        code = str(code) if code is not None else None

        if code in SCHEMA_ERROR_CODES:
            return SchemaCompatibilityError(
                table=table,
                column=_extract_column(message),
                message=message,
                status=response.status_code,
                code=code,
            )
        return RemoteError(message=message, status=response.status_code, code=code)


class RemoteDataClient(RemoteReader):
    """
    Elevated handle: everything RemoteReader does plus writes.

    Only the service role key is ever given to this class. Write responses
    are requested with `Prefer: return=representation` so callers get the
    stored row (with its assigned id) back without a second round trip.
    """

    _RETURN_ROWS = {"Prefer": "return=representation"}

    def __init__(
        self,
        http: httpx.AsyncClient,
        base_url: str,
        upload_cache_control: str = "3600",
    ):
        super().__init__(http, base_url)
        self.upload_cache_control = upload_cache_control

    async def insert(self, table: str, record: Mapping[str, Any]) -> Dict[str, Any]:
        response = await self._send(
            "POST",
            f"/rest/v1/{table}",
            table=table,
            json=dict(record),
            headers=self._RETURN_ROWS,
        )
        rows = response.json()
        if isinstance(rows, list):
            if not rows:
                raise RemoteError(message=f"Insert into {table} returned no row")
            return rows[0]
        return rows

    async def update(
        self, table: str, key: Mapping[str, Any], changes: Mapping[str, Any]
    ) -> Dict[str, Any]:
        params = {column: _filter_value(value) for column, value in key.items()}
        response = await self._send(
            "PATCH",
            f"/rest/v1/{table}",
            table=table,
            params=params,
            json=dict(changes),
            headers=self._RETURN_ROWS,
        )
        rows = response.json()
        if not rows:
            raise NotFoundError(resource=table, resource_id=_describe_key(key))
        return rows[0] if isinstance(rows, list) else rows

    async def delete(self, table: str, key: Mapping[str, Any]) -> None:
        params = {column: _filter_value(value) for column, value in key.items()}
        await self._send("DELETE", f"/rest/v1/{table}", table=table, params=params)

    async def upload_blob(
        self, bucket: str, name: str, data: bytes, content_type: Optional[str]
    ) -> str:
        """Store `data` as `bucket/name`; returns the object path inside the bucket."""
        await self._send(
            "POST",
            f"/storage/v1/object/{bucket}/{quote(name, safe='/')}",
            table=bucket,
            content=data,
            headers={
                "Content-Type": content_type or "application/octet-stream",
                "Cache-Control": f"max-age={self.upload_cache_control}",
                "x-upsert": "false",
            },
        )
        return name

    async def remove_blob(self, bucket: str, name: str) -> None:
        await self._send(
            "DELETE",
            f"/storage/v1/object/{bucket}",
            table=bucket,
            json={"prefixes": [name]},
        )


def _describe_key(key: Mapping[str, Any]) -> str:
    return ",".join(f"{column}={value}" for column, value in key.items())


# ── Lifecycle ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class RemoteHandles:
    """The two process-scoped handles plus the transports they own."""

    reader: RemoteReader
    admin: RemoteDataClient
    _transports: Tuple[httpx.AsyncClient, ...] = ()

    async def aclose(self) -> None:
        for transport in self._transports:
            await transport.aclose()


def create_remote_handles(
    base_url: str,
    anon_key: str,
    service_role_key: str,
    client_info: str,
    timeout: float = 30.0,
    upload_cache_control: str = "3600",
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> RemoteHandles:
    """
    Build the anon reader and the admin client.

    `transport` lets tests route both handles through httpx.MockTransport.
    """
    base_url = base_url.rstrip("/")
    anon_http = httpx.AsyncClient(
        base_url=base_url,
        headers=build_headers(anon_key, client_info),
        timeout=timeout,
        transport=transport,
    )
    admin_http = httpx.AsyncClient(
        base_url=base_url,
        headers=build_headers(service_role_key, f"{client_info}-admin"),
        timeout=timeout,
        transport=transport,
    )
    logger.info("Remote store handles created for %s", base_url)
    return RemoteHandles(
        reader=RemoteReader(anon_http, base_url),
        admin=RemoteDataClient(admin_http, base_url, upload_cache_control),
        _transports=(anon_http, admin_http),
    )
