"""
Supabase Client Helper for the CRM Sales Metrics service.
Provides the shared connection, the fail-fast initialization phase, and
table read/write helpers.

Usage:
    from scripts.lib.supabase_client import init_client, select_rows

    init_client()  # at startup, raises RepositoryInitError if unreachable
    rows = select_rows("crm_leads", eq={"seller": "Ana"})

Read helpers raise UpstreamReadError on failure instead of returning an empty
result, so callers never mistake an outage for "no data".
"""
from typing import Any, Dict, List, Optional

from scripts.lib.errors import RepositoryInitError, UpstreamReadError, UpstreamWriteError
from scripts.lib.logger import setup_logger
from scripts.lib.settings import get_settings

logger = setup_logger(__name__)

# PostgREST caps a single response; larger reads are paged.
PAGE_SIZE = 1000

_client = None


def init_client(url: str = None, key: str = None, probe_table: str = None):
    """
    Create the Supabase client and verify the store is reachable.

    Must run once before any request is served. A missing credential or a
    failing probe read raises RepositoryInitError; callers are expected to
    abort startup.

    Args:
        url: Supabase project URL (default: SUPABASE_URL).
        key: Service role key (default: SUPABASE_SERVICE_ROLE_KEY / SUPABASE_KEY).
        probe_table: Table read with limit 1 to prove connectivity
            (default: the leads table).

    Returns:
        The connected client.
    """
    global _client

    settings = get_settings()
    url = url or settings.supabase_url
    key = key or settings.supabase_key
    probe_table = probe_table or settings.leads_table

    if not url or not key:
        raise RepositoryInitError(
            "SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set in .env", url=url,
        )

    from supabase import create_client

    try:
        client = create_client(url, key)
        client.table(probe_table).select("*").limit(1).execute()
    except Exception as e:
        logger.error("Supabase initialization failed for %s: %s", url, e)
        raise RepositoryInitError(f"Cannot reach document store: {e}", url=url) from e

    _client = client
    logger.info("Supabase client connected to %s", url)
    return _client


def get_client():
    """Return the initialized client; init_client() must have succeeded."""
    if _client is None:
        raise RepositoryInitError("Supabase client used before init_client()")
    return _client


def is_initialized() -> bool:
    return _client is not None


def reset_client() -> None:
    """Drop the shared client (used on shutdown)."""
    global _client
    _client = None


def select_rows(
    table: str,
    select: str = "*",
    eq: Dict[str, Any] = None,
    gte: Dict[str, Any] = None,
    lte: Dict[str, Any] = None,
    order_by: str = "id",
    client=None,
) -> List[Dict]:
    """
    Read every row of a table matching equality and inclusive range filters.

    Args:
        table: Table name.
        select: Columns to select (default "*").
        eq: column=value equality filters.
        gte: column>=value filters.
        lte: column<=value filters.
        order_by: Unique column every page is ordered by (ascending).
        client: Explicit client (default: the shared one).

    Returns:
        List of row dicts, possibly empty.

    Raises:
        UpstreamReadError: The query failed.
    """
    client = client or get_client()
    rows: List[Dict] = []
    offset = 0

    try:
        while True:
            query = client.table(table).select(select)
            for col, val in (eq or {}).items():
                query = query.eq(col, val)
            for col, val in (gte or {}).items():
                query = query.gte(col, val)
            for col, val in (lte or {}).items():
                query = query.lte(col, val)
            query = query.order(order_by)

            result = query.range(offset, offset + PAGE_SIZE - 1).execute()
            page = result.data or []
            rows.extend(page)
            if len(page) < PAGE_SIZE:
                break
            offset += PAGE_SIZE
    except Exception as e:
        logger.error("Supabase query failed on %s: %s", table, e)
        raise UpstreamReadError(table, e) from e

    return rows


def select_one(table: str, key_column: str, key: Any, client=None) -> Optional[Dict]:
    """
    Fetch a single row by key.

    Returns:
        The row dict, or None when no row matches.

    Raises:
        UpstreamReadError: The query failed.
    """
    client = client or get_client()
    try:
        result = (
            client.table(table)
            .select("*")
            .eq(key_column, key)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.error("Supabase fetch failed on %s[%s=%s]: %s", table, key_column, key, e)
        raise UpstreamReadError(table, e) from e

    if result.data:
        return result.data[0]
    return None


def upsert_row(table: str, row: Dict, on_conflict: str, client=None) -> None:
    """
    Upsert a single row into a table.

    Raises:
        UpstreamWriteError: The write failed.
    """
    client = client or get_client()
    try:
        client.table(table).upsert(row, on_conflict=on_conflict).execute()
    except Exception as e:
        logger.error("Supabase upsert failed on %s: %s", table, e)
        raise UpstreamWriteError(table, e) from e
