import hashlib
import hmac
import json
import logging
import secrets
import sqlite3
from contextlib import contextmanager
from typing import Any, Iterator

from backend import timeutil
from backend.config import ADMIN_EMAIL, ADMIN_NAME, ADMIN_PASSWORD, DB_PATH
from backend.errors import StorageError

logger = logging.getLogger(__name__)

PASSWORD_HASH_ALGO = "pbkdf2_sha256"
PASSWORD_HASH_ITERATIONS = 120_000
DEFAULT_ADMIN_ID = "admin"


def hash_password(password: str, *, salt: str | None = None) -> str:
    salt_value = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt_value.encode("utf-8"),
        PASSWORD_HASH_ITERATIONS,
    ).hex()
    return f"{PASSWORD_HASH_ALGO}${PASSWORD_HASH_ITERATIONS}${salt_value}${digest}"


def verify_password(password: str, password_hash: str) -> bool:
    try:
        algo, rounds_text, salt_value, expected_digest = password_hash.split("$", 3)
        rounds = int(rounds_text)
    except (ValueError, TypeError, AttributeError):
        return False

    if algo != PASSWORD_HASH_ALGO or rounds <= 0:
        return False

    candidate_digest = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt_value.encode("utf-8"),
        rounds,
    ).hex()
    return hmac.compare_digest(candidate_digest, expected_digest)


def connect_db():
    return sqlite3.connect(str(DB_PATH), check_same_thread=False)


@contextmanager
def _store() -> Iterator[sqlite3.Connection]:
    try:
        conn = connect_db()
    except sqlite3.Error as exc:
        logger.error("Cannot open document store at %s: %s", DB_PATH, exc)
        raise StorageError("Document store unavailable.") from exc
    try:
        yield conn
        conn.commit()
    except sqlite3.Error as exc:
        conn.rollback()
        logger.error("Document store operation failed: %s", exc)
        raise StorageError("Document store operation failed.") from exc
    finally:
        conn.close()


# -----------------------------
# Paths
# -----------------------------
def _segments(path: str) -> list[str]:
    parts = path.split("/")
    if not path or any(not part.strip() for part in parts):
        raise ValueError(f"Invalid document path: {path!r}")
    return parts


def _split_document_path(path: str) -> tuple[str, str]:
    parts = _segments(path)
    if len(parts) % 2 != 0:
        raise ValueError(f"Not a document path: {path!r}")
    return "/".join(parts[:-1]), parts[-1]


def _check_collection_path(path: str) -> None:
    if len(_segments(path)) % 2 != 1:
        raise ValueError(f"Not a collection path: {path!r}")


# -----------------------------
# Schema
# -----------------------------
def _get(conn: sqlite3.Connection, path: str) -> dict[str, Any] | None:
    cur = conn.cursor()
    cur.execute("SELECT data FROM documents WHERE path = ?", (path,))
    row = cur.fetchone()
    if not row:
        return None
    return json.loads(row[0])


def _put(conn: sqlite3.Connection, path: str, data: dict[str, Any]) -> None:
    parent, doc_id = _split_document_path(path)
    conn.execute(
        """
        INSERT OR REPLACE INTO documents (path, parent, doc_id, data, updated_at)
        VALUES (?, ?, ?, ?, ?)
        """,
        (path, parent, doc_id, json.dumps(data, sort_keys=True), timeutil.utc_now_iso()),
    )


def _ensure_default_admin(conn: sqlite3.Connection) -> None:
    email = (ADMIN_EMAIL or "").strip().lower()
    password = (ADMIN_PASSWORD or "").strip()
    if not email or not password:
        return

    cur = conn.cursor()
    cur.execute("SELECT data FROM documents WHERE parent = 'users'")
    for (raw,) in cur.fetchall():
        if str(json.loads(raw).get("email", "")).lower() == email:
            return

    _put(
        conn,
        f"users/{DEFAULT_ADMIN_ID}",
        {
            "email": email,
            "name": ADMIN_NAME,
            "role": "admin",
            "subjects": [],
            "passwordHash": hash_password(password),
            "createdAt": timeutil.utc_now_iso(),
        },
    )
    logger.info("Default admin account created for %s", email)


def create_tables():
    with _store() as conn:
        conn.execute("""
        CREATE TABLE IF NOT EXISTS documents (
            path TEXT PRIMARY KEY,           -- collection/doc/collection/doc
            parent TEXT NOT NULL,            -- collection path
            doc_id TEXT NOT NULL,
            data TEXT NOT NULL,              -- JSON object
            updated_at TEXT NOT NULL
        )
        """)
        conn.execute("CREATE INDEX IF NOT EXISTS idx_documents_parent ON documents(parent)")
        _ensure_default_admin(conn)


# -----------------------------
# Documents
# -----------------------------
def get_document(path: str) -> dict[str, Any] | None:
    _split_document_path(path)
    with _store() as conn:
        return _get(conn, path)


def set_document(path: str, data: dict[str, Any], *, merge: bool = False) -> dict[str, Any]:
    """
    Write a document. With merge=True the given fields are laid over the
    stored ones; otherwise the document is replaced. Returns what was stored.
    """
    with _store() as conn:
        stored = dict(data)
        if merge:
            existing = _get(conn, path) or {}
            existing.update(data)
            stored = existing
        _put(conn, path, stored)
        return stored


def list_documents(
    collection_path: str,
    *,
    order_by: str | None = None,
    descending: bool = False,
) -> list[tuple[str, dict[str, Any]]]:
    _check_collection_path(collection_path)
    with _store() as conn:
        cur = conn.cursor()
        cur.execute(
            "SELECT doc_id, data FROM documents WHERE parent = ? ORDER BY doc_id",
            (collection_path,),
        )
        rows = [(str(doc_id), json.loads(raw)) for doc_id, raw in cur.fetchall()]

    if order_by:
        rows.sort(key=lambda item: str(item[1].get(order_by) or ""), reverse=descending)
    return rows


def _child_segments(prefix: str, depth: int) -> list[str]:
    with _store() as conn:
        cur = conn.cursor()
        cur.execute(
            "SELECT path FROM documents WHERE substr(path, 1, length(?)) = ?",
            (prefix, prefix),
        )
        paths = [str(row[0]) for row in cur.fetchall()]

    found: set[str] = set()
    for path in paths:
        parts = path.split("/")
        if len(parts) > depth:
            found.add(parts[depth])
    return sorted(found)


def list_document_ids(collection_path: str) -> list[str]:
    """
    Ids of documents in a collection, including ids that only exist as the
    parent of a nested collection (attendance/{date} has no body of its own).
    """
    depth = len(_segments(collection_path))
    if depth % 2 != 1:
        raise ValueError(f"Not a collection path: {collection_path!r}")
    return _child_segments(f"{collection_path}/", depth)


def list_collection_ids(document_path: str) -> list[str]:
    depth = len(_segments(document_path))
    if depth % 2 != 0:
        raise ValueError(f"Not a document path: {document_path!r}")
    return _child_segments(f"{document_path}/", depth)
