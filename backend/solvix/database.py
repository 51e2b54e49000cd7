"""
Connexion PostgreSQL — pool psycopg2 et curseur en dictionnaire.
"""

import logging
import os
from contextlib import contextmanager

from psycopg2.extras import RealDictCursor
from psycopg2.pool import ThreadedConnectionPool

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL", "postgresql://localhost:5432/solvix")
POOL_MIN = int(os.getenv("DB_POOL_MIN", "1"))
POOL_MAX = int(os.getenv("DB_POOL_MAX", "10"))

_pool = None


def _get_pool() -> ThreadedConnectionPool:
    global _pool
    if _pool is None:
        _pool = ThreadedConnectionPool(POOL_MIN, POOL_MAX, DATABASE_URL)
        logger.info("Pool PostgreSQL ouvert (%s-%s connexions)", POOL_MIN, POOL_MAX)
    return _pool


@contextmanager
def get_db():
    """Emprunte une connexion au pool. Commit en sortie, rollback sur erreur."""
    pool = _get_pool()
    conn = pool.getconn()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        pool.putconn(conn)


@contextmanager
def get_cursor():
    """Curseur dont les lignes sont des dict (colonne -> valeur)."""
    with get_db() as conn:
        cur = conn.cursor(cursor_factory=RealDictCursor)
        try:
            yield cur
        finally:
            cur.close()


def close_pool():
    global _pool
    if _pool is not None:
        _pool.closeall()
        _pool = None
        logger.info("Pool PostgreSQL fermé")
