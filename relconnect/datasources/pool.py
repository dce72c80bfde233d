"""Thread-safe pool of physical DB-API connections.

Idle connections are kept in LIFO order. Entries idle for longer than
``idle_time_sec`` are closed only when the pool is touched: on checkout, on
return, or by an explicit :meth:`PooledConnectionSource.evict_idle`. Nothing
runs eviction on a timer, so owners of a long-lived pool that may sit untouched
should call ``evict_idle`` periodically. At most ``max_idle`` connections are
retained; surplus connections are closed when they come back.
"""

from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from enum import Enum
from typing import Any, Callable, Iterator, NamedTuple

from relconnect.errors import ConnectionEstablishmentError

LOG = logging.getLogger(__name__)


class CommitMode(str, Enum):
    """Commit behaviour applied to each newly opened connection."""

    DRIVER_SPECIFIED = "driver_specified"
    FORCE_AUTO_COMMIT = "force_auto_commit"
    FORCE_MANUAL_COMMIT = "force_manual_commit"


class _IdleEntry(NamedTuple):
    conn: Any
    returned_at: float


class PooledConnectionSource:
    """Closeable connection source that recycles physical connections."""

    def __init__(
        self,
        connect: Callable[[], Any],
        *,
        max_idle: int,
        idle_time_sec: int,
        commit_mode: CommitMode = CommitMode.DRIVER_SPECIFIED,
        label: str = "datasource",
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._connect = connect
        self._max_idle = max(0, max_idle)
        self._idle_time = float(idle_time_sec)
        self._commit_mode = commit_mode
        self._label = label
        self._clock = clock
        self._idle: list[_IdleEntry] = []
        self._in_use = 0
        self._closed = False
        self._lock = threading.Lock()

    @property
    def label(self) -> str:
        return self._label

    @property
    def max_idle(self) -> int:
        return self._max_idle

    @property
    def idle_time_sec(self) -> float:
        return self._idle_time

    @property
    def commit_mode(self) -> CommitMode:
        return self._commit_mode

    @property
    def closed(self) -> bool:
        return self._closed

    def acquire(self) -> Any:
        """Check out a connection, reusing an idle one when available."""

        with self._lock:
            if self._closed:
                raise ConnectionEstablishmentError(f"Connection source '{self._label}' is closed")
            stale = self._take_stale()
            entry = self._idle.pop() if self._idle else None
            self._in_use += 1
        self._close_all(stale)
        if entry is not None:
            return entry.conn
        try:
            return self._open()
        except BaseException:
            with self._lock:
                self._in_use -= 1
            raise

    def release(self, conn: Any) -> None:
        """Return a connection; it is closed if the pool is full or closed."""

        if self._commit_mode is not CommitMode.FORCE_AUTO_COMMIT:
            try:
                conn.rollback()
            except Exception:
                LOG.debug("Discarding connection that failed to roll back", extra={"source": self._label})
                with self._lock:
                    self._in_use = max(0, self._in_use - 1)
                self._close_quiet(conn)
                return

        keep = False
        with self._lock:
            self._in_use = max(0, self._in_use - 1)
            stale = self._take_stale()
            if not self._closed and len(self._idle) < self._max_idle:
                self._idle.append(_IdleEntry(conn=conn, returned_at=self._clock()))
                keep = True
        self._close_all(stale)
        if not keep:
            self._close_quiet(conn)

    @contextmanager
    def connection(self) -> Iterator[Any]:
        """Scoped checkout: the connection is released when the block exits."""

        conn = self.acquire()
        try:
            yield conn
        finally:
            self.release(conn)

    def prime(self) -> None:
        """Open one connection up front so setup failures surface immediately."""

        conn = self.acquire()
        self.release(conn)

    def evict_idle(self) -> int:
        """Close idle connections past their idle time; returns how many.

        Nothing calls this on a timer; the pool owner runs it periodically.
        """

        with self._lock:
            stale = self._take_stale()
        self._close_all(stale)
        return len(stale)

    def close(self) -> None:
        with self._lock:
            self._closed = True
            entries = list(self._idle)
            self._idle.clear()
        self._close_all(entries)

    def stats(self) -> dict[str, int]:
        with self._lock:
            return {"idle_connections": len(self._idle), "in_use": self._in_use}

    def __enter__(self) -> PooledConnectionSource:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"PooledConnectionSource(label={self._label!r}, max_idle={self._max_idle}, "
            f"idle_time_sec={self._idle_time:g}, closed={self._closed})"
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _open(self) -> Any:
        try:
            conn = self._connect()
        except ConnectionEstablishmentError:
            raise
        except Exception as exc:
            raise ConnectionEstablishmentError(
                f"Failed to open connection for '{self._label}': {exc}"
            ) from exc
        try:
            self._apply_commit_mode(conn)
        except Exception as exc:
            self._close_quiet(conn)
            raise ConnectionEstablishmentError(
                f"Failed to apply {self._commit_mode.value} for '{self._label}': {exc}"
            ) from exc
        return conn

    def _apply_commit_mode(self, conn: Any) -> None:
        if self._commit_mode is CommitMode.DRIVER_SPECIFIED:
            return
        flag = self._commit_mode is CommitMode.FORCE_AUTO_COMMIT
        setter = getattr(conn, "set_autocommit", None)
        if callable(setter):
            setter(flag)
        else:
            conn.autocommit = flag

    def _take_stale(self) -> list[_IdleEntry]:
        # Caller holds the lock.
        now = self._clock()
        fresh: list[_IdleEntry] = []
        stale: list[_IdleEntry] = []
        for entry in self._idle:
            if now - entry.returned_at > self._idle_time:
                stale.append(entry)
            else:
                fresh.append(entry)
        self._idle = fresh
        return stale

    def _close_all(self, entries: list[_IdleEntry]) -> None:
        for entry in entries:
            self._close_quiet(entry.conn)

    def _close_quiet(self, conn: Any) -> None:
        try:
            conn.close()
        except Exception:
            LOG.debug("Ignoring error while closing connection", extra={"source": self._label})


__all__ = ["CommitMode", "PooledConnectionSource"]
