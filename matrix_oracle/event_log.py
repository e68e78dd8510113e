# matrix_oracle/event_log.py
# Event log for oracle executions.
#
# Event-sourced, in-memory, per-instance. No file IO. No global state.
# All timestamps are caller-supplied. All hashes are deterministic.
#
# Canonical import:
#   from matrix_oracle.event_log import EventLogger, Event, EventFilter

import hashlib
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

# ===========================================================================
# CONSTANTS
# ===========================================================================

# Logged in place of non-finite floats; the event itself is never dropped.
_NAN_SENTINEL: str = "NaN_DETECTED"
_INF_SENTINEL: str = "Inf_DETECTED"

_HASH_SEP: str = "|"

# Event types emitted by the orchestrator.
STATE_CHANGE:        str = "STATE_CHANGE"
FIXTURE_PERSISTED:   str = "FIXTURE_PERSISTED"
RUNNER_INVOKED:      str = "RUNNER_INVOKED"
FIXTURE_COMPARED:    str = "FIXTURE_COMPARED"
SCENARIO_FAILED:     str = "SCENARIO_FAILED"
REPORT_WRITE_FAILED: str = "REPORT_WRITE_FAILED"

# ===========================================================================
# DATACLASSES
# ===========================================================================

@dataclass
class Event:
    """
    Record of a single oracle event.

    Fields
    ------
    id        : Deterministic identifier derived from the instance counter.
    type      : Category string (STATE_CHANGE, FIXTURE_COMPARED, ...).
    timestamp : Caller-supplied datetime. Never generated internally.
    data      : Sanitized key-value payload.
    hash      : SHA-256 hex digest over (id, type, timestamp, data).
    """
    id: str
    type: str
    timestamp: datetime
    data: Dict[str, Any]
    hash: str


@dataclass
class EventFilter:
    """
    Filter for EventLogger.query_events(). Omitted fields apply no constraint.
    """
    event_type: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    limit: Optional[int] = None


# ===========================================================================
# INTERNAL HELPERS
# ===========================================================================

def _sanitize_numeric(value: Any) -> Any:
    if isinstance(value, float):
        if math.isnan(value):
            return _NAN_SENTINEL
        if math.isinf(value):
            return _INF_SENTINEL
    return value


def _sanitize_data(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: _sanitize_numeric(v) for k, v in data.items()}


def _compute_hash(
    event_id: str,
    event_type: str,
    timestamp: datetime,
    data: Dict[str, Any],
) -> str:
    """
    SHA-256 over id, type, ISO timestamp and repr(sorted(data.items())),
    joined with _HASH_SEP. Independent of dict insertion order.
    """
    sorted_items: str = repr(sorted(data.items()))
    preimage: str = (
        event_id
        + _HASH_SEP
        + event_type
        + _HASH_SEP
        + timestamp.isoformat()
        + _HASH_SEP
        + sorted_items
    )
    return hashlib.sha256(preimage.encode("ascii", errors="replace")).hexdigest()


def _make_event_id(counter: int) -> str:
    return "EVT-{:016d}".format(counter)


# ===========================================================================
# EventLogger
# ===========================================================================

class EventLogger:
    """
    Event-sourced logger for oracle executions.

    Events are held in an instance-level list. Each EventLogger is fully
    independent, so concurrent executions with separate loggers share no
    state.

    log_event() raises LoggingError instead of silently discarding an event.
    Float payload values that are NaN or Inf are replaced by sentinel
    strings before storage.
    """

    def __init__(self) -> None:
        self._store: List[Event] = []
        self._counter: int = 0

    def log_event(self, event_type: str, data: Dict[str, Any], timestamp: datetime) -> str:
        """
        Record one event. Return the assigned event ID.

        Raises
        ------
        LoggingError : If event_type is empty or timestamp is not a datetime.
        """
        if not event_type:
            raise LoggingError("event_type must be a non-empty string")
        if timestamp is None:
            raise LoggingError("timestamp must be caller-supplied; None is not permitted")
        if not isinstance(timestamp, datetime):
            raise LoggingError(
                "timestamp must be a datetime instance; got: {}".format(type(timestamp))
            )

        self._counter += 1
        event_id: str = _make_event_id(self._counter)
        sanitized: Dict[str, Any] = _sanitize_data(data)
        event_hash: str = _compute_hash(event_id, event_type, timestamp, sanitized)

        self._store.append(Event(
            id=event_id,
            type=event_type,
            timestamp=timestamp,
            data=sanitized,
            hash=event_hash,
        ))
        return event_id

    def log_state_change(self, new_state: Any, timestamp: datetime, **data: Any) -> str:
        """
        Log a state machine transition. new_state is stored as its .name when
        it has one (enums), otherwise as repr().
        """
        if new_state is None:
            raise LoggingError("new_state must not be None")
        payload: Dict[str, Any] = {"state": getattr(new_state, "name", repr(new_state))}
        payload.update(data)
        return self.log_event(STATE_CHANGE, payload, timestamp)

    def query_events(self, filter: EventFilter) -> List[Event]:
        """
        Return events matching filter, oldest first.

        Applied in order: event_type, start_time (inclusive), end_time
        (inclusive), limit.
        """
        if filter is None:
            raise LoggingError("filter must not be None")

        results: List[Event] = []
        for event in self._store:
            if filter.event_type is not None and event.type != filter.event_type:
                continue
            if filter.start_time is not None and event.timestamp < filter.start_time:
                continue
            if filter.end_time is not None and event.timestamp > filter.end_time:
                continue
            results.append(event)

        if filter.limit is not None:
            results = results[: filter.limit]
        return results

    def event_count(self) -> int:
        return len(self._store)


# ===========================================================================
# EXCEPTIONS
# ===========================================================================

class LoggingError(Exception):
    """
    Raised by EventLogger when an invariant is violated. Never swallowed.
    """
