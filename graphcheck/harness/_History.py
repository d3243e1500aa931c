import json
import time
from datetime import UTC, datetime

import numpy as np
import polars as pl

_INLINE_ARRAY_LIMIT = 16


def _json_safe(value):
    """Reduce ``value`` to JSON types; large arrays and unknown objects become tags."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, np.ndarray):
        if value.size <= _INLINE_ARRAY_LIMIT:
            return value.tolist()
        return f"<<ndarray {value.dtype} {value.shape}>>"
    if isinstance(value, dict):
        return {str(k): _json_safe(v) for k, v in value.items()}
    if isinstance(value, (set, frozenset)):
        return sorted(_json_safe(v) for v in value)
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    return f"<<{type(value).__name__}>>"


def _flatten(event):
    # parquet/csv need scalar cells
    return {k: json.dumps(v) if isinstance(v, (list, dict)) else v for k, v in event.items()}


class History:
    # Per-rank run log (mixed into ExecutionContext; needs ``self.rank``)

    def _init_history(self, enabled=True):
        self._events = []
        self._history_enabled = bool(enabled)
        self._t0_ns = time.perf_counter_ns()
        self._seq = 0

    def _log_event(self, op: str, **fields):
        if not self._history_enabled:
            return
        self._seq += 1
        event = {
            "seq": self._seq,
            "ts_utc": datetime.now(UTC).isoformat(timespec="microseconds").replace("+00:00", "Z"),
            "elapsed_ns": time.perf_counter_ns() - self._t0_ns,
            "rank": self.rank,
            "op": op,
        }
        event.update({k: _json_safe(v) for k, v in fields.items()})
        self._events.append(event)

    def history(self, as_df: bool = False, op: str | None = None):
        """Events recorded on this rank, oldest first.

        Parameters
        --
        as_df : bool, default False
            Return a Polars DataFrame (one column per field seen) instead of dicts.
        op : str, optional
            Keep only events of this kind ('verify', 'timed', 'mark', ...).

        Returns
        ---
        list[dict] or polars.DataFrame
            Every event carries 'seq', 'ts_utc', 'elapsed_ns' (since the
            context was created), 'rank' and 'op', plus its own fields.

        """
        events = [e for e in self._events if op is None or e["op"] == op]
        if as_df:
            return pl.DataFrame([_flatten(e) for e in events], infer_schema_length=None)
        return list(events)

    def export_history(self, path):
        """Write the events to ``path``; the format follows the extension.

        '.ndjson'/'.jsonl' and '.json' keep nested fields as JSON; '.parquet'
        and '.csv' go through Polars with nested fields serialized to strings.

        Returns
        ---
        int
            Number of events written (0 writes nothing).

        Raises
        --
        ValueError
            Unsupported extension.

        """
        if not self._events:
            return 0
        path = str(path)
        ext = path.lower().rsplit(".", 1)[-1]
        if ext in ("ndjson", "jsonl"):
            with open(path, "w", encoding="utf-8") as f:
                f.writelines(json.dumps(e) + "\n" for e in self._events)
        elif ext == "json":
            with open(path, "w", encoding="utf-8") as f:
                json.dump(self._events, f)
        elif ext == "parquet":
            self.history(as_df=True).write_parquet(path)
        elif ext == "csv":
            self.history(as_df=True).write_csv(path)
        else:
            raise ValueError(f"unsupported history format: {path!r}")
        return len(self._events)

    def enable_history(self, flag: bool = True):
        self._history_enabled = bool(flag)

    def clear_history(self):
        """Drop recorded events (exported files are untouched)."""
        self._events.clear()

    def mark(self, label: str):
        """Insert a labelled marker, e.g. between phases of a run."""
        self._log_event("mark", label=label)
