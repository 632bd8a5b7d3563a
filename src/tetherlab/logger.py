"""
CSV logging for per-frame world and tether state.

Buffers data in memory and writes in batches to minimize I/O overhead.
Implements context manager protocol for safe resource handling.
"""
from __future__ import annotations

import csv
from pathlib import Path
from typing import Any, TextIO

from tetherlab.dynamics.body import PointBody2D

BODY_FIELDS = {"p", "v"}
TETHER_FIELDS = {"span", "taut", "attached", "n_particles"}


class CSVLogger:
    """
    Buffered CSV logger for simulation data.

    Parameters
    ----------
    filepath : str | Path
        Output CSV file path
    buffer_size : int
        Number of rows to buffer before writing. Higher = fewer writes but more memory.
    fields : list[str] | None
        Per-body state fields. Default: ["p", "v"]
    tether_fields : list[str] | None
        Per-player tether fields. Default: ["span", "taut", "attached", "n_particles"]
        "span" is the anchor-to-free-end distance (nan while detached),
        "taut" is 1 if the span clamp fired on the last tick.

    Notes
    -----
    The logged world must expose ``t``, ``bodies`` (PointBody2D list),
    ``players`` (objects with ``name``) and ``tethers`` (TetherSystem).

    >>> with CSVLogger("output.csv") as logger:
    ...     for _ in range(frames):
    ...         world.step()
    ...         logger.log(world)
    """

    def __init__(
        self,
        filepath: str | Path,
        buffer_size: int = 1000,
        fields: list[str] | None = None,
        tether_fields: list[str] | None = None,
    ) -> None:
        self.filepath = Path(filepath)
        self.buffer_size = buffer_size
        self.fields = fields if fields is not None else ["p", "v"]
        self.tether_fields = (
            tether_fields if tether_fields is not None
            else ["span", "taut", "attached", "n_particles"]
        )

        invalid = set(self.fields) - BODY_FIELDS
        if invalid:
            raise ValueError(
                f"Invalid fields: {invalid}. Valid options: {BODY_FIELDS}"
            )
        invalid = set(self.tether_fields) - TETHER_FIELDS
        if invalid:
            raise ValueError(
                f"Invalid tether fields: {invalid}. Valid options: {TETHER_FIELDS}"
            )

        self._buffer: list[list[str]] = []
        self._file: TextIO | None = None
        self._writer: Any = None  # csv.writer is a function, not a type
        self._header_written = False

        # Ensure parent directory exists
        self.filepath.parent.mkdir(parents=True, exist_ok=True)

    def __enter__(self) -> CSVLogger:
        """Open file for writing."""
        self._file = open(self.filepath, "w", newline="", encoding="utf-8")
        self._writer = csv.writer(self._file)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Close file, flushing any remaining data."""
        self.close()

    @staticmethod
    def _body_val(b: PointBody2D, field: str) -> Any:
        return getattr(b, field)

    @staticmethod
    def _tether_val(world: Any, name: str, field: str) -> float:
        tethers = world.tethers
        ctrl = tethers.controllers.get(name)
        live = ctrl is not None and ctrl.chain is not None
        if field == "attached":
            return 1.0 if live else 0.0
        if field == "span":
            return ctrl.chain.span() if live else float("nan")
        if field == "taut":
            return 1.0 if live and ctrl.last_result is not None and ctrl.last_result.clamped else 0.0
        if field == "n_particles":
            return float(ctrl.chain.n_particles) if live else 0.0
        raise KeyError(field)

    def _write_header(self, world: Any) -> None:
        """Generate and write CSV header row."""
        hdr = ["t"]
        for b in world.bodies:
            for field in self.fields:
                for component in ("x", "y"):
                    hdr.append(f"{b.name}.{field}_{component}")
        for player in world.players:
            for field in self.tether_fields:
                hdr.append(f"{player.name}.{field}")

        if self._writer:
            self._writer.writerow(hdr)
            if self._file:
                self._file.flush()  # Ensure header written immediately

        self._header_written = True

    def log(self, world: Any) -> None:
        """
        Log current world state to buffer.

        Automatically opens file on first call if not using context manager.
        Writes to disk when buffer is full.
        """
        if self._file is None:
            self.__enter__()

        if not self._header_written:
            self._write_header(world)

        row = [f"{world.t:.10f}"]
        for b in world.bodies:
            for field in self.fields:
                row.extend(f"{v:.10e}" for v in self._body_val(b, field))
        for player in world.players:
            for field in self.tether_fields:
                row.append(f"{self._tether_val(world, player.name, field):.10e}")

        self._buffer.append(row)

        if len(self._buffer) >= self.buffer_size:
            self.flush()

    def flush(self) -> None:
        """Write buffered data to disk and clear buffer."""
        if self._writer and self._buffer:
            self._writer.writerows(self._buffer)
            if self._file:
                self._file.flush()
            self._buffer.clear()

    def close(self) -> None:
        """Flush remaining data and close file."""
        self.flush()
        if self._file:
            self._file.close()
            self._file = None
            self._writer = None
