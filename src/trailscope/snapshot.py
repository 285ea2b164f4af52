"""
Sample snapshots and the single-slot mailboxes that hold them.

Byte conventions:
- WAVEFORM: unsigned 8-bit PCM, silence at 128.
- SPECTRUM: signed 8-bit FFT components laid out as
  [Re0, Re(n/2), Re1, Im1, Re2, Im2, ...], silence at 0.
"""

import threading
from dataclasses import dataclass
from enum import Enum

import numpy as np


class SampleKind(Enum):
    WAVEFORM = "waveform"
    SPECTRUM = "spectrum"


_DTYPES = {
    SampleKind.WAVEFORM: np.uint8,
    SampleKind.SPECTRUM: np.int8,
}


@dataclass(frozen=True)
class Snapshot:
    """Most recent buffer for one data kind. ``data`` is None until received."""

    kind: SampleKind
    data: bytes | None = None

    @property
    def present(self) -> bool:
        return self.data is not None

    @property
    def samples(self) -> np.ndarray:
        """Read-only numpy view of the buffer using the kind's dtype."""
        dtype = _DTYPES[self.kind]
        if not self.data:
            return np.zeros(0, dtype=dtype)
        return np.frombuffer(self.data, dtype=dtype)

    def __len__(self) -> int:
        return 0 if self.data is None else len(self.data)


class SnapshotMailbox:
    """
    Latest-value slots for waveform and spectrum buffers.

    Writers replace the reference; nothing is queued, so a slow reader
    simply skips intermediate buffers.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._waveform = Snapshot(SampleKind.WAVEFORM)
        self._spectrum = Snapshot(SampleKind.SPECTRUM)

    def put(self, kind: SampleKind, data: bytes | None):
        snapshot = Snapshot(kind, data)
        with self._lock:
            if kind is SampleKind.WAVEFORM:
                self._waveform = snapshot
            else:
                self._spectrum = snapshot

    def latest(self) -> tuple[Snapshot, Snapshot]:
        """Return the (waveform, spectrum) pair."""
        with self._lock:
            return self._waveform, self._spectrum

    def clear(self):
        with self._lock:
            self._waveform = Snapshot(SampleKind.WAVEFORM)
            self._spectrum = Snapshot(SampleKind.SPECTRUM)
