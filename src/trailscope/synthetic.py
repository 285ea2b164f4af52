"""
Synthetic capture backend for demos and deterministic testing.

Produces a beating two-tone signal with a little noise. Waveform buffers
are unsigned 8-bit PCM; FFT buffers use the interleaved int8 layout
``[Re0, Re(n/2), Re1, Im1, ...]`` expected by the spectrum renderers.
"""

import logging
import threading

import numpy as np

logger = logging.getLogger(__name__)


def pack_fft_bytes(pcm: np.ndarray) -> bytes:
    """Transform uint8 PCM into interleaved int8 FFT bytes of the same length."""
    n = len(pcm)
    if n < 2:
        return bytes(n)
    centered = pcm.astype(np.float32) - 128.0
    spectrum = np.fft.rfft(centered) / (n / 2)

    out = np.empty(n, dtype=np.float32)
    out[0] = spectrum[0].real
    out[1] = spectrum[n // 2].real if n % 2 == 0 else 0.0
    pairs = (n - 2) // 2
    out[2:2 + 2 * pairs:2] = spectrum[1:1 + pairs].real
    out[3:3 + 2 * pairs:2] = spectrum[1:1 + pairs].imag
    if n % 2:
        out[-1] = 0.0
    return np.clip(np.round(out), -128, 127).astype(np.int8).tobytes()


class SyntheticCapture:
    """In-process capture source that emits buffers from a worker thread."""

    def __init__(
        self,
        session_id: int,
        sampling_rate: int = 44100,
        capture_size: int = 1024,
        tones: tuple[float, ...] = (110.0, 440.0),
        seed: int | None = None,
    ):
        self.session_id = session_id
        self.sampling_rate = sampling_rate
        self.capture_size = capture_size
        self.tones = tones
        self.rng = np.random.default_rng(seed)

        self.enabled = False
        self.released = False
        self.emitted = 0

        self._listener = None
        self._rate_mhz = 0
        self._want_waveform = False
        self._want_fft = False
        self._sample_offset = 0

        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def set_capture_size(self, size: int) -> None:
        if self.enabled:
            raise RuntimeError("Capture size cannot change while enabled")
        self.capture_size = size

    def set_data_capture_listener(self, listener, rate_mhz: int, waveform: bool, fft: bool) -> None:
        self._listener = listener
        self._rate_mhz = rate_mhz
        self._want_waveform = waveform
        self._want_fft = fft

    def set_enabled(self, enabled: bool) -> None:
        if self.released:
            raise RuntimeError("Capture already released")
        if enabled == self.enabled:
            return
        self.enabled = enabled
        if enabled and self._rate_mhz > 0:
            self._stop.clear()
            self._thread = threading.Thread(
                target=self._run, name=f"synthetic-capture-{self.session_id}", daemon=True
            )
            self._thread.start()
        elif not enabled:
            self._join()

    def release(self) -> None:
        self.enabled = False
        self._join()
        self._listener = None
        self.released = True

    def _join(self) -> None:
        self._stop.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=1.0)

    def _run(self) -> None:
        interval = 1000.0 / self._rate_mhz
        while not self._stop.wait(interval):
            self.emit_once()

    def generate_waveform(self) -> np.ndarray:
        """Next ``capture_size`` samples of the test signal as uint8 PCM."""
        n = self.capture_size
        t = (self._sample_offset + np.arange(n)) / self.sampling_rate
        self._sample_offset += n

        # Two beats per second
        envelope = 0.55 + 0.45 * np.abs(np.sin(2 * np.pi * 1.0 * t))
        signal = np.zeros(n, dtype=np.float64)
        for i, freq in enumerate(self.tones):
            signal += np.sin(2 * np.pi * freq * t) / (i + 2)
        signal = signal * envelope + self.rng.normal(0.0, 0.03, n)
        return np.clip(128 + signal * 127, 0, 255).astype(np.uint8)

    def emit_once(self) -> None:
        """Generate one waveform/FFT pair and deliver it to the listener."""
        listener = self._listener
        if listener is None:
            return
        pcm = self.generate_waveform()
        if self._want_waveform:
            listener.on_waveform_capture(pcm.tobytes(), self.sampling_rate * 1000)
        if self._want_fft:
            listener.on_fft_capture(pack_fft_bytes(pcm), self.sampling_rate * 1000)
        self.emitted += 1


class SyntheticCaptureProvider:
    """
    Opens :class:`SyntheticCapture` sessions.

    Args:
        size_range: (min, max) supported capture sizes.
        max_rate_mhz: Maximum capture rate in milliHertz.
        fail_sessions: Session ids whose ``open`` raises, to exercise attach failures.
        seed: Noise seed passed to every capture.
    """

    def __init__(
        self,
        size_range: tuple[int, int] = (128, 1024),
        max_rate_mhz: int = 20000,
        fail_sessions: tuple[int, ...] = (),
        seed: int | None = None,
    ):
        self._size_range = size_range
        self._max_rate_mhz = max_rate_mhz
        self.fail_sessions = set(fail_sessions)
        self.seed = seed
        self.opened: list[SyntheticCapture] = []

    def open(self, session_id: int) -> SyntheticCapture:
        if session_id in self.fail_sessions:
            raise RuntimeError(f"No audio session {session_id}")
        capture = SyntheticCapture(session_id, seed=self.seed)
        self.opened.append(capture)
        logger.debug("Opened synthetic capture for session %s", session_id)
        return capture

    def capture_size_range(self) -> tuple[int, int]:
        return self._size_range

    def max_capture_rate(self) -> int:
        return self._max_rate_mhz
