"""
Bridge between an audio-capture backend and the compositor.

The backend protocol mirrors a typical platform visualizer API: a provider
opens a capture object for an audio session, which delivers waveform and
FFT byte buffers to a listener at a requested rate (in milliHertz).
"""

import logging
from typing import Protocol

from trailscope.compositor import Compositor

logger = logging.getLogger(__name__)


class CaptureListener(Protocol):
    def on_waveform_capture(self, data: bytes, sampling_rate: int) -> None: ...
    def on_fft_capture(self, data: bytes, sampling_rate: int) -> None: ...


class CaptureBackend(Protocol):
    def set_enabled(self, enabled: bool) -> None: ...
    def set_capture_size(self, size: int) -> None: ...
    def set_data_capture_listener(
        self,
        listener: CaptureListener | None,
        rate_mhz: int,
        waveform: bool,
        fft: bool,
    ) -> None: ...
    def release(self) -> None: ...


class CaptureProvider(Protocol):
    def open(self, session_id: int) -> CaptureBackend: ...
    def capture_size_range(self) -> tuple[int, int]: ...
    def max_capture_rate(self) -> int: ...


class _CompositorListener:
    """Forwards captured buffers to the compositor's mailboxes."""

    def __init__(self, compositor: Compositor):
        self._compositor = compositor

    def on_waveform_capture(self, data: bytes, sampling_rate: int) -> None:
        self._compositor.update_waveform(data)

    def on_fft_capture(self, data: bytes, sampling_rate: int) -> None:
        self._compositor.update_spectrum(data)


class CaptureBridge:
    """
    Links a compositor to a capture session.

    Args:
        compositor: Receives the captured buffers.
        provider: Opens capture backends for session ids.
        rate_fraction: Fraction of the provider's maximum capture rate to use.
            Defaults to the compositor config's ``capture_rate_fraction``.
    """

    def __init__(
        self,
        compositor: Compositor,
        provider: CaptureProvider,
        rate_fraction: float | None = None,
    ):
        self.compositor = compositor
        self.provider = provider
        if rate_fraction is None:
            rate_fraction = compositor.cfg.capture_rate_fraction
        self.rate_fraction = rate_fraction
        self._backend: CaptureBackend | None = None
        self._session_id: int | None = None
        self._listener = _CompositorListener(compositor)

    @property
    def linked(self) -> bool:
        return self._backend is not None

    @property
    def session_id(self) -> int | None:
        return self._session_id

    def link(self, session_id: int) -> bool:
        """
        Attach to ``session_id`` and start capturing.

        Returns:
            True if capture is running, False if the backend could not be opened.
        """
        if self._backend is not None and session_id != self._session_id:
            self.unlink()

        logger.info("Linking capture session=%s", session_id)
        self._session_id = session_id

        if self._backend is None:
            backend = None
            try:
                backend = self.provider.open(session_id)
                backend.set_enabled(False)
                backend.set_capture_size(self.provider.capture_size_range()[1])
                rate = int(self.provider.max_capture_rate() * self.rate_fraction)
                backend.set_data_capture_listener(self._listener, rate, True, True)
            except Exception:
                logger.exception("Error enabling capture for session %s", session_id)
                if backend is not None:
                    self._shutdown(backend)
                return False
            self._backend = backend

        try:
            self._backend.set_enabled(True)
        except Exception:
            logger.exception("Error starting capture for session %s", session_id)
            self.unlink()
            return False
        return True

    def unlink(self) -> None:
        """Stop and release the capture backend. Safe to call repeatedly."""
        backend, self._backend = self._backend, None
        if backend is None:
            return

        logger.info("Unlinking capture session=%s", self._session_id)
        self._shutdown(backend)

    @staticmethod
    def _shutdown(backend: CaptureBackend) -> None:
        try:
            backend.set_enabled(False)
        except Exception as exc:
            logger.warning("Capture disable failed: %s", exc)
        try:
            backend.release()
        except Exception as exc:
            logger.warning("Capture release failed: %s", exc)

    def release(self) -> None:
        """Release capture resources; alias of :meth:`unlink`."""
        self.unlink()
