import asyncio
import signal
import logging
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

class ShutdownSignal:
    """
    Cancellation flag shared by the poll loop and the entrypoint.
    Setting it interrupts the inter-cycle sleep; in-flight tasks still finish.
    """
    def __init__(self):
        self._event = asyncio.Event()

    def install(self, signals: Optional[Iterable[int]] = None):
        loop = asyncio.get_running_loop()
        targets = list(signals) if signals is not None else [signal.SIGINT, signal.SIGTERM]
        for sig in targets:
            try:
                loop.add_signal_handler(sig, self.trigger)
            except NotImplementedError:
                # Windows event loops have no add_signal_handler
                signal.signal(sig, lambda *_: loop.call_soon_threadsafe(self.trigger))

    def trigger(self):
        if not self._event.is_set():
            logger.info("Shutdown requested, finishing in-flight work...")
            self._event.set()

    def is_set(self) -> bool:
        return self._event.is_set()

    async def wait(self, timeout: Optional[float] = None) -> bool:
        """Waits until triggered or until timeout elapses. Returns True if triggered."""
        try:
            await asyncio.wait_for(self._event.wait(), timeout)
        except asyncio.TimeoutError:
            pass
        return self._event.is_set()
