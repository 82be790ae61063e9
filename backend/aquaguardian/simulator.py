import logging
import random
import threading
import time
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from .repository import MonitorRepository
from .scoring import SensorReading

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


def generate_reading(rng=random) -> SensorReading:
    return SensorReading(
        ph=round(6.5 + rng.random(), 2),
        tds=round(100 + rng.random() * 200, 1),
        turbidity=round(1 + rng.random() * 10, 2),
        temperature=round(20 + rng.random() * 10, 2),
        timestamp=now_ms(),
    )


class ReadingSimulator:
    """
    Background reading source.
    Writes a simulated reading through a fresh repository every interval
    until stopped. One loop per simulator instance.
    """

    def __init__(self, session_factory, interval_sec: int = 5, rng=random):
        self.session_factory = session_factory
        self.interval_sec = interval_sec
        self.rng = rng
        self._lock = threading.Lock()
        self._stop: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None

    def _loop(self, stop: threading.Event):
        while not stop.is_set():
            db = self.session_factory()
            try:
                MonitorRepository(db).add_reading(generate_reading(self.rng))
            except SQLAlchemyError:
                logger.exception("Simulated reading could not be stored, retrying next tick")
            finally:
                db.close()

            stop.wait(max(1, int(self.interval_sec)))

    def start(self) -> bool:
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return False

            self._stop = threading.Event()
            self._thread = threading.Thread(target=self._loop, args=(self._stop,), daemon=True)
            self._thread.start()
            logger.info("Simulator started (every %ss)", self.interval_sec)
            return True

    def stop(self) -> bool:
        with self._lock:
            if self._thread is None or not self._thread.is_alive():
                return False
            self._stop.set()
            self._thread = None
            logger.info("Simulator stopped")
            return True

    def is_running(self) -> bool:
        with self._lock:
            return self._thread is not None and self._thread.is_alive()
