"""Background countdown driver for assessment sessions.

A single :class:`SessionClock` lives for the whole signed-in session, not
for any one screen, so leaving the exam view does not pause the countdown.
The controller talks to it through an update channel: lifecycle messages
arm and disarm the countdown, and the clock's thread is the only caller of
``tick()``.
"""
import queue
import threading
import time
from typing import Optional

from loguru import logger

from english_tutor.session import SessionController

STOP = ("stop", "")


class SessionClock:
    def __init__(self, controller: SessionController, interval: float = 1.0):
        self.controller = controller
        self.interval = interval
        self.channel: queue.Queue = queue.Queue()
        self.armed_session: Optional[str] = None
        self.ticks_delivered = 0
        self.disarm_count = 0
        self._thread: Optional[threading.Thread] = None
        controller.on_lifecycle(self._on_lifecycle)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._thread = threading.Thread(target=self._run, name="session-clock", daemon=True)
        self._thread.start()
        # A session may already be active when the clock is (re)started
        with self.controller.lock:
            if self.controller.is_active:
                self.channel.put(("started", self.controller.session_id))
        logger.debug("Session clock started")

    def stop(self, timeout: float = 2.0) -> None:
        if not self.running:
            return
        self.channel.put(STOP)
        self._thread.join(timeout)
        self._thread = None
        logger.debug("Session clock stopped")

    def __enter__(self) -> "SessionClock":
        self.start()
        return self

    def __exit__(self, *exc) -> None:
        self.stop()

    def _on_lifecycle(self, event: str, session_id: str) -> None:
        self.channel.put((event, session_id))

    def _run(self) -> None:
        next_tick = None
        while True:
            timeout = None
            if next_tick is not None:
                timeout = max(0.0, next_tick - time.monotonic())
            try:
                event, session_id = self.channel.get(timeout=timeout)
            except queue.Empty:
                next_tick = self._deliver_tick(next_tick)
                continue
            if (event, session_id) == STOP:
                return
            if event == "started":
                self.armed_session = session_id
                next_tick = time.monotonic() + self.interval
            elif event == "closed":
                if self._disarm(session_id):
                    next_tick = None

    def _deliver_tick(self, scheduled: float) -> Optional[float]:
        with self.controller.lock:
            if not self.controller.is_active or self.controller.session_id != self.armed_session:
                # The closing message is already queued; drop the tick
                return None
            self.ticks_delivered += 1
            try:
                self.controller.tick()
            except Exception:
                # Keep the only clock thread alive for later sessions
                logger.exception("Tick failed for session {}", self.armed_session)
        return scheduled + self.interval

    def _disarm(self, session_id: str) -> bool:
        """Stop ticking ``session_id``; repeated or stale messages are ignored."""
        if self.armed_session != session_id:
            return False
        self.armed_session = None
        self.disarm_count += 1
        logger.debug("Countdown disarmed for session {}", session_id)
        return True
