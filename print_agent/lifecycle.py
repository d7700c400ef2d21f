"""
Service lifecycle.

STARTING -> RUNNING -> STOP_REQUESTED -> STOPPED

The controller owns the listener (a uvicorn.Server, or anything exposing
`run()`, `started` and `should_exit`). Service control events arrive on
the service manager's thread; a stop is handed over through a one-slot
queue to a watcher thread, which is the only place that touches the
listener's stop handle. A local Ctrl-C goes through the same channel.
"""
import logging
import queue
import threading
from enum import Enum
from typing import Callable, Optional

from print_agent.env import SERVICE_STOP_CODE

logger = logging.getLogger(__name__)


class ServiceState(str, Enum):
    STARTING = "starting"
    RUNNING = "running"
    STOP_REQUESTED = "stop_requested"
    STOPPED = "stopped"


class ServiceControl(str, Enum):
    STOP = "stop"
    INTERROGATE = "interrogate"
    USER_EVENT = "user_event"
    OTHER = "other"


class ControlResult(str, Enum):
    NO_ERROR = "no_error"
    NOT_IMPLEMENTED = "not_implemented"


class StopHandle:
    """Holds the listener once registered and asks it to shut down gracefully."""

    def __init__(self):
        self._lock = threading.Lock()
        self._server = None

    def register(self, server):
        with self._lock:
            if self._server is not None:
                raise RuntimeError("Stop handle already registered")
            self._server = server

    def stop(self) -> bool:
        with self._lock:
            if self._server is None:
                return False
            # uvicorn stops accepting connections and lets in-flight requests finish
            self._server.should_exit = True
            return True


class ServiceController:

    BIND_POLL_INTERVAL = 0.05  # seconds

    def __init__(
        self,
        server,
        report: Optional[Callable[[ServiceState], None]] = None,
        stop_code: int = SERVICE_STOP_CODE,
    ):
        self.server = server
        self.stop_handle = StopHandle()
        self._report = report or (lambda state: None)
        self._stop_code = stop_code
        self._stop_channel: "queue.Queue[None]" = queue.Queue(maxsize=1)
        self._state_lock = threading.Lock()
        self._state = ServiceState.STARTING
        self._done = threading.Event()

    @property
    def state(self) -> ServiceState:
        with self._state_lock:
            return self._state

    def _transition(self, target: ServiceState, *sources: ServiceState) -> bool:
        with self._state_lock:
            if sources and self._state not in sources:
                return False
            self._state = target
        logger.info("Service state -> %s", target.value)
        self._report(target)
        return True

    # ---------- Control events ----------

    def handle_control(self, control: ServiceControl, code: Optional[int] = None) -> ControlResult:
        if control == ServiceControl.INTERROGATE:
            return ControlResult.NO_ERROR

        if control == ServiceControl.STOP:
            self._request_stop()
            return ControlResult.NO_ERROR

        if control == ServiceControl.USER_EVENT:
            if code == self._stop_code:
                self._request_stop()
            else:
                logger.debug("Ignoring user control code %s", code)
            return ControlResult.NO_ERROR

        logger.debug("Control %s not implemented", control)
        return ControlResult.NOT_IMPLEMENTED

    def _request_stop(self):
        if self.state in (ServiceState.STOP_REQUESTED, ServiceState.STOPPED):
            logger.debug("Stop already requested")
            return
        try:
            self._stop_channel.put_nowait(None)
        except queue.Full:
            logger.debug("Stop already pending")

    # ---------- Run ----------

    def handle_signal(self, sig, frame):
        # installed as the listener's signal handler, so Ctrl-C takes the stop path
        logger.info("Received signal %s", sig)
        self.handle_control(ServiceControl.STOP)

    def run(self):
        """Serve until stopped. Blocks the calling thread."""
        self._report(ServiceState.STARTING)
        self.stop_handle.register(self.server)
        if hasattr(self.server, "handle_exit"):
            self.server.handle_exit = self.handle_signal

        threading.Thread(target=self._await_stop, name="stop-watcher", daemon=True).start()
        threading.Thread(target=self._await_bound, name="bind-watcher", daemon=True).start()

        try:
            self.server.run()
        finally:
            self._done.set()
            self._transition(ServiceState.STOPPED)
            try:
                # wake the stop watcher if the listener ended on its own
                self._stop_channel.put_nowait(None)
            except queue.Full:
                pass

    def _await_stop(self):
        self._stop_channel.get()
        if self._transition(ServiceState.STOP_REQUESTED, ServiceState.STARTING, ServiceState.RUNNING):
            self.stop_handle.stop()

    def _await_bound(self):
        while not self.server.started:
            if self.server.should_exit or self._done.is_set():
                return
            self._done.wait(self.BIND_POLL_INTERVAL)
        self._transition(ServiceState.RUNNING, ServiceState.STARTING)
