from __future__ import annotations

"""
Background hotplug monitor.

The monitor thread blocks in ``select`` on the control channel and the
backend's live-event descriptor, with no timeout. Closing the control
channel is the only way to stop it.
"""

from enum import Enum
import select
import threading
from typing import Optional, TYPE_CHECKING

from loguru import logger

from ..backends.base import ACTION_ADD, ACTION_REMOVE, DeviceEvent, EventSource
from .callback import CallbackDispatcher
from .control_channel import ControlChannel
from .exceptions import IdentifierExhausted, MalformedEvent, MonitoringFailure
from .registry import DeviceRegistry

if TYPE_CHECKING:
    from ..backends.base import DeviceBackend


class MonitorState(Enum):
    STARTING = "starting"
    RUNNING = "running"
    DRAINING = "draining"
    STOPPED = "stopped"


class MonitorLoop:
    """
    Owns the monitor thread and applies hotplug events to the registry.

    Parameters
    ----------
    backend : DeviceBackend
        Source of the live-event descriptor.
    registry : DeviceRegistry
        Registry mutated on add/remove events.
    dispatcher : CallbackDispatcher
        Notified after each committed mutation, outside the registry lock.
    thread_name : str, optional
        Name of the monitor thread.
    """

    def __init__(
        self,
        backend: "DeviceBackend",
        registry: DeviceRegistry,
        dispatcher: CallbackDispatcher,
        *,
        thread_name: str = "usbctrl-monitor",
    ) -> None:
        self._backend = backend
        self._registry = registry
        self._dispatcher = dispatcher
        self._thread_name = thread_name
        self._thread: Optional[threading.Thread] = None
        self._control: Optional[ControlChannel] = None
        self._state = MonitorState.STOPPED

    @property
    def state(self) -> MonitorState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def is_stopping(self) -> bool:
        return self.is_running and self._control is not None and self._control.signaled

    def start(self) -> bool:
        """
        Open the live-event source and launch the monitor thread.

        The source is opened on the calling thread, so device events that
        arrive after ``start`` returns are buffered even before the thread
        first polls. A loop that was asked to stop but has not exited yet
        is replaced: it is joined first, unless ``start`` is called from
        that loop's own thread (from inside a callback), in which case it
        is left to finish on its own.

        Returns
        -------
        bool
            True when a monitor thread is running or was launched. False
            when the event source or the thread could not be set up; the
            loop is then STOPPED.
        """
        if self.is_running and not self.is_stopping:
            return True
        if self._thread is threading.current_thread():
            logger.debug("Restart requested from monitor thread; detaching old loop.")
            self._thread = None
            self._control = None
        elif self._thread is not None:
            # Previous loop stopped or is stopping; reap it first.
            self.stop()

        try:
            control = ControlChannel()
        except OSError as exc:
            logger.error("Critical error! Could not create control channel: {}", exc)
            self._state = MonitorState.STOPPED
            return False

        self._state = MonitorState.STARTING
        try:
            source = self._backend.open_event_source()
        except Exception as exc:
            logger.error("Critical error! Could not start device monitor: {}", exc)
            control.close()
            self._state = MonitorState.STOPPED
            return False

        self._control = control
        self._thread = threading.Thread(
            target=self._run,
            args=(control, source),
            daemon=True,
            name=self._thread_name,
        )
        try:
            self._thread.start()
        except RuntimeError as exc:
            logger.error("Critical error! Could not launch monitor thread: {}", exc)
            source.close()
            control.close()
            self._thread = None
            self._control = None
            self._state = MonitorState.STOPPED
            return False
        return True

    def stop(self, timeout: Optional[float] = None) -> bool:
        """
        Signal the control channel and wait for the thread to finish.

        After a successful return no registry mutation or callback from this
        loop will happen. Called from the monitor thread itself (from inside
        a callback) the join is skipped; the loop exits once the callback
        returns.

        Parameters
        ----------
        timeout : float | None, optional
            Join timeout in seconds, by default no limit.

        Returns
        -------
        bool
            False when the thread did not finish within ``timeout``.
        """
        thread, control = self._thread, self._control
        if thread is None or control is None:
            return True

        control.signal()
        if thread is threading.current_thread():
            logger.debug("Stop requested from monitor thread; skipping join.")
            return True

        thread.join(timeout)
        if thread.is_alive():
            logger.error("Error. Monitor thread did not join.")
            return False

        control.close()
        self._thread = None
        self._control = None
        return True

    def _set_state(self, state: MonitorState) -> None:
        # A loop detached by a restart must not overwrite its successor's state.
        if self._thread is threading.current_thread():
            self._state = state

    def _run(self, control: ControlChannel, source: EventSource) -> None:
        logger.info("Monitor thread launched.")
        self._set_state(MonitorState.RUNNING)
        try:
            while self._poll_once(control, source):
                pass
        except Exception as exc:
            logger.exception("Monitor loop failed: {}", exc)
        finally:
            self._set_state(MonitorState.DRAINING)
            source.close()
            control.close_wait_side()
            self._set_state(MonitorState.STOPPED)
            logger.info("Monitor thread shutting down.")

    def _poll_once(self, control: ControlChannel, source: EventSource) -> bool:
        """
        Wait for one wake-up and handle it.

        Returns
        -------
        bool
            False once the loop should drain.
        """
        try:
            control_fd = control.fileno()
            source_fd = source.fileno()
            readable, _, _ = select.select([control_fd, source_fd], [], [])
        except (OSError, ValueError) as exc:
            return self._fail(MonitoringFailure(f"Error polling monitor descriptors: {exc}"))

        if not readable:
            return self._fail(MonitoringFailure("select() returned with no ready descriptors."))

        # Shutdown wins over a pending device event.
        if control_fd in readable and control.consume():
            logger.info("Detected EOF on control channel. Calling for shutdown.")
            return False

        if source_fd in readable:
            self._process_event(source)
        return True

    def _fail(self, exc: MonitoringFailure) -> bool:
        logger.error("{}", exc)
        return False

    def _process_event(self, source: EventSource) -> None:
        event = source.receive()
        if event is None:
            logger.error("Failed to receive device event.")
            return

        try:
            result = self._apply(event)
        except MalformedEvent as exc:
            logger.warning("Ignoring device event: {}", exc)
            return
        except IdentifierExhausted as exc:
            logger.error("Could not add device {}: {}", event.device_node, exc)
            return
        finally:
            # No-op for add events: the registry now owns the handle.
            event.handle.release()

        if result is not None:
            identifier, connected = result
            self._dispatcher.dispatch(identifier, connected)

    def _apply(self, event: DeviceEvent) -> Optional[tuple[int, bool]]:
        if event.action == ACTION_ADD:
            return self._registry.add(event.handle, event.device_node), True

        if event.action == ACTION_REMOVE:
            if event.device_node is None:
                raise MalformedEvent("remove event carries no device node.")
            identifier = self._registry.remove(event.device_node)
            if identifier is None:
                raise MalformedEvent(f"found no record for removed device {event.device_node}.")
            return identifier, False

        logger.debug("Ignoring '{}' event for {}", event.action, event.device_node)
        return None
