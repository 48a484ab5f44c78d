__license__ = "GNU Affero General Public License http://www.gnu.org/licenses/agpl.html"
__copyright__ = "Copyright (C) 2024 The Printerface Project - Released under terms of the AGPLv3 License"

import logging
import threading

from printerface.commands import (
    JOB_PATH,
    CommandDispatcher,
    CommandResult,
    JobCommands,
    PauseActions,
)
from printerface.job import JobInfo, JobProgress, job_info_from_json, job_progress_from_json


class EventChannel:
    """
    Ordered registry of handlers for one kind of push update.

    Handlers are called synchronously on the dispatching thread, in the order
    they subscribed. Dispatch works on a snapshot of the handlers taken under
    the lock, so handlers may subscribe or unsubscribe while being called.
    """

    def __init__(self, name):
        self.name = name
        self._handlers = []
        self._mutex = threading.RLock()
        self._logger = logging.getLogger(__name__)

    def subscribe(self, handler):
        with self._mutex:
            if handler in self._handlers:
                return
            self._handlers.append(handler)
        self._logger.debug(f"Subscribed handler {handler!r} for {self.name}")

    def unsubscribe(self, handler):
        with self._mutex:
            try:
                self._handlers.remove(handler)
            except ValueError:
                # not registered
                pass

    def has_subscribers(self):
        with self._mutex:
            return len(self._handlers) > 0

    def dispatch(self, record):
        with self._mutex:
            handlers = list(self._handlers)

        for handler in handlers:
            try:
                handler(record)
            except Exception:
                self._logger.exception(
                    f"Got an exception while sending {self.name} {record!r} to {handler!r}"
                )

    def __len__(self):
        with self._mutex:
            return len(self._handlers)


class JobTracker:
    """
    Tracks the server's current print job.

    Queries and commands go through ``connection``, which needs to provide
    ``get(path)`` and ``post_json(path, data)``. Push updates are fed in from
    the outside through :meth:`dispatch_job_info` and :meth:`dispatch_progress`.
    """

    def __init__(self, connection):
        self._connection = connection
        self._dispatcher = CommandDispatcher(connection)

        self.job_info_events = EventChannel("job info")
        self.progress_events = EventChannel("progress")

    # ~~ queries

    def get_info(self) -> JobInfo:
        """
        Fetches info about the current job.

        Raises:
            ProtocolError: the server answered with malformed data
            TransportError: the request failed
        """
        return job_info_from_json(self._connection.get(JOB_PATH))

    def get_progress(self) -> JobProgress:
        """
        Fetches the progress of the current job.

        Raises:
            ProtocolError: the server answered with malformed data
            TransportError: the request failed
        """
        return job_progress_from_json(self._connection.get(JOB_PATH))

    # ~~ commands

    def send_command(self, command, action=None) -> CommandResult:
        return self._dispatcher.dispatch(command, action=action)

    def start_job(self) -> str:
        return self.send_command(JobCommands.START).render()

    def cancel_job(self) -> str:
        return self.send_command(JobCommands.CANCEL).render()

    def restart_job(self) -> str:
        return self.send_command(JobCommands.RESTART).render()

    def pause_job(self) -> str:
        return self.send_command(JobCommands.PAUSE, PauseActions.PAUSE).render()

    def resume_job(self) -> str:
        return self.send_command(JobCommands.PAUSE, PauseActions.RESUME).render()

    def toggle_job(self) -> str:
        """Pauses the job if it is running, resumes it if it is paused."""
        return self.send_command(JobCommands.PAUSE, PauseActions.TOGGLE).render()

    # ~~ push updates

    def subscribe_job_info(self, handler):
        self.job_info_events.subscribe(handler)

    def unsubscribe_job_info(self, handler):
        self.job_info_events.unsubscribe(handler)

    def job_info_listens(self):
        return self.job_info_events.has_subscribers()

    def dispatch_job_info(self, info: JobInfo):
        self.job_info_events.dispatch(info)

    def subscribe_progress(self, handler):
        self.progress_events.subscribe(handler)

    def unsubscribe_progress(self, handler):
        self.progress_events.unsubscribe(handler)

    def progress_listens(self):
        return self.progress_events.has_subscribers()

    def dispatch_progress(self, progress: JobProgress):
        self.progress_events.dispatch(progress)
