__license__ = "GNU Affero General Public License http://www.gnu.org/licenses/agpl.html"
__copyright__ = "Copyright (C) 2024 The Printerface Project - Released under terms of the AGPLv3 License"

import logging

from printerface.exceptions import ProtocolError
from printerface.job import parse_job_info, parse_job_progress

# socket message types carrying the job state
JOB_MESSAGE_TYPES = ("current", "history")


def decode_push_message(payload, info=True, progress=True):
    """
    Decodes the job info and progress contained in a ``current`` or ``history``
    socket message.

    Members that are missing from ``payload`` or were not asked for decode to
    ``None``.

    Raises:
        ProtocolError: ``payload`` is not a dict or a contained member is malformed
    """
    if not isinstance(payload, dict):
        raise ProtocolError(
            "Expected a JSON object in push message, got {}".format(
                type(payload).__name__
            )
        )

    job_info = None
    if info and payload.get("job") is not None:
        job_info = parse_job_info(payload)

    job_progress = None
    if progress and payload.get("progress") is not None:
        job_progress = parse_job_progress(payload)

    return job_info, job_progress


class JobPushRelay:
    """
    Relays job state arriving over the server socket to a
    :class:`~printerface.tracker.JobTracker`.

    Use :meth:`on_message` as the socket's message callback or let
    :meth:`connect` set up the socket.
    """

    def __init__(self, tracker):
        self._tracker = tracker
        self._logger = logging.getLogger(__name__)

    def on_message(self, ws, message_type, payload):
        if message_type not in JOB_MESSAGE_TYPES:
            return

        # each channel is decoded on its own
        if self._tracker.job_info_listens():
            job_info = self._decode(
                message_type, payload, "job", info=True, progress=False
            )
            if job_info is not None:
                self._tracker.dispatch_job_info(job_info)

        if self._tracker.progress_listens():
            job_progress = self._decode(
                message_type, payload, "progress", info=False, progress=True
            )
            if job_progress is not None:
                self._tracker.dispatch_progress(job_progress)

    def _decode(self, message_type, payload, member, info, progress):
        try:
            job_info, job_progress = decode_push_message(
                payload, info=info, progress=progress
            )
        except ProtocolError as e:
            self._logger.warning(
                f"Dropping malformed {member} of {message_type} message: {e}"
            )
            return None
        return job_info if info else job_progress

    def connect(self, connection, **kwargs):
        """
        Opens the server socket on ``connection`` and relays its messages.

        Additional keyword arguments are passed on as socket callbacks.

        Returns:
            SocketClient - the connected socket
        """
        kwargs["on_message"] = self.on_message
        return connection.create_socket(**kwargs)
