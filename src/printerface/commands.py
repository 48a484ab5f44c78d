__license__ = "GNU Affero General Public License http://www.gnu.org/licenses/agpl.html"
__copyright__ = "Copyright (C) 2024 The Printerface Project - Released under terms of the AGPLv3 License"

import enum
import logging
from typing import NamedTuple, Optional

from printerface.exceptions import TransportError

JOB_PATH = "api/job"

CONFLICT_MESSAGE = "409 Current jobstate is incompatible with this type of interaction"
FAULT_MESSAGE = "unknown webexception occured"


class JobCommands:
    START = "start"
    CANCEL = "cancel"
    RESTART = "restart"
    PAUSE = "pause"


class PauseActions:
    PAUSE = "pause"
    RESUME = "resume"
    TOGGLE = "toggle"


class CommandOutcome(enum.Enum):
    SUCCESS = "success"
    CONFLICT = "conflict"
    FAULT = "fault"


class CommandResult(NamedTuple):
    outcome: CommandOutcome
    body: str = ""
    status_code: Optional[int] = None

    @property
    def successful(self) -> bool:
        return self.outcome == CommandOutcome.SUCCESS

    def render(self) -> str:
        """Renders the result as the string reported to callers of the job commands."""
        if self.outcome == CommandOutcome.SUCCESS:
            return self.body
        elif self.outcome == CommandOutcome.CONFLICT:
            return CONFLICT_MESSAGE
        else:
            return FAULT_MESSAGE


def build_payload(command: str, action: Optional[str] = None) -> dict:
    data = {"command": command}
    if action:
        data["action"] = action
    return data


class CommandDispatcher:
    """
    Posts job commands and classifies the server's answer.

    Failures are never raised, they are reported through the returned
    :class:`CommandResult`.
    """

    def __init__(self, connection, path=JOB_PATH):
        self._connection = connection
        self._path = path
        self._logger = logging.getLogger(__name__)

    def dispatch(self, command: str, action: Optional[str] = None) -> CommandResult:
        payload = build_payload(command, action)

        try:
            body = self._connection.post_json(self._path, payload)
        except TransportError as e:
            if e.status_code == 409:
                self._logger.warning(
                    f"Server refused {payload!r}, current job state is incompatible"
                )
                return CommandResult(CommandOutcome.CONFLICT, status_code=e.status_code)

            self._logger.warning(f"Sending {payload!r} failed: {e}")
            return CommandResult(CommandOutcome.FAULT, status_code=e.status_code)

        self._logger.debug(f"Sent {payload!r}")
        return CommandResult(CommandOutcome.SUCCESS, body=body if body else "")
