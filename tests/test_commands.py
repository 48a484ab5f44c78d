__license__ = "GNU Affero General Public License http://www.gnu.org/licenses/agpl.html"
__copyright__ = "Copyright (C) 2024 The Printerface Project - Released under terms of the AGPLv3 License"

from unittest import mock

import pytest

from printerface.commands import (
    CONFLICT_MESSAGE,
    FAULT_MESSAGE,
    CommandDispatcher,
    CommandOutcome,
    CommandResult,
    build_payload,
)
from printerface.exceptions import TransportError


@pytest.fixture
def connection():
    connection = mock.Mock()
    connection.post_json.return_value = ""
    return connection


@pytest.mark.parametrize(
    "command, action, expected",
    (
        ("start", None, {"command": "start"}),
        ("start", "", {"command": "start"}),
        ("pause", "toggle", {"command": "pause", "action": "toggle"}),
    ),
)
def test_build_payload(command, action, expected):
    assert build_payload(command, action) == expected


def test_dispatch_posts_to_job_resource(connection):
    dispatcher = CommandDispatcher(connection)

    dispatcher.dispatch("pause", "resume")

    connection.post_json.assert_called_once_with(
        "api/job", {"command": "pause", "action": "resume"}
    )


@pytest.mark.parametrize("body", ("", None, '{"ok": true}'))
def test_dispatch_success(connection, body):
    connection.post_json.return_value = body
    dispatcher = CommandDispatcher(connection)

    result = dispatcher.dispatch("start")

    assert result.outcome == CommandOutcome.SUCCESS
    assert result.successful
    assert result.body == (body or "")
    assert result.render() == (body or "")


def test_dispatch_conflict(connection):
    connection.post_json.side_effect = TransportError("conflict", status_code=409)
    dispatcher = CommandDispatcher(connection)

    result = dispatcher.dispatch("pause", "pause")

    assert result == CommandResult(CommandOutcome.CONFLICT, status_code=409)
    assert not result.successful
    assert result.render() == CONFLICT_MESSAGE


@pytest.mark.parametrize("status_code", (400, 403, 500, None))
def test_dispatch_fault(connection, status_code):
    connection.post_json.side_effect = TransportError("nope", status_code=status_code)
    dispatcher = CommandDispatcher(connection)

    result = dispatcher.dispatch("cancel")

    assert result.outcome == CommandOutcome.FAULT
    assert result.status_code == status_code
    assert result.render() == FAULT_MESSAGE


def test_rendered_messages():
    assert (
        CONFLICT_MESSAGE
        == "409 Current jobstate is incompatible with this type of interaction"
    )
    assert FAULT_MESSAGE == "unknown webexception occured"
