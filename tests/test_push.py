__license__ = "GNU Affero General Public License http://www.gnu.org/licenses/agpl.html"
__copyright__ = "Copyright (C) 2024 The Printerface Project - Released under terms of the AGPLv3 License"

import unittest
from unittest import mock

from ddt import data, ddt

from printerface.exceptions import ProtocolError
from printerface.job import JobInfo, JobProgress
from printerface.push import JobPushRelay, decode_push_message
from printerface.tracker import JobTracker

CURRENT = {
    "state": {"text": "Printing"},
    "job": {
        "estimatedPrintTime": 8811.64,
        "file": {"name": "whistle.gcode", "origin": "local", "size": 1468987},
    },
    "progress": {"completion": 0.2, "filepos": 337942, "printTime": 276},
}


@ddt
class DecodePushMessageTest(unittest.TestCase):
    def test_decode(self):
        info, progress = decode_push_message(CURRENT)

        self.assertEqual(8811, info.estimated_print_time)
        self.assertEqual("whistle.gcode", info.file.name)
        self.assertEqual(-1, info.file.date)
        self.assertEqual(337942, progress.filepos)
        self.assertEqual(-1, progress.print_time_left)

    def test_missing_members(self):
        self.assertEqual((None, None), decode_push_message({"state": {}}))

    def test_skips_unwanted_members(self):
        info, progress = decode_push_message(CURRENT, info=False)

        self.assertIsNone(info)
        self.assertIsNotNone(progress)

    @data(None, [], "current", {"job": "nope"}, {"progress": {"filepos": "x"}})
    def test_malformed(self, payload):
        with self.assertRaises(ProtocolError):
            decode_push_message(payload)


class JobPushRelayTest(unittest.TestCase):
    def setUp(self):
        self.tracker = JobTracker(mock.Mock())
        self.relay = JobPushRelay(self.tracker)

    def test_dispatches_to_subscribers(self):
        on_info = mock.Mock()
        on_progress = mock.Mock()
        self.tracker.subscribe_job_info(on_info)
        self.tracker.subscribe_progress(on_progress)

        self.relay.on_message(None, "current", CURRENT)

        self.assertEqual(1, on_info.call_count)
        self.assertIsInstance(on_info.call_args[0][0], JobInfo)
        self.assertEqual(1, on_progress.call_count)
        self.assertIsInstance(on_progress.call_args[0][0], JobProgress)

    def test_history_messages_are_relayed(self):
        on_progress = mock.Mock()
        self.tracker.subscribe_progress(on_progress)

        self.relay.on_message(None, "history", CURRENT)

        self.assertEqual(1, on_progress.call_count)

    def test_other_messages_are_ignored(self):
        on_info = mock.Mock()
        self.tracker.subscribe_job_info(on_info)

        self.relay.on_message(None, "event", {"type": "PrintStarted"})
        self.relay.on_message(None, "connected", {"version": "1.10.0"})

        on_info.assert_not_called()

    def test_no_decoding_without_subscribers(self):
        with mock.patch("printerface.push.decode_push_message") as decode:
            self.relay.on_message(None, "current", CURRENT)

        decode.assert_not_called()

    def test_only_listened_channels_are_decoded(self):
        on_progress = mock.Mock()
        self.tracker.subscribe_progress(on_progress)

        # broken job member is not even looked at
        self.relay.on_message(
            None, "current", {"job": "broken", "progress": {"filepos": 1}}
        )

        on_progress.assert_called_once_with(JobProgress(filepos=1))

    def test_malformed_message_is_dropped(self):
        on_info = mock.Mock()
        self.tracker.subscribe_job_info(on_info)

        self.relay.on_message(None, "current", {"job": {"file": 5}})

        on_info.assert_not_called()

    def test_malformed_job_does_not_drop_progress(self):
        on_info = mock.Mock()
        on_progress = mock.Mock()
        self.tracker.subscribe_job_info(on_info)
        self.tracker.subscribe_progress(on_progress)

        self.relay.on_message(
            None, "current", {"job": {"file": 5}, "progress": {"filepos": 7}}
        )

        on_info.assert_not_called()
        on_progress.assert_called_once_with(JobProgress(filepos=7))

    def test_malformed_progress_does_not_drop_job(self):
        on_info = mock.Mock()
        on_progress = mock.Mock()
        self.tracker.subscribe_job_info(on_info)
        self.tracker.subscribe_progress(on_progress)

        self.relay.on_message(
            None,
            "current",
            {"job": {"estimatedPrintTime": 60}, "progress": {"filepos": "x"}},
        )

        on_info.assert_called_once_with(JobInfo(estimated_print_time=60))
        on_progress.assert_not_called()

    def test_connect(self):
        connection = mock.Mock()
        on_open = mock.Mock()

        socket = self.relay.connect(connection, on_open=on_open)

        connection.create_socket.assert_called_once_with(
            on_open=on_open, on_message=self.relay.on_message
        )
        self.assertEqual(connection.create_socket.return_value, socket)
