from __future__ import annotations

import json
import logging
import unittest

from timekeeping.logging_utils import JsonFormatter


class JsonFormatterTests(unittest.TestCase):
    def test_extra_fields_are_emitted(self) -> None:
        record = logging.LogRecord(
            name="timekeeping.reconciler",
            level=logging.WARNING,
            pathname=__file__,
            lineno=1,
            msg="reconcile_anomaly",
            args=(),
            exc_info=None,
        )
        record.user_id = "user-1"
        record.flags = ["OPEN_CLOCK_IN"]

        payload = json.loads(JsonFormatter().format(record))

        self.assertEqual(payload["level"], "WARNING")
        self.assertEqual(payload["logger"], "timekeeping.reconciler")
        self.assertEqual(payload["message"], "reconcile_anomaly")
        self.assertEqual(payload["user_id"], "user-1")
        self.assertEqual(payload["flags"], ["OPEN_CLOCK_IN"])
        self.assertNotIn("lineno", payload)


if __name__ == "__main__":
    unittest.main()
