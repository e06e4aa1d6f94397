"""
Tests for retry, logging and PII helpers.
"""
import json
import logging
import sys

from django.db import OperationalError
from django.test import SimpleTestCase

from shop.infra.pii_masker import mask_email, mask_name, mask_pii_in_dict, mask_uuid
from shop.infra.retry import retry_with_backoff
from shop.utils.logging import JsonFormatter


class RetryWithBackoffTest(SimpleTestCase):

    def test_retries_until_success(self):
        calls = []

        @retry_with_backoff(max_retries=3, initial_delay=0, jitter=False, exceptions=(OperationalError,))
        def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise OperationalError("database is locked")
            return "done"

        with self.assertLogs("shop.infra.retry", level="WARNING") as logs:
            self.assertEqual(flaky(), "done")
        self.assertEqual(len(calls), 3)
        self.assertEqual(len(logs.records), 2)
        self.assertEqual(logs.records[0].attempt, 1)

    def test_gives_up_after_max_retries(self):
        calls = []

        @retry_with_backoff(max_retries=2, initial_delay=0, jitter=False, exceptions=(OperationalError,))
        def always_locked():
            calls.append(1)
            raise OperationalError("database is locked")

        with self.assertLogs("shop.infra.retry", level="WARNING"):
            with self.assertRaises(OperationalError):
                always_locked()
        self.assertEqual(len(calls), 3)

    def test_other_errors_are_not_retried(self):
        calls = []

        @retry_with_backoff(max_retries=5, initial_delay=0, exceptions=(OperationalError,))
        def broken():
            calls.append(1)
            raise KeyError("missing")

        with self.assertRaises(KeyError):
            broken()
        self.assertEqual(len(calls), 1)


class JsonFormatterTest(SimpleTestCase):

    def make_record(self, **extra):
        record = logging.LogRecord(
            name="shop.services.orders",
            level=logging.INFO,
            pathname=__file__,
            lineno=10,
            msg="order_created",
            args=(),
            exc_info=None,
        )
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_formats_record_as_json(self):
        line = JsonFormatter().format(self.make_record(order_id="abc", items_count=2, unrelated="x"))
        data = json.loads(line)

        self.assertEqual(data["message"], "order_created")
        self.assertEqual(data["level"], "INFO")
        self.assertEqual(data["logger"], "shop.services.orders")
        self.assertEqual(data["order_id"], "abc")
        self.assertEqual(data["items_count"], 2)
        self.assertNotIn("unrelated", data)
        self.assertTrue(data["timestamp"].endswith("Z"))

    def test_includes_exception(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = self.make_record()
            record.exc_info = sys.exc_info()

        data = json.loads(JsonFormatter().format(record))
        self.assertIn("RuntimeError: boom", data["exception"])


class PIIMaskerTest(SimpleTestCase):

    def test_mask_email(self):
        self.assertEqual(mask_email("alice@example.com"), "al***@example.com")
        self.assertEqual(mask_email("al@example.com"), "**@example.com")

    def test_mask_name(self):
        self.assertEqual(mask_name("Alice"), "A***e")
        self.assertEqual(mask_name("Al"), "**")

    def test_mask_uuid(self):
        self.assertEqual(
            mask_uuid("12345678-1234-1234-1234-123456789abc"),
            "12345678-****-****-****-************",
        )

    def test_mask_pii_in_dict(self):
        masked = mask_pii_in_dict({
            "user_id": "12345678-1234-1234-1234-123456789abc",
            "email": "alice@example.com",
            "password": "hunter2",
            "request_id": "req-1",
            "customer": {"first_name": "Alice"},
        })

        self.assertEqual(masked["user_id"], "12345678-****-****-****-************")
        self.assertEqual(masked["email"], "al***@example.com")
        self.assertEqual(masked["password"], "********")
        self.assertEqual(masked["request_id"], "req-1")
        self.assertEqual(masked["customer"]["first_name"], "A***e")

    def test_non_string_values_are_kept(self):
        self.assertEqual(mask_pii_in_dict({"user_id": None}), {"user_id": None})
