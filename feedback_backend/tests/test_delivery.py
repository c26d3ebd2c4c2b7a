import os
import unittest
from unittest.mock import MagicMock, patch

import requests
from redis import exceptions as redis_exceptions

from feedback_backend.config import get_settings
from feedback_backend.delivery import (
    DeliveryError,
    FixedCodeProvider,
    InMemoryCodeProvider,
    InMemoryCodeRegistry,
    RedisCodeRegistry,
    WebhookCodeProvider,
    generate_code,
)
from feedback_backend.dependencies import get_code_provider, reset_backends
from feedback_flow.testing_utils import FakeClock
from feedback_shared.types import ChannelKind


class ProviderTests(unittest.TestCase):
    def test_generated_codes_are_six_digits(self):
        code = generate_code()
        self.assertEqual(len(code), 6)
        self.assertTrue(code.isdigit())

    def test_fixed_provider_issues_constant_code(self):
        provider = FixedCodeProvider(code="424242")

        handle = provider.send(ChannelKind.EMAIL, "ada@example.com")

        self.assertEqual(provider.issued_code(handle), "424242")
        self.assertIsNone(provider.issued_code("unknown"))

    def test_codes_expire(self):
        clock = FakeClock()
        provider = InMemoryCodeProvider(code_ttl_seconds=300, clock=clock)
        handle = provider.send(ChannelKind.PHONE, "+15551234567")

        clock.now += 299
        self.assertIsNotNone(provider.issued_code(handle))
        clock.now += 1
        self.assertIsNone(provider.issued_code(handle))

    def test_in_memory_outbox(self):
        provider = InMemoryCodeProvider()
        first = provider.send(ChannelKind.PHONE, "+15551234567")
        second = provider.send(ChannelKind.PHONE, "+15551234567")

        self.assertEqual(len(provider.outbox), 2)
        self.assertEqual(
            provider.last_code_for("+15551234567"), provider.issued_code(second)
        )
        # Earlier codes stay valid until they expire.
        self.assertIsNotNone(provider.issued_code(first))
        self.assertIsNone(provider.last_code_for("ada@example.com"))

    def test_expired_codes_are_dropped(self):
        provider = FixedCodeProvider(code_ttl_seconds=0.0)

        for _ in range(1000):
            provider.send(ChannelKind.PHONE, "+15551234567")

        self.assertLessEqual(len(provider.registry.entries), 1)

    def test_discarded_code_is_forgotten(self):
        provider = FixedCodeProvider(code="424242")
        handle = provider.send(ChannelKind.EMAIL, "ada@example.com")

        provider.discard(handle)
        provider.discard(handle)

        self.assertIsNone(provider.issued_code(handle))
        self.assertEqual(provider.registry.entries, {})

    def test_outbox_keeps_latest_deliveries(self):
        provider = InMemoryCodeProvider(outbox_limit=3)

        handles = [
            provider.send(ChannelKind.PHONE, f"+1555123456{i}") for i in range(5)
        ]

        self.assertEqual([d.handle for d in provider.outbox], handles[-3:])
        self.assertEqual(
            provider.last_code_for("+15551234564"), provider.outbox[-1].code
        )
        self.assertIsNone(provider.last_code_for("+15551234560"))

    def test_providers_share_a_registry(self):
        registry = InMemoryCodeRegistry()
        sender = InMemoryCodeProvider(registry=registry)
        checker = InMemoryCodeProvider(registry=registry)

        handle = sender.send(ChannelKind.PHONE, "+15551234567")

        self.assertEqual(checker.issued_code(handle), sender.outbox[-1].code)


class RedisCodeRegistryTests(unittest.TestCase):
    def setUp(self):
        patcher = patch("feedback_backend.delivery.redis.Redis.from_url")
        self.from_url = patcher.start()
        self.addCleanup(patcher.stop)
        self.client = MagicMock()
        self.from_url.return_value = self.client
        self.registry = RedisCodeRegistry(url="redis://cache:6379/0")

    def test_put_sets_key_with_expiry(self):
        self.registry.put("abc", "123456", 600)

        self.from_url.assert_called_once_with("redis://cache:6379/0")
        self.client.setex.assert_called_once_with("feedback:code:abc", 600, "123456")

    def test_short_ttl_rounds_up_to_one_second(self):
        self.registry.put("abc", "123456", 0.2)

        self.client.setex.assert_called_once_with("feedback:code:abc", 1, "123456")

    def test_get_decodes_stored_code(self):
        self.client.get.return_value = b"123456"

        self.assertEqual(self.registry.get("abc"), "123456")
        self.client.get.assert_called_once_with("feedback:code:abc")

    def test_missing_code_is_none(self):
        self.client.get.return_value = None

        self.assertIsNone(self.registry.get("abc"))

    def test_discard_deletes_key(self):
        self.registry.discard("abc")

        self.client.delete.assert_called_once_with("feedback:code:abc")

    def test_discard_tolerates_redis_errors(self):
        self.client.delete.side_effect = redis_exceptions.ConnectionError("down")

        with self.assertLogs("feedback_backend.delivery", level="WARNING"):
            self.registry.discard("abc")

    def test_provider_records_codes_in_redis(self):
        provider = FixedCodeProvider(code="424242", registry=self.registry)
        self.client.get.return_value = b"424242"

        handle = provider.send(ChannelKind.EMAIL, "ada@example.com")

        self.client.setex.assert_called_once_with(
            f"feedback:code:{handle}", 600, "424242"
        )
        self.assertEqual(provider.issued_code(handle), "424242")


class WebhookCodeProviderTests(unittest.TestCase):
    def setUp(self):
        patcher = patch("feedback_backend.delivery.requests.Session")
        session_cls = patcher.start()
        self.addCleanup(patcher.stop)
        self.http = MagicMock()
        session_cls.return_value = self.http
        self.provider = WebhookCodeProvider(
            url="https://gateway.example.test/codes", timeout_seconds=2.0
        )

    def test_posts_code_to_gateway(self):
        handle = self.provider.send(ChannelKind.PHONE, "+15551234567")

        args, kwargs = self.http.post.call_args
        self.assertEqual(args[0], "https://gateway.example.test/codes")
        self.assertEqual(kwargs["timeout"], 2.0)
        body = kwargs["json"]
        self.assertEqual(body["channel"], "phone")
        self.assertEqual(body["target"], "+15551234567")
        self.assertEqual(self.provider.issued_code(handle), body["code"])

    def test_gateway_error_raises_delivery_error(self):
        self.http.post.return_value.raise_for_status.side_effect = (
            requests.HTTPError("500 Server Error")
        )

        with self.assertRaises(DeliveryError):
            self.provider.send(ChannelKind.EMAIL, "ada@example.com")
        self.assertEqual(self.provider.registry.entries, {})

    def test_requires_url(self):
        with self.assertRaises(ValueError):
            WebhookCodeProvider(url="")


class CodeProviderWiringTests(unittest.TestCase):
    def setUp(self):
        reset_backends()
        get_settings.cache_clear()
        self.addCleanup(reset_backends)
        self.addCleanup(get_settings.cache_clear)

    def provider_with(self, env):
        patcher = patch.dict(os.environ, env)
        patcher.start()
        self.addCleanup(patcher.stop)
        return get_code_provider()

    def test_redis_url_shares_codes_through_redis(self):
        with patch("feedback_backend.delivery.redis.Redis.from_url") as from_url:
            provider = self.provider_with(
                {
                    "REDIS_URL": "redis://cache:6379/0",
                    "VERIFICATION_CODE_TTL_SECONDS": "300",
                }
            )

        self.assertIsInstance(provider.registry, RedisCodeRegistry)
        from_url.assert_called_once_with("redis://cache:6379/0")
        self.assertEqual(provider.code_ttl_seconds, 300)

    def test_without_redis_codes_stay_in_process(self):
        provider = self.provider_with({"CODE_DELIVERY_MODE": "memory"})

        self.assertIsInstance(provider, InMemoryCodeProvider)
        self.assertIsInstance(provider.registry, InMemoryCodeRegistry)


if __name__ == "__main__":
    unittest.main()
