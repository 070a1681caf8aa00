import unittest

from common.config import Settings


class TestSettings(unittest.TestCase):

    def test_defaults_without_environment(self):
        settings = Settings.from_env("order-service", environ={})

        self.assertEqual(settings.service_name, "order-service")
        self.assertEqual(settings.storage_backend, "redis")
        self.assertEqual(settings.redis_port, 6379)
        self.assertIsNone(settings.redis_sentinel_hosts)
        self.assertTrue(settings.compensate_reservation)
        self.assertFalse(settings.otel_enabled)

    def test_environment_strings_are_converted(self):
        settings = Settings.from_env("order-service", environ={
            "REDIS_PORT": "6380",
            "REDIS_DB": "2",
            "HTTP_TIMEOUT": "1.5",
            "COMPENSATE_RESERVATION": "false",
            "OTEL_ENABLED": "true",
            "STORAGE_BACKEND": "memory",
            "UNRELATED": "ignored",
        })

        self.assertEqual(settings.redis_port, 6380)
        self.assertEqual(settings.redis_db, 2)
        self.assertEqual(settings.http_timeout, 1.5)
        self.assertFalse(settings.compensate_reservation)
        self.assertTrue(settings.otel_enabled)
        self.assertEqual(settings.storage_backend, "memory")

    def test_service_name_is_not_taken_from_environment(self):
        settings = Settings.from_env("product-service", environ={"SERVICE_NAME": "other"})

        self.assertEqual(settings.service_name, "product-service")


if __name__ == '__main__':
    unittest.main()
