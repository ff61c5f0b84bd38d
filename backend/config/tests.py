import importlib
import os
from unittest import mock

from django.test import SimpleTestCase

from config import settings as project_settings


class EnvironmentSettingsTests(SimpleTestCase):
    def reload_with(self, **env):
        with mock.patch.dict(os.environ, env, clear=True):
            return importlib.reload(project_settings)

    def tearDown(self):
        importlib.reload(project_settings)

    def test_debug_is_off_unless_asked_for(self):
        self.assertFalse(self.reload_with().DEBUG)
        self.assertTrue(self.reload_with(DJANGO_DEBUG="true").DEBUG)
        self.assertFalse(self.reload_with(DJANGO_DEBUG="0").DEBUG)

    def test_secret_key_and_hosts_come_from_environment(self):
        module = self.reload_with(
            DJANGO_SECRET_KEY="from-env", DJANGO_ALLOWED_HOSTS="api.example.com, ,x"
        )

        self.assertEqual(module.SECRET_KEY, "from-env")
        self.assertEqual(module.ALLOWED_HOSTS, ["api.example.com", "x"])
