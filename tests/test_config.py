import json
import os
import stat
import tempfile
import unittest
from unittest.mock import patch

from dingus_aid.config import CredentialStore, Settings
from dingus_aid.errors import ConfigIOError, CredentialMissing


class TestSettings(unittest.TestCase):
    """Tests for building the Settings object."""

    @patch.dict(os.environ, {"DINGUS_AID_HOME": "/tmp/dingus-home", "DINGUS_AID_MODEL": ""})
    def test_config_dir_from_environment(self):
        settings = Settings.from_env()
        self.assertEqual(settings.config_dir, "/tmp/dingus-home")
        self.assertEqual(settings.config_file, os.path.join("/tmp/dingus-home", "config.json"))
        self.assertEqual(settings.history_file, os.path.join("/tmp/dingus-home", "history.json"))
        self.assertEqual(settings.model, "openai:gpt-4o-mini")

    @patch.dict(os.environ, {"DINGUS_AID_HOME": "", "DINGUS_AID_MODEL": "openai:gpt-4o"})
    @patch("os.path.expanduser", return_value="/home/someone")
    def test_defaults_to_home_directory(self, mock_expanduser):
        settings = Settings.from_env()
        self.assertEqual(settings.config_dir, os.path.join("/home/someone", ".dingus-aid"))
        self.assertEqual(settings.model, "openai:gpt-4o")

    @patch.dict(os.environ, {"DINGUS_AID_HOME": ""})
    @patch("os.path.expanduser", return_value="~")
    def test_missing_home_directory_is_fatal(self, mock_expanduser):
        with self.assertRaises(ConfigIOError):
            Settings.from_env()

    def test_provider_configs_use_model_prefix(self):
        settings = Settings(config_dir="/tmp/x", api_key="sk-test")
        self.assertEqual(settings.provider_configs, {"openai": {"api_key": "sk-test"}})

    def test_api_key_hidden_from_repr(self):
        settings = Settings(config_dir="/tmp/x", api_key="sk-secret")
        self.assertNotIn("sk-secret", repr(settings))


class TestCredentialStore(unittest.TestCase):
    """Tests for persisting the API key."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.settings = Settings(config_dir=os.path.join(self._tmp.name, ".dingus-aid"))
        self.store = CredentialStore(self.settings)

    def test_load_after_save_returns_key(self):
        self.store.save("abc123")
        self.assertEqual(self.store.load(), "abc123")

    def test_saved_file_layout_and_permissions(self):
        self.store.save("abc123")

        with open(self.settings.config_file, encoding="utf-8") as f:
            self.assertEqual(json.load(f), {"OPENAI_API_KEY": "abc123"})
        mode = stat.S_IMODE(os.stat(self.settings.config_file).st_mode)
        self.assertEqual(mode, 0o600)

    def test_load_without_file_is_not_found(self):
        self.assertIsNone(self.store.load())

    def test_load_after_erase_is_not_found(self):
        self.store.save("abc123")
        self.store.erase()

        self.assertFalse(os.path.exists(self.settings.config_dir))
        self.assertIsNone(self.store.load())

    def test_erase_is_idempotent(self):
        """Erasing a config directory that does not exist is not an error."""
        self.store.erase()
        self.store.erase()

    def test_malformed_file_is_not_found(self):
        os.makedirs(self.settings.config_dir)
        with open(self.settings.config_file, "w", encoding="utf-8") as f:
            f.write("{invalid json")

        self.assertIsNone(self.store.load())

    def test_missing_or_empty_field_is_not_found(self):
        os.makedirs(self.settings.config_dir)
        for document in ({"SOMETHING_ELSE": "x"}, {"OPENAI_API_KEY": ""}, ["abc123"]):
            with open(self.settings.config_file, "w", encoding="utf-8") as f:
                json.dump(document, f)
            self.assertIsNone(self.store.load(), document)

    def test_require_raises_when_missing(self):
        with self.assertRaises(CredentialMissing):
            self.store.require()

    def test_save_overwrites_whole_file(self):
        self.store.save("first")
        self.store.save("second")
        self.assertEqual(self.store.require(), "second")

    @patch("os.open", side_effect=PermissionError("denied"))
    def test_unwritable_config_raises(self, mock_open):
        with self.assertRaises(ConfigIOError):
            self.store.save("abc123")
