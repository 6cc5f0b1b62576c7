"""Tests for configuration management."""

import json
import os
import shutil
import tempfile
import unittest

import yaml

from statement_parser.utils.config_manager import ConfigManager, get_default_config_manager
from statement_parser.models.core import ParserConfig


class TestConfigManager(unittest.TestCase):
    """Test cases for ConfigManager"""

    def setUp(self):
        """Set up test fixtures"""
        self.temp_dir = tempfile.mkdtemp()
        self.config_file = os.path.join(self.temp_dir, 'test_config.json')

    def tearDown(self):
        """Clean up test fixtures"""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def write_config(self, data, path=None):
        path = path or self.config_file
        with open(path, 'w') as f:
            if path.endswith('.json'):
                json.dump(data, f)
            else:
                yaml.safe_dump(data, f)
        return path

    def test_default_config_loading(self):
        """Test loading default configuration when no file exists"""
        manager = ConfigManager(config_path="nonexistent_file.json")
        config = manager.load_config()

        self.assertIsInstance(config, ParserConfig)
        self.assertEqual(config.root_marker, "<OFX>")
        self.assertEqual(config.encoding, "utf-8")
        self.assertTrue(config.auto_close)
        self.assertIsNone(config.max_depth)

    def test_config_file_loading(self):
        """Test loading configuration from JSON file"""
        self.write_config({
            "encoding": "cp1252",
            "auto_close": False,
            "max_depth": 64,
            "strict_mixed_content": True,
            "num_workers": 5,
            "supported_extensions": [".qfx"],
            "log_directory": "logs",
        })

        config = ConfigManager(config_path=self.config_file).load_config()

        self.assertEqual(config.encoding, "cp1252")
        self.assertFalse(config.auto_close)
        self.assertEqual(config.max_depth, 64)
        self.assertTrue(config.strict_mixed_content)
        self.assertEqual(config.num_workers, 5)
        self.assertEqual(config.supported_extensions, [".qfx"])
        self.assertEqual(config.log_directory, "logs")

    def test_yaml_config_loading(self):
        """Test loading configuration from YAML file"""
        path = self.write_config(
            {"root_marker": "<OFX>", "max_depth": None, "num_workers": 2},
            os.path.join(self.temp_dir, 'config.yml')
        )

        config = ConfigManager(config_path=path).load_config()

        self.assertIsNone(config.max_depth)
        self.assertEqual(config.num_workers, 2)

    def test_unknown_keys_ignored(self):
        """Test that unknown keys do not break loading"""
        self.write_config({"num_workers": 4, "raw_directory": "raw"})

        with self.assertLogs('statement_parser.utils.config_manager', level='WARNING') as logs:
            config = ConfigManager(config_path=self.config_file).load_config()

        self.assertEqual(config.num_workers, 4)
        self.assertTrue(any('raw_directory' in line for line in logs.output))

    def test_invalid_config_falls_back_to_defaults(self):
        """Test invalid configuration values produce a default configuration"""
        invalid_configs = [
            {"root_marker": "OFX"},
            {"root_marker": ""},
            {"encoding": "no-such-codec"},
            {"auto_close": "yes"},
            {"max_depth": 0},
            {"max_depth": True},
            {"num_workers": -1},
            {"supported_extensions": "qfx"},
            {"supported_extensions": ["qfx"]},
            {"log_directory": 5},
        ]

        for data in invalid_configs:
            with self.subTest(data=data):
                self.write_config(data)
                config = ConfigManager(config_path=self.config_file).load_config()
                self.assertEqual(config, ParserConfig())

    def test_validate_config_data_raises(self):
        """Test validation errors are raised directly by the validator"""
        manager = ConfigManager()
        with self.assertRaises(ValueError):
            manager._validate_config_data([])
        with self.assertRaises(ValueError):
            manager._validate_config_data({"num_workers": "3"})

    def test_malformed_json(self):
        """Test unparseable file falls back to defaults"""
        with open(self.config_file, 'w') as f:
            f.write('{"num_workers": ')

        config = ConfigManager(config_path=self.config_file).load_config()
        self.assertEqual(config.num_workers, 3)

    def test_malformed_yaml(self):
        """Test unparseable YAML falls back to defaults"""
        path = os.path.join(self.temp_dir, 'config.yaml')
        with open(path, 'w') as f:
            f.write('num_workers: [1, 2\n')

        config = ConfigManager(config_path=path).load_config()
        self.assertEqual(config.num_workers, 3)

    def test_unsupported_extension(self):
        """Test config files with unknown extensions are ignored"""
        path = os.path.join(self.temp_dir, 'config.ini')
        with open(path, 'w') as f:
            f.write('[parser]\n')

        config = ConfigManager(config_path=path).load_config()
        self.assertEqual(config, ParserConfig())

    def test_config_caching(self):
        """Test configuration is cached until force_reload"""
        self.write_config({"num_workers": 2})
        manager = ConfigManager(config_path=self.config_file)
        first = manager.load_config()

        self.write_config({"num_workers": 7})
        self.assertIs(manager.load_config(), first)
        self.assertEqual(manager.load_config(force_reload=True).num_workers, 7)

    def test_update_and_reset_config(self):
        """Test in-memory updates and cache reset"""
        self.write_config({"num_workers": 2})
        manager = ConfigManager(config_path=self.config_file)

        manager.update_config({"num_workers": 9, "not_a_key": 1})
        self.assertEqual(manager.load_config().num_workers, 9)
        self.assertFalse(hasattr(manager.load_config(), "not_a_key"))

        manager.reset_config()
        self.assertEqual(manager.load_config().num_workers, 2)

    def test_save_json_template(self):
        """Test JSON template generation loads back cleanly"""
        path = os.path.join(self.temp_dir, 'nested', 'template.json')
        manager = ConfigManager()
        manager.save_config_template(path)

        with open(path) as f:
            data = json.load(f)
        self.assertEqual(data["root_marker"], "<OFX>")
        self.assertIsNone(data["max_depth"])

        config = ConfigManager(config_path=path).load_config()
        self.assertEqual(config.log_directory, "logs")

    def test_save_yaml_template(self):
        """Test YAML template keeps key order and loads back cleanly"""
        path = os.path.join(self.temp_dir, 'template.yaml')
        ConfigManager().save_config_template(path)

        with open(path) as f:
            text = f.read()
        self.assertTrue(text.startswith('root_marker:'))

        config = ConfigManager(config_path=path).load_config()
        self.assertEqual(config.supported_extensions, [".qfx", ".ofx"])

    def test_search_paths(self):
        """Test default search finds a config in the working directory"""
        cwd = os.getcwd()
        os.chdir(self.temp_dir)
        try:
            self.write_config({"num_workers": 6}, 'statement_parser.json')
            self.assertEqual(get_default_config_manager().load_config().num_workers, 6)
        finally:
            os.chdir(cwd)


if __name__ == '__main__':
    unittest.main()
