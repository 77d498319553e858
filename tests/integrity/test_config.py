#!/usr/bin/env python3
"""Test suite for SBASConfig"""

import json
import os
import tempfile
import unittest
import yaml
from pysbas.config import SBASConfig
from pysbas.core.errors import ConfigurationError
from pysbas.integrity import variance


class TestValidation(unittest.TestCase):

    def test_defaults_valid(self):
        config = SBASConfig().validate()
        self.assertEqual(config.iono_shell_height_m, 350e3)
        self.assertEqual(config.receiver_class, "AAD-A")
        self.assertEqual(config.elevation_mask_deg, 5.0)
        self.assertTrue(config.variance_models().is_builtin('flt'))

    def test_invalid_settings(self):
        bad = [
            dict(receiver_class="AAD-C"),
            dict(iono_shell_height_m=0.0),
            dict(elevation_mask_deg=90.0),
            dict(k_v=-1.0),
            dict(k_h=0.0),
            dict(min_satellites=3),
            dict(min_satellites=4.5),
            dict(overrides={'iono': 'x'}),
            dict(overrides={'tropo': 'not_a_model'}),
            dict(logging={'default_level': 'LOUD'}),
        ]
        for kwargs in bad:
            with self.subTest(**{k: str(v) for k, v in kwargs.items()}):
                with self.assertRaises(ConfigurationError):
                    SBASConfig(**kwargs).validate()

    def test_fallback_permitted(self):
        config = SBASConfig(overrides={'tropo': 'not_a_model'}, allow_override_fallback=True)
        with self.assertLogs('pysbas.integrity.overrides', level='WARNING'):
            config.validate()
        self.assertIs(config.variance_models().tropo, variance.tropo_variance)

    def test_fallback_does_not_hide_unknown_terms(self):
        config = SBASConfig(overrides={'iono': 'x'}, allow_override_fallback=True)
        with self.assertRaises(ConfigurationError):
            config.validate()

    def test_from_dict_rejects_unknown_keys(self):
        with self.assertRaises(ConfigurationError):
            SBASConfig.from_dict({'shell_height': 400e3})
        config = SBASConfig.from_dict({'k_v': 6.0})
        self.assertEqual(config.k_v, 6.0)

    def test_empty_sections_and_wrong_types(self):
        config = SBASConfig.from_dict({'overrides': None}).validate()
        self.assertEqual(config.overrides, {})
        for bad in ({'k_v': 'high'}, {'k_h': None}, {'min_satellites': True},
                    {'iono_shell_height_m': '350e3'}, {'overrides': ['tropo']},
                    {'logging': 'DEBUG'}):
            with self.assertRaises(ConfigurationError, msg=str(bad)):
                SBASConfig.from_dict(bad).validate()

    def test_empty_yaml_overrides_key(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, 'sbas.yaml')
            with open(path, 'w') as f:
                f.write('k_v: 6.0\noverrides:\n')
            self.assertEqual(SBASConfig.load(path).overrides, {})


class TestFiles(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

    def path(self, name):
        return os.path.join(self.tmpdir.name, name)

    def test_load_yaml(self):
        data = {'receiver_class': 'AAD-B', 'elevation_mask_deg': 7.5,
                'overrides': {'tropo': 'pysbas.integrity.variance:tropo_variance'},
                'logging': {'default_level': 'DEBUG'}}
        with open(self.path('sbas.yaml'), 'w') as f:
            yaml.safe_dump(data, f)
        config = SBASConfig.load(self.path('sbas.yaml'))
        self.assertEqual(config.receiver_class, 'AAD-B')
        self.assertEqual(config.elevation_mask_deg, 7.5)
        self.assertIs(config.variance_models().tropo, variance.tropo_variance)

    def test_load_json(self):
        with open(self.path('sbas.json'), 'w') as f:
            json.dump({'k_v': 6.0, 'dual_frequency': True}, f)
        config = SBASConfig.load(self.path('sbas.json'))
        self.assertEqual(config.k_v, 6.0)
        self.assertTrue(config.dual_frequency)

    def test_load_validates(self):
        with open(self.path('bad.yaml'), 'w') as f:
            yaml.safe_dump({'receiver_class': 'none'}, f)
        with self.assertRaises(ConfigurationError):
            SBASConfig.load(self.path('bad.yaml'))
        config = SBASConfig.load(self.path('bad.yaml'), validate=False)
        self.assertEqual(config.receiver_class, 'none')

    def test_empty_file_gives_defaults(self):
        open(self.path('empty.yml'), 'w').close()
        self.assertEqual(SBASConfig.load(self.path('empty.yml')), SBASConfig())

    def test_unsupported_format(self):
        with self.assertRaises(ConfigurationError):
            SBASConfig.load(self.path('sbas.toml'))

    def test_save_round_trip(self):
        config = SBASConfig(k_h=6.18, overrides={'cnmp': variance.cnmp_variance})
        for name in ('out.yaml', 'out.json'):
            config.save(self.path(name))
            loaded = SBASConfig.load(self.path(name))
            self.assertEqual(loaded.k_h, 6.18)
            self.assertEqual(loaded.overrides['cnmp'], 'pysbas.integrity.variance:cnmp_variance')
            self.assertIs(loaded.variance_models().cnmp, variance.cnmp_variance)


if __name__ == '__main__':
    unittest.main()
