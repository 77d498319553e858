#!/usr/bin/env python3
"""Test suite for replaceable variance models"""

import unittest
import numpy as np
from pysbas.core.errors import ConfigurationError
from pysbas.integrity import variance
from pysbas.integrity.overrides import (
    VarianceModels, register_variance_model, unregister_variance_model,
    registered_models, resolve_model, check_signature
)


class TestRegistry(unittest.TestCase):

    def tearDown(self):
        unregister_variance_model('tropo', 'flat')

    def test_register_and_resolve(self):
        @register_variance_model('tropo', 'flat')
        def flat(obs):
            return np.zeros(obs.geometry.n_sats)

        self.assertIn(('tropo', 'flat'), registered_models('tropo'))
        self.assertIs(resolve_model('tropo', 'flat'), flat)

    def test_duplicate_name_rejected(self):
        register_variance_model('tropo', 'flat')(lambda obs: 0.0)
        with self.assertRaises(ConfigurationError):
            register_variance_model('tropo', 'flat')(lambda obs: 1.0)

    def test_wrong_signature_rejected(self):
        with self.assertRaises(ConfigurationError):
            register_variance_model('tropo', 'flat')(lambda obs, udrei, extra: 0.0)

    def test_unknown_term(self):
        with self.assertRaises(ConfigurationError):
            register_variance_model('iono', 'flat')


class TestResolution(unittest.TestCase):

    def test_module_reference(self):
        func = resolve_model('tropo', 'pysbas.integrity.variance:tropo_variance')
        self.assertIs(func, variance.tropo_variance)

    def test_unresolvable_references(self):
        with self.assertRaises(ConfigurationError):
            resolve_model('tropo', 'not_registered')
        with self.assertRaises(ConfigurationError):
            resolve_model('tropo', 'no_such_module_xyz:func')
        with self.assertRaises(ConfigurationError):
            resolve_model('tropo', 'pysbas.integrity.variance:missing')
        with self.assertRaises(ConfigurationError):
            resolve_model('tropo', 42)

    def test_signature_mismatch(self):
        # udre takes (obs, udrei)
        with self.assertRaises(ConfigurationError):
            resolve_model('udre', 'pysbas.integrity.variance:tropo_variance')
        check_signature('flt', variance.flt_variance)
        check_signature('tropo', lambda *args: None)


class TestVarianceModels(unittest.TestCase):

    def test_defaults_are_builtin(self):
        models = VarianceModels.from_overrides()
        for term in ('tropo', 'cnmp', 'udre', 'flt'):
            self.assertTrue(models.is_builtin(term))

    def test_override_replaces_one_term(self):
        custom = lambda obs: 0.0
        models = VarianceModels.from_overrides({'cnmp': custom, 'tropo': None})
        self.assertIs(models.cnmp, custom)
        self.assertTrue(models.is_builtin('tropo'))

    def test_invalid_reference_raises(self):
        with self.assertRaises(ConfigurationError):
            VarianceModels.from_overrides({'tropo': 'nope'})

    def test_fallback_logs_and_uses_builtin(self):
        with self.assertLogs('pysbas.integrity.overrides', level='WARNING'):
            models = VarianceModels.from_overrides({'tropo': 'nope'}, allow_fallback=True)
        self.assertIs(models.tropo, variance.tropo_variance)


if __name__ == '__main__':
    unittest.main()
