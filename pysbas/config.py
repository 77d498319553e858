# Copyright 2024 inuex35
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""User configuration for the integrity pipeline"""

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from numbers import Real
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .core.constants import ELEVATION_MASK, HION, K_H_PA, K_V_PA, MIN_SATS, SIGMA_NOISE_AAD
from .core.errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class SBASConfig:
    """
    SBAS user configuration

    Attributes
    ----------
    iono_shell_height_m : float
        Thin-shell ionosphere height (m)
    receiver_class : str
        Airborne accuracy designator, ``"AAD-A"`` or ``"AAD-B"``
    dual_frequency : bool
        L1/L5 iono-free user; the grid ionosphere term is not used
    elevation_mask_deg : float
        Satellites below the mask are left out of the protection levels
    k_v, k_h : float
        Vertical and horizontal protection level multipliers
    min_satellites : int
        Minimum usable satellites for a position solution
    overrides : dict
        Variance term (``tropo``, ``cnmp``, ``udre``, ``flt``) -> callable,
        registered model name or ``"module:function"``
    allow_override_fallback : bool
        Log and use the built-in model when an override cannot be resolved
    logging : dict, optional
        Section passed to :func:`pysbas.logger.setup_logger_from_config`
    """
    iono_shell_height_m: float = HION
    receiver_class: str = "AAD-A"
    dual_frequency: bool = False
    elevation_mask_deg: float = ELEVATION_MASK
    k_v: float = K_V_PA
    k_h: float = K_H_PA
    min_satellites: int = MIN_SATS
    overrides: Dict[str, Any] = field(default_factory=dict)
    allow_override_fallback: bool = False
    logging: Optional[Dict[str, Any]] = None

    def validate(self) -> 'SBASConfig':
        """
        Check every setting and resolve the variance overrides

        Returns
        -------
        SBASConfig
            self, for chaining

        Raises
        ------
        ConfigurationError
            The first invalid setting found
        """
        for name in ('iono_shell_height_m', 'elevation_mask_deg', 'k_v', 'k_h', 'min_satellites'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Real):
                raise ConfigurationError(f"{name} must be a number, got {value!r}")
        if not isinstance(self.overrides, dict):
            raise ConfigurationError(f"overrides must be a mapping, got {type(self.overrides).__name__}")
        if self.logging is not None and not isinstance(self.logging, dict):
            raise ConfigurationError(f"logging must be a mapping, got {type(self.logging).__name__}")
        if not self.iono_shell_height_m > 0:
            raise ConfigurationError(f"iono_shell_height_m must be positive, got {self.iono_shell_height_m}")
        if self.receiver_class not in SIGMA_NOISE_AAD:
            raise ConfigurationError(
                f"receiver_class must be one of {sorted(SIGMA_NOISE_AAD)}, got {self.receiver_class!r}")
        if not -90.0 <= self.elevation_mask_deg < 90.0:
            raise ConfigurationError(f"elevation_mask_deg outside [-90, 90): {self.elevation_mask_deg}")
        if not (self.k_v > 0 and self.k_h > 0):
            raise ConfigurationError(f"Protection level multipliers must be positive: k_v={self.k_v}, k_h={self.k_h}")
        if int(self.min_satellites) != self.min_satellites or self.min_satellites < MIN_SATS:
            raise ConfigurationError(f"min_satellites must be an integer >= {MIN_SATS}, got {self.min_satellites}")
        from .integrity.overrides import VARIANCE_TERMS, VarianceModels
        unknown = set(self.overrides) - set(VARIANCE_TERMS)
        if unknown:
            raise ConfigurationError(
                f"Unknown override terms {sorted(unknown)}; expected {sorted(VARIANCE_TERMS)}")
        if self.logging:
            self._check_logging(self.logging)
        self._models = VarianceModels.from_overrides(self.overrides, self.allow_override_fallback)
        return self

    @staticmethod
    def _check_logging(section: Dict[str, Any]):
        from .logger import level_value
        levels = [section.get("default_level", "INFO"), *section.get("module_levels", {}).values()]
        for level in levels:
            try:
                level_value(level)
            except ValueError as e:
                raise ConfigurationError(f"Invalid logging section: {e}") from None

    def variance_models(self) -> "VarianceModels":
        """Resolved variance functions; validates on first use"""
        models = getattr(self, '_models', None)
        if models is None:
            self.validate()
            models = self._models
        return models

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SBASConfig':
        """Build a configuration from a plain mapping; unknown keys are an error"""
        data = dict(data or {})
        if data.get('overrides', {}) is None:
            data['overrides'] = {}
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {sorted(unknown)}")
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['overrides'] = {
            term: ref if isinstance(ref, str) else f"{ref.__module__}:{ref.__qualname__}"
            for term, ref in self.overrides.items()
        }
        return data

    @classmethod
    def load(cls, filepath: Union[str, Path], validate: bool = True) -> 'SBASConfig':
        """
        Load a configuration file

        Parameters
        ----------
        filepath : str or Path
            ``.yaml``/``.yml`` or ``.json`` file
        validate : bool
            Run :meth:`validate` before returning

        Returns
        -------
        SBASConfig
        """
        filepath = Path(filepath)
        if filepath.suffix in ['.yaml', '.yml']:
            with open(filepath) as f:
                data = yaml.safe_load(f)
        elif filepath.suffix == '.json':
            with open(filepath) as f:
                data = json.load(f)
        else:
            raise ConfigurationError(f"Unsupported configuration format: {filepath.suffix}")

        config = cls.from_dict(data or {})
        logger.debug(f"Loaded configuration from {filepath}")
        return config.validate() if validate else config

    def save(self, filepath: Union[str, Path]) -> None:
        filepath = Path(filepath)
        if filepath.suffix in ['.yaml', '.yml']:
            with open(filepath, 'w') as f:
                yaml.safe_dump(self.to_dict(), f, default_flow_style=False)
        elif filepath.suffix == '.json':
            with open(filepath, 'w') as f:
                json.dump(self.to_dict(), f, indent=2)
        else:
            raise ConfigurationError(f"Unsupported configuration format: {filepath.suffix}")

    def setup_logging(self):
        """Apply the ``logging`` section, if any"""
        if self.logging:
            from .logger import setup_logger_from_config
            setup_logger_from_config(self.logging)
