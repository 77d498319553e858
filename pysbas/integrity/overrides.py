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

"""
Replaceable variance models.

Each of the four variance terms can be swapped for a user function with
the same signature as the built-in::

    tropo(obs) / cnmp(obs)
    udre(obs, udrei) / flt(obs, degradations)

A replacement is named by a callable, by a name registered with
:func:`register_variance_model`, or by a ``"package.module:function"``
import reference. References are resolved and their signatures checked
once, when the configuration is validated.
"""

import importlib
import inspect
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Tuple, Union

from ..core.errors import ConfigurationError
from . import variance

logger = logging.getLogger(__name__)

# term -> number of positional arguments
VARIANCE_TERMS: Dict[str, int] = {'tropo': 1, 'cnmp': 1, 'udre': 2, 'flt': 2}

BUILTIN_MODELS: Dict[str, Callable] = {
    'tropo': variance.tropo_variance,
    'cnmp': variance.cnmp_variance,
    'udre': variance.udre_variance,
    'flt': variance.flt_variance,
}

ModelRef = Union[str, Callable]

_registry: Dict[Tuple[str, str], Callable] = {}


def _check_term(term: str):
    if term not in VARIANCE_TERMS:
        raise ConfigurationError(
            f"Unknown variance term {term!r}; expected one of {sorted(VARIANCE_TERMS)}")


def register_variance_model(term: str, name: str):
    """Returns a decorator that registers a function as a named model for ``term``.

    Example::

        @register_variance_model('tropo', 'flat')
        def flat_tropo(obs):
            return np.full(obs.geometry.n_sats, 0.01)
    """
    _check_term(term)

    def decorator(func: Callable) -> Callable:
        check_signature(term, func)
        key = (term, name)
        if key in _registry and _registry[key] is not func:
            raise ConfigurationError(f"{term} model {name!r} is already registered")
        _registry[key] = func
        return func

    return decorator


def unregister_variance_model(term: str, name: str):
    _registry.pop((term, name), None)


def registered_models(term: Optional[str] = None) -> List[Tuple[str, str]]:
    """(term, name) pairs currently registered"""
    return sorted(k for k in _registry if term is None or k[0] == term)


def check_signature(term: str, func: Callable):
    """Raise ConfigurationError unless ``func`` accepts the term's positional arguments"""
    _check_term(term)
    if not callable(func):
        raise ConfigurationError(f"{term} model {func!r} is not callable")
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        # builtins without introspectable signatures are accepted as-is
        return
    try:
        sig.bind(*([None] * VARIANCE_TERMS[term]))
    except TypeError as e:
        raise ConfigurationError(
            f"{term} model {getattr(func, '__name__', func)!r} has signature {sig}, "
            f"expected {VARIANCE_TERMS[term]} positional argument(s): {e}") from None


def resolve_model(term: str, ref: ModelRef) -> Callable:
    """
    Resolve a model reference to a checked callable

    Parameters
    ----------
    term : str
        ``'tropo'``, ``'cnmp'``, ``'udre'`` or ``'flt'``
    ref : str or callable
        Callable, registered name, or ``"module:function"``

    Returns
    -------
    Callable

    Raises
    ------
    ConfigurationError
        Unknown term, unresolvable reference, or wrong signature
    """
    _check_term(term)
    if callable(ref):
        func = ref
    elif isinstance(ref, str):
        if (term, ref) in _registry:
            func = _registry[(term, ref)]
        elif ':' in ref:
            module_name, _, attr = ref.partition(':')
            try:
                module = importlib.import_module(module_name)
            except ImportError as e:
                raise ConfigurationError(f"{term} model {ref!r}: cannot import {module_name!r}: {e}") from e
            try:
                func = getattr(module, attr)
            except AttributeError:
                raise ConfigurationError(f"{term} model {ref!r}: {module_name} has no {attr!r}") from None
        else:
            raise ConfigurationError(
                f"{term} model {ref!r} is neither registered nor a 'module:function' reference")
    else:
        raise ConfigurationError(f"{term} model must be a callable or a string, got {type(ref).__name__}")
    check_signature(term, func)
    return func


@dataclass(frozen=True)
class VarianceModels:
    """The four variance functions an observation uses"""
    tropo: Callable = variance.tropo_variance
    cnmp: Callable = variance.cnmp_variance
    udre: Callable = variance.udre_variance
    flt: Callable = variance.flt_variance

    @classmethod
    def from_overrides(cls, overrides: Optional[Mapping[str, ModelRef]] = None,
                       allow_fallback: bool = False) -> 'VarianceModels':
        """
        Resolve override references, keeping the built-in for terms not overridden

        With ``allow_fallback`` an invalid reference logs a warning and the
        built-in model is used; otherwise it raises ConfigurationError.
        """
        models = dict(BUILTIN_MODELS)
        for term, ref in (overrides or {}).items():
            if ref is None:
                continue
            try:
                models[term] = resolve_model(term, ref)
            except ConfigurationError as e:
                if not allow_fallback or term not in VARIANCE_TERMS:
                    raise
                logger.warning(f"Using built-in {term} variance: {e}")
        return cls(**models)

    def is_builtin(self, term: str) -> bool:
        return getattr(self, term) is BUILTIN_MODELS[term]
