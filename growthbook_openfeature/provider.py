"""
This submodule contains the OpenFeature provider that resolves flags with GrowthBook.
"""

import threading
import traceback
from typing import Any, Callable, Optional, Union

from growthbook import GrowthBook
from openfeature.evaluation_context import EvaluationContext
from openfeature.exception import ErrorCode, GeneralError
from openfeature.flag_evaluation import FlagResolutionDetails, Reason
from openfeature.provider import AbstractProvider, Metadata

from growthbook_openfeature.config import Config
from growthbook_openfeature.context import map_context
from growthbook_openfeature.impl.util import (Failure, Outcome, Success,
                                              describe_exception, log)

PROVIDER_NAME = 'GrowthBook Feature Provider'


def _guard(fn: Callable[[], Outcome]) -> Outcome:
    # Nothing raised by GrowthBook or by context mapping may escape the resolver.
    try:
        return fn()
    except Exception as e:
        return Failure(describe_exception(e), e)


def _wrong_type(value: Any, expected: str) -> Failure:
    return Failure("Expected a %s value but GrowthBook returned %s (%r)" % (expected, value.__class__.__name__, value))


def _as_string(value: Any) -> Outcome:
    if isinstance(value, str):
        return Success(value)
    return _wrong_type(value, 'string')


def _as_integer(value: Any) -> Outcome:
    if isinstance(value, bool):
        return _wrong_type(value, 'integer')
    if isinstance(value, int):
        return Success(value)
    if isinstance(value, float) and value.is_integer():
        return Success(int(value))
    return _wrong_type(value, 'integer')


def _as_float(value: Any) -> Outcome:
    if not isinstance(value, bool) and isinstance(value, (int, float)):
        return Success(float(value))
    return _wrong_type(value, 'float')


class _FlagType:
    """Describes how a feature's value is obtained for one OpenFeature value type."""

    def __init__(self, name: str, fetch: Callable[[GrowthBook, str, Any], Outcome]):
        self.name = name
        self.fetch = fetch


def _feature_value(convert: Callable[[Any], Outcome]) -> Callable[[GrowthBook, str, Any], Outcome]:
    def fetch(growthbook: GrowthBook, key: str, default_value: Any) -> Outcome:
        return convert(growthbook.get_feature_value(key, default_value))

    return fetch


BOOLEAN = _FlagType('boolean', lambda growthbook, key, default_value: Success(growthbook.is_on(key)))
STRING = _FlagType('string', _feature_value(_as_string))
INTEGER = _FlagType('integer', _feature_value(_as_integer))
FLOAT = _FlagType('float', _feature_value(_as_float))
# GrowthBook values are not translated into OpenFeature structures; the default is always used.
OBJECT = _FlagType('object', lambda growthbook, key, default_value: Success(default_value))


class GrowthBookProvider(AbstractProvider):
    """An OpenFeature provider backed by the GrowthBook SDK.

    The provider either wraps an existing :class:`growthbook.GrowthBook` instance, or creates (and
    owns) one from a :class:`growthbook_openfeature.config.Config`:
    ::

        provider = GrowthBookProvider(config=Config('sdk-abc123', api_host='https://cdn.growthbook.io'))
        provider = GrowthBookProvider(growthbook=GrowthBook(features={...}))

    Resolution never raises; failures are reported through the ``reason``, ``error_code`` and
    ``error_message`` of the returned details, with the caller's default as the value.

    GrowthBook keeps the current attributes on the ``GrowthBook`` object and updates its own
    tracking state while evaluating, so every resolution runs under an exclusive lock. The lock is
    reentrant: GrowthBook callbacks such as ``on_feature_usage`` may resolve flags through the same
    provider. Provider instances are thread-safe.
    """

    def __init__(self, config: Optional[Config] = None, growthbook: Optional[GrowthBook] = None):
        """
        :param config: settings for a GrowthBook instance that the provider will create and own
        :param growthbook: an existing GrowthBook instance to use as-is
        """
        if (config is None) == (growthbook is None):
            raise ValueError("GrowthBookProvider requires exactly one of config or growthbook")

        self.__lock = threading.RLock()
        self.__depth = 0
        self.__config = config
        if growthbook is not None:
            self.__growthbook = growthbook
            self.__owns_growthbook = False
        else:
            config._validate()
            self.__growthbook = GrowthBook(
                api_host=config.api_host,
                client_key=config.client_key,
                decryption_key=config.decryption_key or '',
                cache_ttl=config.cache_ttl,
            )
            self.__owns_growthbook = True

    @property
    def growthbook(self) -> GrowthBook:
        """The GrowthBook instance used for evaluation."""
        return self.__growthbook

    def get_metadata(self) -> Metadata:
        return Metadata(name=PROVIDER_NAME)

    def initialize(self, evaluation_context: EvaluationContext) -> None:
        """Loads feature definitions into a GrowthBook instance owned by this provider.

        An instance passed in by the application is left alone; it is expected to have been
        loaded already.

        :raises GeneralError: if the features could not be loaded, so that OpenFeature reports the
          provider as being in an error state
        """
        if not self.__owns_growthbook:
            return
        log.info("Loading GrowthBook features from %s" % self.__config.api_host)
        try:
            self.__growthbook.load_features()
        except Exception as e:
            log.error("Unable to load GrowthBook features: %s" % repr(e))
            log.debug(traceback.format_exc())
            raise GeneralError("Unable to load GrowthBook features: %s" % describe_exception(e)) from e

    def shutdown(self) -> None:
        if not self.__owns_growthbook:
            return
        log.info("Closing GrowthBook instance..")
        self.__growthbook.destroy()

    def resolve_boolean_details(
        self,
        flag_key: str,
        default_value: bool,
        evaluation_context: Optional[EvaluationContext] = None,
    ) -> FlagResolutionDetails[bool]:
        return self._resolve(BOOLEAN, flag_key, default_value, evaluation_context)

    def resolve_string_details(
        self,
        flag_key: str,
        default_value: str,
        evaluation_context: Optional[EvaluationContext] = None,
    ) -> FlagResolutionDetails[str]:
        return self._resolve(STRING, flag_key, default_value, evaluation_context)

    def resolve_integer_details(
        self,
        flag_key: str,
        default_value: int,
        evaluation_context: Optional[EvaluationContext] = None,
    ) -> FlagResolutionDetails[int]:
        return self._resolve(INTEGER, flag_key, default_value, evaluation_context)

    def resolve_float_details(
        self,
        flag_key: str,
        default_value: float,
        evaluation_context: Optional[EvaluationContext] = None,
    ) -> FlagResolutionDetails[float]:
        return self._resolve(FLOAT, flag_key, default_value, evaluation_context)

    def resolve_object_details(
        self,
        flag_key: str,
        default_value: Union[dict, list],
        evaluation_context: Optional[EvaluationContext] = None,
    ) -> FlagResolutionDetails[Union[dict, list]]:
        """Reports whether the feature exists, but always resolves to ``default_value``: GrowthBook
        feature values are not converted into OpenFeature structures."""
        return self._resolve(OBJECT, flag_key, default_value, evaluation_context)

    def _resolve(self, flag_type: _FlagType, flag_key: str, default_value: Any, evaluation_context: Optional[EvaluationContext]) -> FlagResolutionDetails:
        with self.__lock:
            self.__depth += 1
            try:
                # nested resolutions restore the attributes of the evaluation still running on this thread
                previous = self.__growthbook.get_attributes() if self.__depth > 1 and evaluation_context is not None else None
                outcome = Success(None)  # type: Outcome
                if evaluation_context is not None:
                    outcome = _guard(lambda: self.__apply_context(evaluation_context))
                if isinstance(outcome, Success):
                    outcome = _guard(lambda: self.__evaluate(flag_type, flag_key, default_value))
                if previous is not None:
                    self.__growthbook.set_attributes(previous)
            finally:
                self.__depth -= 1

        if isinstance(outcome, Failure):
            log.error("Error while evaluating %s feature \"%s\": %s" % (flag_type.name, flag_key, outcome.error))
            if outcome.exception is not None:
                e = outcome.exception
                log.debug(''.join(traceback.format_exception(type(e), e, e.__traceback__)))
            return FlagResolutionDetails(value=default_value, reason=Reason.ERROR, error_code=ErrorCode.GENERAL, error_message=outcome.error)

        value, reason = outcome.value
        return FlagResolutionDetails(value=value, reason=reason)

    def __apply_context(self, evaluation_context: EvaluationContext) -> Outcome:
        self.__growthbook.set_attributes(map_context(evaluation_context))
        return Success(None)

    def __evaluate(self, flag_type: _FlagType, flag_key: str, default_value: Any) -> Outcome:
        features = self.__growthbook.get_features()
        if not features or flag_key not in features:
            return Success((default_value, Reason.DEFAULT))

        fetched = flag_type.fetch(self.__growthbook, flag_key, default_value)
        if isinstance(fetched, Failure):
            return fetched
        return Success((fetched.value, Reason.TARGETING_MATCH))


__all__ = ['GrowthBookProvider', 'PROVIDER_NAME']
