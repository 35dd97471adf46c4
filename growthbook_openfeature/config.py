"""
This submodule contains the :class:`Config` class used when the provider should create its own
GrowthBook instance from credentials.
"""

from typing import Optional

from growthbook_openfeature.impl.util import log, validate_client_key_format

DEFAULT_API_HOST = 'https://cdn.growthbook.io'


class Config:
    """Settings for a GrowthBook instance owned by the provider.

    These values are passed through to the GrowthBook SDK unchanged (apart from validation); they
    control where and how feature definitions are fetched, not how flags are resolved.
    """

    def __init__(self, client_key: str, api_host: str = DEFAULT_API_HOST, api_key: Optional[str] = None, decryption_key: Optional[str] = None, cache_ttl: int = 60):
        """
        :param client_key: the GrowthBook SDK connection's client key
        :param api_host: the base URL of the GrowthBook API or CDN serving feature definitions
        :param api_key: a GrowthBook API key; accepted for compatibility with other GrowthBook
          providers, but not used by the Python SDK
        :param decryption_key: the key used to decrypt feature definitions, if the SDK connection
          has encryption enabled
        :param cache_ttl: how long (in seconds) fetched feature definitions are cached
        """
        self.__client_key = validate_client_key_format(client_key, log)
        self.__api_host = api_host.rstrip('/')
        self.__api_key = api_key
        self.__decryption_key = decryption_key
        self.__cache_ttl = max(cache_ttl, 0)

        if cache_ttl < 0:
            log.warning("Config.cache_ttl was set to %d; using 0 instead" % cache_ttl)

    def copy_with_new_client_key(self, new_client_key: str) -> 'Config':
        """Returns a new ``Config`` instance that is the same as this one, except for having a
        different client key.

        :param new_client_key: the new client key
        """
        return Config(client_key=new_client_key, api_host=self.__api_host, api_key=self.__api_key, decryption_key=self.__decryption_key, cache_ttl=self.__cache_ttl)

    @property
    def client_key(self) -> str:
        return self.__client_key

    @property
    def api_host(self) -> str:
        return self.__api_host

    @property
    def api_key(self) -> Optional[str]:
        return self.__api_key

    @property
    def decryption_key(self) -> Optional[str]:
        return self.__decryption_key

    @property
    def cache_ttl(self) -> int:
        return self.__cache_ttl

    def _validate(self):
        if self.__client_key == '':
            log.warning("Missing or blank client key; feature definitions cannot be loaded from GrowthBook")


__all__ = ['Config', 'DEFAULT_API_HOST']
