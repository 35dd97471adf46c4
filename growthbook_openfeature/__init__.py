"""
The growthbook_openfeature module contains an OpenFeature provider backed by the GrowthBook SDK,
along with helpers for registering it with the OpenFeature API.
"""

from typing import Optional

from growthbook import GrowthBook
from openfeature import api

from growthbook_openfeature.impl.util import log
from growthbook_openfeature.version import VERSION

from .config import *
from .context import *
from .provider import *

__version__ = VERSION


def use_growthbook_provider(config: Optional[Config] = None, growthbook: Optional[GrowthBook] = None, domain: Optional[str] = None) -> GrowthBookProvider:
    """Creates a :class:`growthbook_openfeature.provider.GrowthBookProvider` and registers it with
    the OpenFeature API.

    Exactly one of ``config`` or ``growthbook`` must be given. If ``domain`` is omitted the
    provider becomes the default provider; otherwise it is bound to that domain only, and used by
    clients obtained with ``api.get_client(domain)``.

    :param config: settings for a GrowthBook instance that the provider will create and own
    :param growthbook: an existing GrowthBook instance
    :param domain: optional OpenFeature domain to bind the provider to
    :return: the registered provider
    """
    provider = GrowthBookProvider(config=config, growthbook=growthbook)
    if domain is None:
        log.info("Registering GrowthBook provider " + VERSION + " as the default OpenFeature provider")
        api.set_provider(provider)
    else:
        log.info("Registering GrowthBook provider " + VERSION + " for OpenFeature domain \"%s\"" % domain)
        api.set_provider(provider, domain)
    return provider


__all__ = ['Config', 'GrowthBookProvider', 'map_context', 'use_growthbook_provider', 'config', 'context', 'provider']
