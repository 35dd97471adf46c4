import pytest

from growthbook_openfeature.config import DEFAULT_API_HOST, Config
from growthbook_openfeature.provider import GrowthBookProvider


def test_defaults():
    config = Config(client_key='sdk-abc123')
    assert config.client_key == 'sdk-abc123'
    assert config.api_host == DEFAULT_API_HOST
    assert config.api_key is None
    assert config.decryption_key is None
    assert config.cache_ttl == 60


def test_copy_config():
    old_config = Config(client_key='sdk-old', api_host='https://host.com', decryption_key='secret', api_key='api-key', cache_ttl=30)

    new_config = old_config.copy_with_new_client_key('sdk-new')
    assert new_config.client_key == 'sdk-new'
    assert new_config.api_host == 'https://host.com'
    assert new_config.decryption_key == 'secret'
    assert new_config.api_key == 'api-key'
    assert new_config.cache_ttl == 30
    assert old_config.client_key == 'sdk-old'


def test_trims_trailing_slashes_on_api_host():
    config = Config(client_key='sdk-abc123', api_host='https://growthbook.example.com//')
    assert config.api_host == 'https://growthbook.example.com'


def test_negative_cache_ttl_is_clamped(caplog):
    config = Config(client_key='sdk-abc123', cache_ttl=-5)
    assert config.cache_ttl == 0
    assert 'Config.cache_ttl was set to -5; using 0 instead' in caplog.text


@pytest.fixture(params=[" ", "@", ":", "sdk key", "sdk-abc\n"])
def invalid_client_key_char(request):
    return request.param


def test_client_key_with_invalid_characters_is_discarded(invalid_client_key_char, caplog):
    config = Config(client_key='sdk-abc' + invalid_client_key_char)
    assert config.client_key == ''
    assert 'Client key contained invalid characters and was discarded' in caplog.text


def test_client_key_that_is_too_long_is_discarded(caplog):
    config = Config(client_key='a' * 8193)
    assert config.client_key == ''
    assert 'Client key was longer than 8192 characters and was discarded' in caplog.text


def test_provider_warns_about_blank_client_key(caplog):
    GrowthBookProvider(config=Config(client_key=''))
    assert 'Missing or blank client key' in caplog.text
