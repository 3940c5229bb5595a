"""Tests for file store configuration."""

import json

import pytest

from filestore.config import FileStoreConfig


def test_config_creates_default_file(tmp_path):
    """Test that config file is created with defaults if missing."""
    config_path = tmp_path / '.dlfilestore' / 'config.json'
    config = FileStoreConfig(config_path)

    assert config_path.exists()

    assert config.data['get_rpc_max_connections'] == 5
    assert config.data['timeout_pending'] == 5
    assert config.data['chunk_size'] == 2_000_000
    assert config.data['max_retries'] == 2
    with open(config_path, 'r') as f:
        assert json.load(f)['chunk_size'] == 2_000_000


def test_config_loads_existing_file(tmp_path):
    """Test loading existing config file."""
    config_path = tmp_path / '.dlfilestore' / 'config.json'
    config_path.parent.mkdir(parents=True)

    with open(config_path, 'w') as f:
        json.dump({'host': 'example.com', 'port': 9000, 'chunk_size': 1024}, f)

    config = FileStoreConfig(config_path)

    assert config.get_base_url() == 'https://example.com:9000'
    assert config.get_chunk_size() == 1024
    assert config.get_max_connections() == 5


def test_config_handles_corrupted_file(tmp_path):
    """Test recovery from corrupted config file."""
    config_path = tmp_path / '.dlfilestore' / 'config.json'
    config_path.parent.mkdir(parents=True)

    with open(config_path, 'w') as f:
        f.write('{ invalid json content')

    config = FileStoreConfig(config_path)
    assert config.data['chunk_size'] == 2_000_000

    backup_path = config_path.with_suffix('.json.bak')
    assert backup_path.exists()


def test_overrides_take_precedence(tmp_path):
    """Test overrides win over file values and are not written back."""
    config_path = tmp_path / 'config.json'
    with open(config_path, 'w') as f:
        json.dump({'chunk_size': 1024}, f)

    config = FileStoreConfig(config_path, overrides={'chunk_size': 64})

    assert config.get_chunk_size() == 64
    with open(config_path, 'r') as f:
        assert json.load(f)['chunk_size'] == 1024


def test_save_persists_changes(tmp_path):
    """Test save writes the current data."""
    config_path = tmp_path / 'config.json'
    config = FileStoreConfig(config_path)

    config.data['timeout_pending'] = 1
    config.save()

    assert FileStoreConfig(config_path).get_poll_interval() == 1.0


def test_config_without_file_uses_defaults():
    """Test an in-memory config is seeded from defaults."""
    config = FileStoreConfig()

    assert config.config_path is None
    assert config.get_chunk_size() == 2_000_000
    assert config.get_timeout() == 5.0
    config.save()


@pytest.mark.parametrize('key,value,getter', [
    ('chunk_size', 0, 'get_chunk_size'),
    ('chunk_size', -1, 'get_chunk_size'),
    ('get_rpc_max_connections', 0, 'get_max_connections'),
])
def test_invalid_values_rejected(key, value, getter):
    """Test non-positive sizes and connection limits are rejected."""
    config = FileStoreConfig(overrides={key: value})

    with pytest.raises(ValueError):
        getattr(config, getter)()


def test_get_cert_missing_files(tmp_path):
    """Test missing cert material yields None."""
    config = FileStoreConfig(overrides={
        'cert_path': str(tmp_path / 'private_data_layer.crt'),
        'key_path': str(tmp_path / 'private_data_layer.key'),
    })

    assert config.get_cert() is None


def test_get_cert_present(tmp_path):
    """Test existing cert and key paths are returned."""
    cert = tmp_path / 'private_data_layer.crt'
    key = tmp_path / 'private_data_layer.key'
    cert.write_text('cert')
    key.write_text('key')

    config = FileStoreConfig(overrides={'cert_path': str(cert), 'key_path': str(key)})

    assert config.get_cert() == (str(cert), str(key))


def test_get_retry_config():
    """Test retry configuration retrieval."""
    config = FileStoreConfig(overrides={'max_retries': 4, 'retry_backoff_multiplier': 3})

    assert config.get_retry_config() == {'max_retries': 4, 'retry_backoff_multiplier': 3}
