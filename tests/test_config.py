import argparse
import os

import pytest

import tstables.common.exceptions as exceptions
import tstables.config.user_config as user_config


def test_defaults_without_config_file(base_dir, config):
    assert config['parser']['variant'] == 'tables'
    assert config['parser']['chunk_size'] == 65536
    assert config['parser']['verify_crc'] is True
    assert config['parser']['passthrough_file'] == 'stream.ts'
    assert config['provisioning']['backend'] == 'sqlite'
    assert config['provisioning']['timeout'] == 10.0
    assert config['paths']['streams_dir'] == os.path.abspath(base_dir.parent / 'streams')
    assert config['paths']['data_dir'] == os.path.abspath(base_dir / 'data')
    assert config['paths']['db_dir'] == os.path.abspath(base_dir / 'data' / 'db')
    assert config['provisioning']['config_file'] == str(base_dir / 'users_teams.json')


def test_config_file_values_are_typed(base_dir):
    (base_dir / 'config.ini').write_text(
        '[parser]\nchunk_size = 1024\nverify_crc = False\nvariant = passthrough\n'
        '[paths]\nstreams_dir = {}\n'.format(base_dir / 'ts'))
    config = user_config.get_config(base_dir).data
    assert config['parser']['chunk_size'] == 1024
    assert config['parser']['verify_crc'] is False
    assert config['parser']['variant'] == 'passthrough'
    assert config['paths']['streams_dir'] == str(base_dir / 'ts')
    assert config['paths']['config_file'] == str(base_dir / 'config.ini')


def test_data_folder_config_file(base_dir):
    (base_dir / 'data').mkdir()
    (base_dir / 'data' / 'config.ini').write_text('[parser]\nchunk_size = 10\n')
    assert user_config.get_config(base_dir).data['parser']['chunk_size'] == 10


def test_invalid_list_value(base_dir):
    (base_dir / 'config.ini').write_text('[parser]\nvariant = other\n')
    with pytest.raises(exceptions.ConfigError):
        user_config.get_config(base_dir)


def test_invalid_integer(base_dir):
    (base_dir / 'config.ini').write_text('[parser]\nchunk_size = big\n')
    with pytest.raises(exceptions.ConfigError):
        user_config.get_config(base_dir)


def test_explicit_missing_config_file(base_dir):
    args = argparse.Namespace(config_file=str(base_dir / 'nothere.ini'))
    with pytest.raises(exceptions.ConfigError):
        user_config.get_config(base_dir, args)


def test_token_is_encrypted_in_config_file(base_dir):
    config_file = base_dir / 'config.ini'
    config_file.write_text('[provisioning]\nbackend = http\ntoken = secret\n')
    config_obj = user_config.get_config(base_dir)
    config_obj.load_encrypted_settings()
    assert config_obj.data['provisioning']['token'] == 'secret'
    assert 'token = ENC::' in config_file.read_text()
    assert (base_dir / 'data' / 'key.txt').is_file()
    # second run decrypts the stored value
    config_obj = user_config.get_config(base_dir)
    config_obj.load_encrypted_settings()
    assert config_obj.data['provisioning']['token'] == 'secret'


def test_loading_config_does_not_write_files(base_dir):
    config_file = base_dir / 'config.ini'
    config_file.write_text('[provisioning]\nbackend = http\ntoken = secret\n')
    config = user_config.get_config(base_dir).data
    assert config['provisioning']['token'] == 'secret'
    assert config_file.read_text() == '[provisioning]\nbackend = http\ntoken = secret\n'
    assert not (base_dir / 'data').exists()


def test_filter_config_data_hides_token(base_dir):
    (base_dir / 'config.ini').write_text('[provisioning]\ntoken = secret\n')
    config_obj = user_config.get_config(base_dir)
    assert 'token' not in config_obj.filter_config_data()['provisioning']
