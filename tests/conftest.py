import logging

import pytest

import tstables.config.user_config as user_config


@pytest.fixture(autouse=True)
def reset_root_handlers():
    yield
    # handlers set up by fileConfig keep the stderr of the test that created them
    root = logging.getLogger()
    for handler in root.handlers[:]:
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)


@pytest.fixture
def base_dir(tmp_path):
    app_dir = tmp_path / 'app'
    app_dir.mkdir()
    return app_dir


@pytest.fixture
def streams_dir(tmp_path):
    folder = tmp_path / 'streams'
    folder.mkdir()
    return folder


@pytest.fixture
def config_obj(base_dir):
    return user_config.get_config(base_dir)


@pytest.fixture
def config(config_obj):
    return config_obj.data
