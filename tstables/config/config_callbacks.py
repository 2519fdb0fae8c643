"""
MIT License

Copyright (C) 2026 ROCKY4546
https://github.com/rocky4546

This file is part of TSTables

Permission is hereby granted, free of charge, to any person obtaining a copy of this software
and associated documentation files (the "Software"), to deal in the Software without restriction,
including without limitation the rights to use, copy, modify, merge, publish, distribute,
sublicense, and/or sell copies of the Software, and to permit persons to whom the Software
is furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in all copies or
substantial portions of the Software.
"""

import os
import pathlib

import tstables.common.encryption as encryption

USERS_TEAMS_FILENAME = 'users_teams.json'


def call_function(_func_name, _section, _key, _config_obj):
    func = globals().get(_func_name)
    if func is None:
        _config_obj.logger.warning('Unknown config callback {} for [{}][{}]'
            .format(_func_name, _section, _key))
        return None
    return func(_config_obj, _section, _key)


def set_path(_config_obj, _section, _key, _base_dir, _folder, _create=True):
    if not _config_obj.data[_section][_key]:
        _config_obj.data[_section][_key] = pathlib.Path(_base_dir).joinpath(_folder)
    else:
        _config_obj.data[_section][_key] = pathlib.Path(_config_obj.data[_section][_key])
    if _create and not _config_obj.data[_section][_key].is_dir():
        _config_obj.data[_section][_key].mkdir(parents=True)
    _config_obj.data[_section][_key] = str(os.path.abspath(_config_obj.data[_section][_key]))


def set_base_path(_config_obj, _section, _key):
    _config_obj.data[_section][_key] = str(os.path.abspath(_config_obj.base_dir))


def set_data_path(_config_obj, _section, _key):
    # created on first use
    set_path(_config_obj, _section, _key,
             _config_obj.data['paths']['base_dir'], 'data', False)


def set_database_path(_config_obj, _section, _key):
    set_path(_config_obj, _section, _key,
             _config_obj.data['paths']['data_dir'], 'db', False)


def set_streams_path(_config_obj, _section, _key):
    set_path(_config_obj, _section, _key,
             pathlib.Path(_config_obj.data['paths']['base_dir']).parent, 'streams', False)


def set_provisioning_path(_config_obj, _section, _key):
    if not _config_obj.data[_section][_key]:
        _config_obj.data[_section][_key] = str(pathlib.Path(
            _config_obj.data['paths']['base_dir']).joinpath(USERS_TEAMS_FILENAME))


def load_encrypted_setting(_config_obj, _section, _key):
    value = _config_obj.data[_section][_key]
    if value is None:
        return
    encrypt_key = encryption.set_fernet_key(_config_obj.data['paths']['data_dir'])
    if encryption.is_encrypted(value):
        _config_obj.data[_section][_key] = encryption.decrypt(value, encrypt_key)
        if _config_obj.data[_section][_key] is None:
            _config_obj.logger.error(
                'Unable to decrypt [{}][{}]. '.format(_section, _key) +
                'Try updating the value in the config file in clear text')
    elif _config_obj.data['paths']['config_file'] is not None:
        # not encrypted, store the encrypted form in config.ini
        encrypted_value = encryption.encrypt(value, encrypt_key)
        _config_obj.write(_section, _key, encrypted_value)
        _config_obj.data[_section][_key] = value
