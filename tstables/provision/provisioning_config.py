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

import json
import logging

import tstables.common.exceptions as exceptions

LOGGER = logging.getLogger(__name__)


def load_provisioning_config(_path):
    """
    Reads the users and teams JSON file:
    {"teams": [{"name", "description"}],
     "users": [{"username", "email", "password", "teams": [names]}]}
    Raises ProvisioningError when the file cannot be read or is invalid
    """
    try:
        with open(_path, 'r', encoding='utf-8') as f:
            prov_config = json.load(f)
    except OSError as ex:
        raise exceptions.ProvisioningError(
            'Unable to read provisioning config {}: {}'.format(_path, ex.strerror)) from ex
    except json.JSONDecodeError as ex:
        raise exceptions.ProvisioningError(
            'Provisioning config {} is not valid JSON: {}'.format(_path, str(ex))) from ex
    validate_provisioning_config(prov_config)
    LOGGER.debug('Loaded {} teams and {} users from {}'.format(
        len(prov_config['teams']), len(prov_config['users']), _path))
    return prov_config


def validate_provisioning_config(_prov_config):
    if not isinstance(_prov_config, dict):
        raise exceptions.ProvisioningError('Provisioning config must be a JSON object')
    _prov_config.setdefault('teams', [])
    _prov_config.setdefault('users', [])
    if not isinstance(_prov_config['teams'], list) \
            or not isinstance(_prov_config['users'], list):
        raise exceptions.ProvisioningError('teams and users must be lists')

    team_names = set()
    for team in _prov_config['teams']:
        if not isinstance(team, dict):
            raise exceptions.ProvisioningError('Team entry must be an object: {}'.format(team))
        name = team.get('name')
        if not name or not isinstance(name, str):
            raise exceptions.ProvisioningError('Team without a name: {}'.format(team))
        if name in team_names:
            raise exceptions.ProvisioningError('Duplicate team name: {}'.format(name))
        team_names.add(name)
        team.setdefault('description', '')
        if not isinstance(team['description'], str):
            raise exceptions.ProvisioningError(
                'description of team {} must be a string'.format(name))

    usernames = set()
    for user in _prov_config['users']:
        if not isinstance(user, dict):
            raise exceptions.ProvisioningError('User entry must be an object: {}'.format(user))
        username = user.get('username')
        if not username or not isinstance(username, str):
            raise exceptions.ProvisioningError('User without a username: {}'.format(user))
        if username in usernames:
            raise exceptions.ProvisioningError('Duplicate username: {}'.format(username))
        usernames.add(username)
        user.setdefault('email', None)
        user.setdefault('password', None)
        user.setdefault('teams', [])
        for field in ('email', 'password'):
            if user[field] is not None and not isinstance(user[field], str):
                raise exceptions.ProvisioningError(
                    '{} of user {} must be a string'.format(field, username))
        if not isinstance(user['teams'], list):
            raise exceptions.ProvisioningError(
                'teams of user {} must be a list'.format(username))
        for team_name in user['teams']:
            if team_name not in team_names:
                raise exceptions.ProvisioningError(
                    'User {} refers to unknown team {}'.format(username, team_name))
    return _prov_config
