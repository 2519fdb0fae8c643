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

import requests
import requests.exceptions

import tstables.common.exceptions as exceptions
from tstables.provision.provisioner import Provisioner

TEAMS_PATH = 'teams'
USERS_PATH = 'users'


class HttpProvisioner(Provisioner):
    """
    Posts teams and then users as JSON to a REST endpoint,
    <url>/teams and <url>/users, with a bearer token.  Any non-2xx
    response stops provisioning.
    """
    backend = 'http'

    def __init__(self, _config, _session=None):
        super().__init__(_config)
        self.url = _config['provisioning']['url']
        if not self.url:
            raise exceptions.ProvisioningError(
                'provisioning url is required for the http backend')
        self.url = self.url.rstrip('/')
        self.timeout = _config['provisioning']['timeout']
        if _session is None:
            _session = requests.session()
        self.http_session = _session
        self.http_session.headers.update({'Content-Type': 'application/json'})
        token = _config['provisioning']['token']
        if token:
            self.http_session.headers.update({'Authorization': 'Bearer {}'.format(token)})

    def create_team(self, _team):
        self.post(TEAMS_PATH, {
            'name': _team['name'],
            'description': _team['description']})

    def create_user(self, _user):
        self.post(USERS_PATH, {
            'username': _user['username'],
            'email': _user['email'],
            'password': _user['password'],
            'teams': _user['teams']})

    def post(self, _path, _body):
        url = '/'.join([self.url, _path])
        try:
            resp = self.http_session.post(url, json=_body, timeout=self.timeout)
        except requests.exceptions.RequestException as ex:
            raise exceptions.ProvisioningError(
                'Request to {} failed: {}'.format(url, str(ex))) from ex
        if not 200 <= resp.status_code < 300:
            raise exceptions.ProvisioningError(
                'HTTP {} from {}: {}'.format(resp.status_code, url, resp.text[:200]))
        self.logger.debug('POST {} -> {}'.format(url, resp.status_code))
        return resp

    def close(self):
        self.http_session.close()
