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

import logging
import threading
from threading import Thread

import tstables.common.exceptions as exceptions


class ProvisionResult:

    def __init__(self, _backend, _teams=0, _users=0):
        self.backend = _backend
        self.teams = _teams
        self.users = _users

    def __str__(self):
        return '{} teams and {} users provisioned through {}' \
            .format(self.teams, self.users, self.backend)


class Provisioner:
    """
    Base class for the provisioning backends.  Subclasses implement
    create_team() and create_user(); provision() walks the config,
    teams first so users can be placed in them
    """
    backend = None

    def __init__(self, _config):
        self.logger = logging.getLogger(__name__)
        self.config = _config

    def provision(self, _prov_config):
        result = ProvisionResult(self.backend)
        try:
            for team in _prov_config['teams']:
                self.create_team(team)
                result.teams += 1
            for user in _prov_config['users']:
                self.create_user(user)
                result.users += 1
        finally:
            self.close()
        return result

    def create_team(self, _team):
        raise NotImplementedError

    def create_user(self, _user):
        raise NotImplementedError

    def close(self):
        pass


class ProvisionTask(Thread):
    """
    Runs a provisioner in its own thread.  The outcome is kept as
    either a ProvisionResult or the exception raised; wait() hands it
    back to the caller.
    """

    def __init__(self, _provisioner, _prov_config):
        Thread.__init__(self)
        self.logger = logging.getLogger(__name__ + str(threading.get_ident()))
        self.provisioner = _provisioner
        self.prov_config = _prov_config
        self.result = None
        self.error = None

    def run(self):
        try:
            self.result = self.provisioner.provision(self.prov_config)
        except Exception as ex:
            self.logger.debug('Provisioning thread stopped: {}'.format(str(ex)))
            self.error = ex

    def wait(self, _timeout=None):
        self.join(_timeout)
        if self.is_alive():
            raise exceptions.ProvisioningError('Provisioning did not finish in time')
        if self.error is not None:
            raise self.error
        return self.result


def get_provisioner(_config):
    backend = _config['provisioning']['backend']
    if backend == 'sqlite':
        from tstables.provision.sqlite_provisioner import SqliteProvisioner
        return SqliteProvisioner(_config)
    elif backend == 'http':
        from tstables.provision.http_provisioner import HttpProvisioner
        return HttpProvisioner(_config)
    else:
        raise exceptions.ProvisioningError('Unknown provisioning backend {}'.format(backend))
