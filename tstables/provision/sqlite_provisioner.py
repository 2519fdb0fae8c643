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

import sqlite3

import tstables.common.encryption as encryption
import tstables.common.exceptions as exceptions
from tstables.db.db_provision import DBProvision
from tstables.provision.provisioner import Provisioner


class SqliteProvisioner(Provisioner):
    """
    Stores teams and users in the local provisioning database.
    Passwords are saved Fernet encrypted.  Running it again updates
    the existing rows.
    """
    backend = 'sqlite'

    def __init__(self, _config):
        super().__init__(_config)
        self.db = None
        self.encrypt_key = None

    def get_db(self):
        # connections are per thread, open in the thread doing the work
        if self.db is None:
            try:
                self.db = DBProvision(self.config)
            except (OSError, sqlite3.Error) as ex:
                raise exceptions.ProvisioningError(
                    'Unable to open provisioning database: {}'.format(str(ex))) from ex
        return self.db

    def get_encrypt_key(self):
        if self.encrypt_key is None:
            try:
                self.encrypt_key = encryption.set_fernet_key(self.config['paths']['data_dir'])
            except OSError as ex:
                raise exceptions.ProvisioningError(
                    'Unable to load the encryption key: {}'.format(str(ex))) from ex
        return self.encrypt_key

    def create_team(self, _team):
        try:
            self.get_db().save_team(_team['name'], _team['description'])
        except sqlite3.Error as ex:
            raise exceptions.ProvisioningError(
                'Unable to save team {}: {}'.format(_team['name'], str(ex))) from ex
        self.logger.debug('Team {} saved'.format(_team['name']))

    def create_user(self, _user):
        password = _user['password']
        if password:
            try:
                password = encryption.encrypt(password, self.get_encrypt_key())
            except ValueError as ex:
                raise exceptions.ProvisioningError(
                    'Invalid encryption key in {}: {}'.format(
                        self.config['paths']['data_dir'], str(ex))) from ex
        try:
            self.get_db().save_user(_user['username'], _user['email'], password)
            self.get_db().set_user_teams(_user['username'], _user['teams'])
        except sqlite3.Error as ex:
            raise exceptions.ProvisioningError(
                'Unable to save user {}: {}'.format(_user['username'], str(ex))) from ex
        self.logger.debug('User {} saved with teams {}'.format(_user['username'], _user['teams']))

    def close(self):
        if self.db is not None:
            self.db.close()
            self.db = None
