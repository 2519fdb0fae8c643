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

import datetime

from tstables.db.db import DB

DB_TEAM_TABLE = 'team'
DB_USER_TABLE = 'users'
DB_TEAM_MEMBER_TABLE = 'team_member'
DB_PROVISION_NAME = 'provisioning'


sqlcmds = {
    'ct': [
        """
        CREATE TABLE IF NOT EXISTS team (
            name        VARCHAR(255) NOT NULL,
            description TEXT,
            created     TEXT,
            updated     TEXT,
            UNIQUE(name)
            )
        """,
        """
        CREATE TABLE IF NOT EXISTS users (
            username    VARCHAR(255) NOT NULL,
            email       VARCHAR(255),
            password    TEXT,
            created     TEXT,
            updated     TEXT,
            UNIQUE(username)
            )
        """,
        """
        CREATE TABLE IF NOT EXISTS team_member (
            team        VARCHAR(255) NOT NULL,
            username    VARCHAR(255) NOT NULL,
            UNIQUE(team, username),
            FOREIGN KEY(team) REFERENCES team(name),
            FOREIGN KEY(username) REFERENCES users(username)
            )
        """
    ],
    'team_add':
        """
        INSERT INTO team (
            name, description, created, updated
            ) VALUES ( ?, ?, ?, ? )
        ON CONFLICT(name) DO UPDATE SET
            description=excluded.description,
            updated=excluded.updated
        """,
    'team_get':
        """
        SELECT * FROM team WHERE name LIKE ?
        ORDER BY name ASC
        """,
    'users_add':
        """
        INSERT INTO users (
            username, email, password, created, updated
            ) VALUES ( ?, ?, ?, ?, ? )
        ON CONFLICT(username) DO UPDATE SET
            email=excluded.email,
            password=excluded.password,
            updated=excluded.updated
        """,
    'users_get':
        """
        SELECT * FROM users WHERE username LIKE ?
        ORDER BY username ASC
        """,
    'team_member_add':
        """
        INSERT OR IGNORE INTO team_member (
            team, username
            ) VALUES ( ?, ? )
        """,
    'team_member_get':
        """
        SELECT * FROM team_member WHERE team LIKE ?
        ORDER BY team ASC, username ASC
        """,
    'team_member_del':
        """
        DELETE FROM team_member WHERE username=?
        """
}


class DBProvision(DB):

    def __init__(self, _config):
        super().__init__(_config, DB_PROVISION_NAME, sqlcmds)

    def save_team(self, _name, _description):
        now = datetime.datetime.now(datetime.timezone.utc).isoformat()
        self.add(DB_TEAM_TABLE, (
            _name,
            _description,
            now,
            now,
        ))

    def save_user(self, _username, _email, _password):
        now = datetime.datetime.now(datetime.timezone.utc).isoformat()
        self.add(DB_USER_TABLE, (
            _username,
            _email,
            _password,
            now,
            now,
        ))

    def set_user_teams(self, _username, _teams):
        """
        Replaces the team membership of the user
        """
        self.delete(DB_TEAM_MEMBER_TABLE, (_username,))
        for team in _teams:
            self.add(DB_TEAM_MEMBER_TABLE, (
                team,
                _username,
            ))

    def get_teams(self, _name=None):
        if not _name:
            _name = '%'
        return self.get_dict(DB_TEAM_TABLE, (_name,))

    def get_users(self, _username=None):
        if not _username:
            _username = '%'
        return self.get_dict(DB_USER_TABLE, (_username,))

    def get_team_members(self, _team=None):
        if not _team:
            _team = '%'
        return self.get_dict(DB_TEAM_MEMBER_TABLE, (_team,))
