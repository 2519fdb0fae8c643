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
import os
import pathlib
import random
import sqlite3
import threading
import time

DB_EXT = '.db'

# trailers used in sqlcmds
SQL_CREATE_TABLES = 'ct'
SQL_ADD_ROW = '_add'
SQL_GET = '_get'
SQL_DELETE = '_del'

RETRIES = 10


class DB:
    """
    Thin wrapper over sqlite3.  Each thread gets its own
    connection, kept in DB.conn[db file][thread_id].  Statements
    come from the sqlcmds dict using the trailers above.
    """
    conn = {}

    def __init__(self, _config, _db_name, _sqlcmds):
        self.logger = logging.getLogger(__name__ + str(threading.get_ident()))
        self.config = _config
        self.db_name = _db_name
        self.sqlcmds = _sqlcmds

        db_dir = pathlib.Path(self.config['paths']['db_dir'])
        os.makedirs(db_dir, exist_ok=True)
        self.db_fullpath = db_dir.joinpath(_db_name + DB_EXT)
        self.db_key = str(self.db_fullpath)
        if not os.path.exists(self.db_fullpath):
            self.logger.debug('Creating new database: {} {}'.format(_db_name, self.db_fullpath))
        self.check_connection()
        self.create_tables()

    def sql_exec(self, _sqlcmd, _bindings=None, _cursor=None):
        try:
            self.check_connection()
            executor = _cursor or DB.conn[self.db_key][threading.get_ident()]
            if _bindings:
                return executor.execute(_sqlcmd, _bindings)
            else:
                return executor.execute(_sqlcmd)
        except sqlite3.IntegrityError as e:
            DB.conn[self.db_key][threading.get_ident()].close()
            del DB.conn[self.db_key][threading.get_ident()]
            raise e

    def rnd_sleep(self, _sec):
        r = random.randrange(0, 50)
        sec = _sec + r / 100
        time.sleep(sec)

    def _write(self, _sqlcmd, _values, _action):
        cur = None
        i = RETRIES
        while i > 0:
            i -= 1
            try:
                self.check_connection()
                cur = DB.conn[self.db_key][threading.get_ident()].cursor()
                self.sql_exec(_sqlcmd, _values, cur)
                DB.conn[self.db_key][threading.get_ident()].commit()
                result = cur.lastrowid, cur.rowcount
                cur.close()
                return result
            except sqlite3.OperationalError as e:
                self.logger.warning('{} {} request ignored, retrying {}, {}'
                                    .format(self.db_name, _action, i, e))
                DB.conn[self.db_key][threading.get_ident()].rollback()
                if cur is not None:
                    cur.close()
                if i == 0:
                    raise e
                self.rnd_sleep(0.3)
        return None, 0

    def add(self, _table, _values):
        sqlcmd = self.sqlcmds[''.join([_table, SQL_ADD_ROW])]
        return self._write(sqlcmd, _values, 'Add')[0]

    def delete(self, _table, _values):
        sqlcmd = self.sqlcmds[''.join([_table, SQL_DELETE])]
        return self._write(sqlcmd, _values, 'Delete')[1]

    def get_dict(self, _table, _where=None, sql=None):
        if sql is None:
            sqlcmd = self.sqlcmds[''.join([_table, SQL_GET])]
        else:
            sqlcmd = sql
        self.check_connection()
        cur = DB.conn[self.db_key][threading.get_ident()].cursor()
        try:
            self.sql_exec(sqlcmd, _where, cur)
            records = cur.fetchall()
            return [dict(zip([c[0] for c in cur.description], row)) for row in records]
        finally:
            cur.close()

    def create_tables(self):
        for table in self.sqlcmds[SQL_CREATE_TABLES]:
            self.sql_exec(table)
        DB.conn[self.db_key][threading.get_ident()].commit()

    def close(self):
        thread_id = threading.get_ident()
        if thread_id in DB.conn.get(self.db_key, {}):
            DB.conn[self.db_key][thread_id].close()
            del DB.conn[self.db_key][thread_id]
            self.logger.debug('{} database closed for thread:{}'.format(self.db_name, thread_id))

    def check_connection(self):
        if self.db_key not in DB.conn:
            DB.conn[self.db_key] = {}
        db_conn_dbname = DB.conn[self.db_key]

        if threading.get_ident() not in db_conn_dbname:
            db_conn_dbname[threading.get_ident()] = sqlite3.connect(
                self.db_fullpath, detect_types=sqlite3.PARSE_DECLTYPES | sqlite3.PARSE_COLNAMES)
        else:
            try:
                db_conn_dbname[threading.get_ident()].total_changes
            except sqlite3.ProgrammingError:
                self.logger.debug('Reopening {} database for thread:{}'.format(self.db_name, threading.get_ident()))
                db_conn_dbname[threading.get_ident()] = sqlite3.connect(
                    self.db_fullpath, detect_types=sqlite3.PARSE_DECLTYPES | sqlite3.PARSE_COLNAMES)
