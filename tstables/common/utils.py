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
import logging.config
import struct
import sys

import tstables.common.exceptions as exceptions

VERSION = '0.9.0'

LOG_LVL_NOTICE = 25
LOG_LVL_TRACE = 5

logger = None


def get_version_str():
    return VERSION


def add_log_levels():
    """
    Adds the NOTICE and TRACE levels the first time through
    """
    if str(logging.getLevelName('NOTICE')).startswith('Level'):
        logging.addLevelName(LOG_LVL_NOTICE, 'NOTICE')
        def notice(self, message, *args, **kws):
            if self.isEnabledFor(LOG_LVL_NOTICE):
                self._log(LOG_LVL_NOTICE, message, args, **kws)
        logging.Logger.notice = notice
    if str(logging.getLevelName('TRACE')).startswith('Level'):
        logging.addLevelName(LOG_LVL_TRACE, 'TRACE')
        def trace(self, message, *args, **kws):
            if self.isEnabledFor(LOG_LVL_TRACE):
                self._log(LOG_LVL_TRACE, message, args, **kws)
        logging.Logger.trace = trace


def logging_setup(_config_handler):
    """
    Configures logging from the logger sections held in the
    ConfigParser object
    """
    global logger
    add_log_levels()
    try:
        logging.config.fileConfig(_config_handler, disable_existing_loggers=False)
    except (KeyError, ValueError) as e:
        raise exceptions.ConfigError(
            'Invalid logging configuration: {}'.format(str(e)))
    logger = logging.getLogger(__name__)


add_log_levels()


def clean_exit(exit_code=0):
    try:
        sys.stderr.flush()
        sys.stdout.flush()
    except BrokenPipeError:
        pass
    sys.exit(exit_code)


def merge_dict(d1, d2, override=False, ignore_conflicts=False):
    for key in d2:
        if key in d1:
            if isinstance(d1[key], dict) and isinstance(d2[key], dict):
                merge_dict(d1[key], d2[key], override, ignore_conflicts)
            elif d1[key] == d2[key]:
                pass
            elif override:
                d1[key] = d2[key]
            elif not ignore_conflicts:
                raise exceptions.TSTablesException('Conflict when merging dictionaries {}'.format(str(key)))
        else:
            d1[key] = d2[key]
    return d1


# BYTE METHODS

def get_u16(_data, _offset):
    return struct.unpack('>H', _data[_offset:_offset + 2])[0]


def get_u24(_data, _offset):
    return struct.unpack('>I', b'\x00' + _data[_offset:_offset + 3])[0]


def get_u32(_data, _offset):
    return struct.unpack('>I', _data[_offset:_offset + 4])[0]
