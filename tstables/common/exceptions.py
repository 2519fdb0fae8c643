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


class TSTablesException(Exception):
    """ Base exception for all errors raised by tstables """
    pass


class ConfigError(TSTablesException):
    pass


class MalformedStreamError(TSTablesException):
    """
    Raised when the transport stream cannot be decoded any further,
    for example when the packet sync byte is lost.
    """
    pass


class ProvisioningError(TSTablesException):
    pass
