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
import pathlib

DEFAULT_CHUNK_SIZE = 65536


class FileSource:
    """
    Opens files below a base folder as a sequence of byte chunks.
    Each call to open_stream() returns a new generator; the file
    is opened when the generator is first advanced and closed when
    it is exhausted or closed.  FileNotFoundError and PermissionError
    are raised to the caller.
    """

    def __init__(self, _base_dir, _chunk_size=DEFAULT_CHUNK_SIZE):
        self.logger = logging.getLogger(__name__)
        self.base_dir = pathlib.Path(_base_dir)
        if _chunk_size is None or _chunk_size <= 0:
            _chunk_size = DEFAULT_CHUNK_SIZE
        self.chunk_size = _chunk_size

    def get_path(self, _name):
        return self.base_dir.joinpath(_name)

    def open_stream(self, _name):
        return self.read_chunks(self.get_path(_name))

    def read_chunks(self, _filepath):
        self.logger.debug('Opening stream {}'.format(_filepath))
        total = 0
        with open(_filepath, 'rb') as f:
            while True:
                chunk = f.read(self.chunk_size)
                if not chunk:
                    break
                total += len(chunk)
                yield chunk
        self.logger.debug('Finished reading {} bytes from {}'.format(total, _filepath))
