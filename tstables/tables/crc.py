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

import struct

from pycrc.algorithms import Crc
from pycrc.models import CrcModels

CRC_SIZE = 4


class MpegCrc:
    """
    CRC-32/MPEG-2 over PSI sections
    """

    def __init__(self):
        models = CrcModels()
        crc32_mpeg_model = models.get_params('crc-32-mpeg')
        self.alg = Crc(
            width=crc32_mpeg_model['width'],
            poly=crc32_mpeg_model['poly'],
            reflect_in=crc32_mpeg_model['reflect_in'],
            xor_in=crc32_mpeg_model['xor_in'],
            reflect_out=crc32_mpeg_model['reflect_out'],
            xor_out=crc32_mpeg_model['xor_out'],
            table_idx_width=8,
        )

    def calc(self, _msg):
        return self.alg.bit_by_bit_fast(_msg)

    def verify(self, _section):
        if len(_section) < CRC_SIZE:
            return False
        expected = struct.unpack('>I', _section[-CRC_SIZE:])[0]
        return self.calc(_section[:-CRC_SIZE]) == expected
