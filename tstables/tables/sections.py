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

import tstables.common.utils as utils

MAX_SECTION_LENGTH = 4093
SECTION_HEADER_SIZE = 3
LONG_HEADER_SIZE = 8
STUFFING_BYTE = 0xFF
TABLE_ID_TOT = 0x73


def parse_section_header(_section):
    """
    Returns the common header fields of a PSI section or None when the
    section is too short to hold them
    """
    if len(_section) < SECTION_HEADER_SIZE:
        return None
    header = {
        'table_id': _section[0],
        'section_syntax_indicator': (_section[1] & 0x80) != 0,
        'private_indicator': (_section[1] & 0x40) != 0,
        'section_length': ((_section[1] & 0x0F) << 8) | _section[2],
    }
    if header['section_syntax_indicator']:
        # long form header plus the CRC
        if len(_section) < LONG_HEADER_SIZE + 4:
            return None
        header['table_id_extension'] = utils.get_u16(_section, 3)
        header['version_number'] = (_section[5] >> 1) & 0x1F
        header['current_next_indicator'] = _section[5] & 0x01
        header['section_number'] = _section[6]
        header['last_section_number'] = _section[7]
    return header


def has_crc(_header):
    # TOT is a short form section that still carries a CRC_32
    return _header['section_syntax_indicator'] \
        or _header['table_id'] == TABLE_ID_TOT


class SectionAssembler:
    """
    Rebuilds PSI sections from the TS packet payloads of a single PID.
    Handles the pointer_field, sections spanning packets, several
    sections per packet and 0xFF stuffing.  A continuity counter gap
    drops the partial section.
    """

    def __init__(self, _pid):
        self.logger = logging.getLogger(__name__)
        self.pid = _pid
        self.buffer = None
        self.last_cc = None

    def reset(self):
        self.buffer = None

    def push(self, _fields):
        """
        Takes a decoded packet from packets.decode_ts_packet and returns
        the list of sections completed by it
        """
        payload = _fields.get('payload')
        if not payload:
            return []

        cc = _fields['cont_counter']
        if self.last_cc is not None:
            if cc == self.last_cc:
                self.logger.trace('Duplicate packet on pid 0x{:04x}, cc={}'.format(self.pid, cc))
                return []
            if cc != (self.last_cc + 1) & 0x0F:
                if self.buffer:
                    self.logger.warning(
                        'Continuity gap on pid 0x{:04x} ({} -> {}), dropping partial section'
                        .format(self.pid, self.last_cc, cc))
                self.reset()
        self.last_cc = cc

        sections = []
        if _fields['payload_unit_start_indicator']:
            pointer = payload[0]
            if 1 + pointer > len(payload):
                self.logger.warning(
                    'pointer_field {} beyond payload on pid 0x{:04x}'.format(pointer, self.pid))
                self.reset()
                return sections
            if self.buffer is not None:
                self.buffer += payload[1:1 + pointer]
                sections.extend(self.extract())
                if self.buffer:
                    self.logger.debug(
                        'Discarding {} bytes of incomplete section on pid 0x{:04x}'
                        .format(len(self.buffer), self.pid))
            self.buffer = bytearray(payload[1 + pointer:])
        else:
            if self.buffer is None:
                # no section start seen yet
                return sections
            self.buffer += payload
        sections.extend(self.extract())
        return sections

    def extract(self):
        sections = []
        while self.buffer is not None:
            if not self.buffer or self.buffer[0] == STUFFING_BYTE:
                self.reset()
                break
            if len(self.buffer) < SECTION_HEADER_SIZE:
                break
            section_length = ((self.buffer[1] & 0x0F) << 8) | self.buffer[2]
            if section_length > MAX_SECTION_LENGTH:
                self.logger.warning(
                    'Invalid section length {} on pid 0x{:04x}'.format(section_length, self.pid))
                self.reset()
                break
            total = SECTION_HEADER_SIZE + section_length
            if len(self.buffer) < total:
                break
            sections.append(bytes(self.buffer[:total]))
            del self.buffer[:total]
        return sections
