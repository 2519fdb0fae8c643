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

import tstables.common.exceptions as exceptions

TS_PACKET_SIZE = 188
TS_SYNC_BYTE = 0x47
TS_HEADER_SIZE = 4

PID_PAT = 0x0000
PID_CAT = 0x0001
PID_NIT = 0x0010
PID_SDT = 0x0011
PID_EIT = 0x0012
PID_TDT = 0x0014
PID_ATSC_BASE = 0x1FFB


def decode_ts_packet(_packet_188):
    """
    Decodes the 4 byte header of a transport packet, the adaptation
    field and the payload.  Returns a dict of fields.
    https://en.wikipedia.org/wiki/MPEG_transport_stream#Packet
    """
    fields = {}
    word = struct.unpack('!I', _packet_188[0:4])[0]

    # Bit pattern of 0x47 (ASCII char 'G')
    sync = (word & 0xff000000) >> 24
    if sync != TS_SYNC_BYTE:
        raise exceptions.MalformedStreamError(
            'Bad packet sync byte 0x{:02x} (desync?)'.format(sync))

    # Set when a demodulator can't correct errors from FEC data
    fields['transport_error_indicator'] = (word & 0x800000) != 0

    # Set when a PES or PSI section begins in this packet
    fields['payload_unit_start_indicator'] = (word & 0x400000) != 0

    fields['transport_priority'] = (word & 0x200000) != 0
    fields['pid'] = (word & 0x1fff00) >> 8

    # '00' = Not scrambled
    fields['scrambling_control'] = (word & 0xc0) >> 6

    # 01 no adaptation field, payload only
    # 10 adaptation field only, no payload
    # 11 adaptation field followed by payload
    # 00 reserved
    fields['adaptation_field_control'] = (word & 0x30) >> 4

    if fields['adaptation_field_control'] == 1:
        has_adapt = False
        has_payload = True
    elif fields['adaptation_field_control'] == 2:
        has_adapt = True
        has_payload = False
    elif fields['adaptation_field_control'] == 3:
        has_adapt = True
        has_payload = True
    else:
        # reserved value, no payload and no adaptation field
        has_adapt = False
        has_payload = False
        fields['corrupted_adaption_control_field'] = True

    # Incremented per-PID, only when a payload is present
    fields['cont_counter'] = word & 0xf

    payload_start = TS_HEADER_SIZE
    if has_adapt:
        adapt_length = _packet_188[TS_HEADER_SIZE]
        if TS_HEADER_SIZE + 1 + adapt_length > len(_packet_188):
            raise exceptions.MalformedStreamError(
                'Adaptation field beyond length of packet, length={} pid=0x{:04x}'
                .format(adapt_length, fields['pid']))
        fields['adapt'] = _packet_188[TS_HEADER_SIZE + 1:TS_HEADER_SIZE + 1 + adapt_length]
        payload_start = TS_HEADER_SIZE + 1 + adapt_length

    if has_payload:
        fields['payload'] = _packet_188[payload_start:]
    return fields
