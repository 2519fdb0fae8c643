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

import binascii
import logging

# first byte selector of a DVB text field, EN 300 468 Annex A
DVB_CHARSETS = {
    0x01: 'iso8859-5',
    0x02: 'iso8859-6',
    0x03: 'iso8859-7',
    0x04: 'iso8859-8',
    0x05: 'iso8859-9',
    0x06: 'iso8859-10',
    0x07: 'iso8859-11',
    0x09: 'iso8859-13',
    0x0A: 'iso8859-14',
    0x0B: 'iso8859-15',
    0x11: 'utf-16-be',
    0x14: 'big5',
    0x15: 'utf-8',
}

# ATSC multiple_string_structure modes that map straight to a code page
ATSC_MODES = {
    0x00: 'latin-1',
    0x3F: 'utf-16-be',
}


def decode_dvb_text(_data):
    if not _data:
        return ''
    first = _data[0]
    if first >= 0x20:
        charset = 'latin-1'
        text = _data
    elif first == 0x10 and len(_data) >= 3:
        charset = 'iso8859-{}'.format((_data[1] << 8) | _data[2])
        text = _data[3:]
    elif first in DVB_CHARSETS:
        charset = DVB_CHARSETS[first]
        text = _data[1:]
    else:
        charset = 'latin-1'
        text = _data[1:]
    try:
        result = text.decode(charset, errors='replace')
    except LookupError:
        result = text.decode('latin-1', errors='replace')
    # 0x80-0x9F are emphasis and line break control codes
    return ''.join(c for c in result if not 0x80 <= ord(c) <= 0x9F)


def decode_multiple_string(_data):
    """
    ATSC A/65 multiple_string_structure.  Returns a list of
    {'language', 'text'} dicts.  Compressed segments are returned as hex
    """
    strings = []
    if not _data:
        return strings
    number_strings = _data[0]
    at = 1
    for i in range(number_strings):
        if at + 4 > len(_data):
            logging.getLogger(__name__).debug(
                'multiple string structure truncated at string {}'.format(i))
            break
        language = _data[at:at + 3].decode('latin-1')
        number_segments = _data[at + 3]
        at += 4
        text = ''
        for j in range(number_segments):
            if at + 3 > len(_data):
                break
            compression_type = _data[at]
            mode = _data[at + 1]
            number_bytes = _data[at + 2]
            segment = _data[at + 3:at + 3 + number_bytes]
            at += 3 + number_bytes
            if compression_type == 0 and mode in ATSC_MODES:
                text += segment.decode(ATSC_MODES[mode], errors='replace')
            else:
                text += binascii.hexlify(segment).decode('ascii')
        strings.append({'language': language, 'text': text})
    return strings
