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

LEAP_SECONDS_1980 = 19
LEAP_SECONDS_2021 = 37  # unchanged since 2017
GPS_UTC_OFFSET = LEAP_SECONDS_2021 - LEAP_SECONDS_1980
GPS_EPOCH = datetime.datetime(1980, 1, 6, tzinfo=datetime.timezone.utc)


def bcd_to_decimal(_bcd):
    return ((_bcd >> 4) * 10) + (_bcd & 0x0F)


def mjd_to_date(_mjd):
    """
    Modified Julian Date to (year, month, day), ETSI EN 300 468 Annex C
    """
    y_prime = int((_mjd - 15078.2) / 365.25)
    m_prime = int((_mjd - 14956.1 - int(y_prime * 365.25)) / 30.6001)
    day = _mjd - 14956 - int(y_prime * 365.25) - int(m_prime * 30.6001)
    if m_prime in (14, 15):
        k = 1
    else:
        k = 0
    return y_prime + k + 1900, m_prime - 1 - k * 12, day


def decode_utc_time(_data):
    """
    5 bytes, 16 bit MJD followed by 6 BCD digits hhmmss.
    Returns an ISO string or None when the date is undefined (all 1s)
    """
    if _data == b'\xff\xff\xff\xff\xff':
        return None
    mjd = (_data[0] << 8) | _data[1]
    year, month, day = mjd_to_date(mjd)
    try:
        utc = datetime.datetime(
            year, month, day,
            bcd_to_decimal(_data[2]), bcd_to_decimal(_data[3]), bcd_to_decimal(_data[4]),
            tzinfo=datetime.timezone.utc)
    except ValueError:
        return None
    return utc.isoformat()


def decode_bcd_duration(_data):
    """
    3 BCD bytes hhmmss returned as seconds
    """
    return bcd_to_decimal(_data[0]) * 3600 \
        + bcd_to_decimal(_data[1]) * 60 \
        + bcd_to_decimal(_data[2])


def gps_to_utc(_gps_seconds, _gps_utc_offset=0):
    """
    ATSC system time is seconds since 1980-01-06 00:00:00 GPS.
    _gps_utc_offset is the leap second count carried in the STT
    """
    utc = GPS_EPOCH + datetime.timedelta(seconds=_gps_seconds - _gps_utc_offset)
    return utc.isoformat()
