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

import tstables.common.utils as utils
import tstables.tables.descriptors as descriptors
import tstables.tables.text as text
import tstables.tables.timestamps as timestamps

CRC_SIZE = 4

TABLE_ID_PAT = 0x00
TABLE_ID_CAT = 0x01
TABLE_ID_PMT = 0x02
TABLE_ID_NIT_ACTUAL = 0x40
TABLE_ID_NIT_OTHER = 0x41
TABLE_ID_SDT_ACTUAL = 0x42
TABLE_ID_SDT_OTHER = 0x46
TABLE_ID_BAT = 0x4A
TABLE_ID_EIT_FIRST = 0x4E
TABLE_ID_EIT_LAST = 0x6F
TABLE_ID_TDT = 0x70
TABLE_ID_TOT = 0x73
TABLE_ID_MGT = 0xC7
TABLE_ID_TVCT = 0xC8
TABLE_ID_CVCT = 0xC9
TABLE_ID_ATSC_EIT = 0xCB
TABLE_ID_ETT = 0xCC
TABLE_ID_STT = 0xCD

STREAM_TYPES = {
    0x01: 'MPEG-1 Video',
    0x02: 'MPEG-2 Video',
    0x03: 'MPEG-1 Audio',
    0x04: 'MPEG-2 Audio',
    0x05: 'MPEG-2 Private Sections',
    0x06: 'MPEG-2 PES Private Data',
    0x0F: 'AAC ADTS Audio',
    0x11: 'AAC LATM Audio',
    0x1B: 'H.264 Video',
    0x24: 'H.265 Video',
    0x81: 'AC-3 Audio',
    0x86: 'SCTE-35 Splice Info',
    0x87: 'E-AC-3 Audio',
}

VCT_SERVICE_TYPES = {
    0x01: 'analog_television',
    0x02: 'ATSC_digital_television',
    0x03: 'ATSC_audio',
    0x04: 'ATSC_data_only_service',
    0x05: 'ATSC_software_download_service',
}

VCT_MODULATION_MODES = {
    0x01: 'analog',
    0x02: 'SCTE_mode_1',
    0x03: 'SCTE_mode_2',
    0x04: '8VSB',
    0x05: '16VSB',
}


def decode_mgt_table_type(x):
    # table_type here is a 16-bit type, A/65 Table 6.3 Table Types
    if x == 0x0000:
        return 'Terrestrial VCT with current_next_indicator=1'
    elif x == 0x0001:
        return 'Terrestrial VCT with current_next_indicator=0'
    elif x == 0x0002:
        return 'Cable VCT with current_next_indicator=1'
    elif x == 0x0003:
        return 'Cable VCT with current_next_indicator=0'
    elif x == 0x0004:
        return 'Channel ETT'
    elif x == 0x0005:
        return 'DCCSCT'
    elif 0x0100 <= x <= 0x017f:
        return 'EIT-{}'.format(x - 0x0100)
    elif 0x0200 <= x <= 0x027f:
        return 'Event ETT-{}'.format(x - 0x0200)
    elif 0x0301 <= x <= 0x03ff:
        return 'RRT with rating_region-{}'.format(x - 0x0300)
    elif 0x0400 <= x <= 0x0fff:
        return 'User private-{:04x}'.format(x)
    elif 0x1400 <= x <= 0x14ff:
        return 'DCCT with dcc_id-{}'.format(x - 0x1400)
    else:
        return 'Reserved for future ATSC use-{:04x}'.format(x)


def is_mgt_event_table(_table_type):
    """
    True for the MGT table types whose PIDs carry EIT or ETT sections
    """
    return _table_type == 0x0004 \
        or 0x0100 <= _table_type <= 0x017f \
        or 0x0200 <= _table_type <= 0x027f


def section_end(_section):
    return len(_section) - CRC_SIZE


def decode_pat(_section, _header):
    programs = []
    network_pid = None
    for at in range(8, section_end(_section) - 3, 4):
        program_number = utils.get_u16(_section, at)
        # the pid is only 13 bits, upper 3 bits are reserved
        pid = utils.get_u16(_section, at + 2) & 0x1fff
        if program_number == 0:
            network_pid = pid
        else:
            programs.append({'program_number': program_number, 'pid': pid})
    data = {
        'ts_id': _header['table_id_extension'],
        'version': _header['version_number'],
        'programs': programs,
    }
    if network_pid is not None:
        data['network_pid'] = network_pid
    return data


def decode_cat(_section, _header):
    return {
        'version': _header['version_number'],
        'descriptors': descriptors.decode_descriptors(_section[8:section_end(_section)]),
    }


def decode_pmt(_section, _header):
    end = section_end(_section)
    pcr_pid = utils.get_u16(_section, 8) & 0x1fff
    program_info_length = utils.get_u16(_section, 10) & 0x0fff
    at = 12 + program_info_length
    streams = []
    while at + 5 <= end:
        stream_type = _section[at]
        es_info_length = utils.get_u16(_section, at + 3) & 0x0fff
        streams.append({
            'stream_type': stream_type,
            'stream_type_name': STREAM_TYPES.get(stream_type, 'unknown'),
            'elementary_pid': utils.get_u16(_section, at + 1) & 0x1fff,
            'descriptors': descriptors.decode_descriptors(
                _section[at + 5:at + 5 + es_info_length]),
        })
        at += 5 + es_info_length
    return {
        'program_number': _header['table_id_extension'],
        'version': _header['version_number'],
        'pcr_pid': pcr_pid,
        'descriptors': descriptors.decode_descriptors(_section[12:12 + program_info_length]),
        'streams': streams,
    }


def decode_nit(_section, _header):
    """
    NIT and BAT share one layout, network_id or bouquet_id in the extension
    """
    end = section_end(_section)
    descriptors_length = utils.get_u16(_section, 8) & 0x0fff
    at = 10 + descriptors_length
    transport_streams = []
    if at + 2 <= end:
        loop_length = utils.get_u16(_section, at) & 0x0fff
        at += 2
        loop_end = min(at + loop_length, end)
        while at + 6 <= loop_end:
            ts_descriptors_length = utils.get_u16(_section, at + 4) & 0x0fff
            transport_streams.append({
                'ts_id': utils.get_u16(_section, at),
                'original_network_id': utils.get_u16(_section, at + 2),
                'descriptors': descriptors.decode_descriptors(
                    _section[at + 6:at + 6 + ts_descriptors_length]),
            })
            at += 6 + ts_descriptors_length
    if _header['table_id'] == TABLE_ID_BAT:
        id_key = 'bouquet_id'
    else:
        id_key = 'network_id'
    return {
        id_key: _header['table_id_extension'],
        'version': _header['version_number'],
        'actual': _header['table_id'] != TABLE_ID_NIT_OTHER,
        'descriptors': descriptors.decode_descriptors(_section[10:10 + descriptors_length]),
        'transport_streams': transport_streams,
    }


def decode_sdt(_section, _header):
    end = section_end(_section)
    services = []
    at = 11
    while at + 5 <= end:
        flags = utils.get_u16(_section, at + 3)
        descriptors_length = flags & 0x0fff
        services.append({
            'service_id': utils.get_u16(_section, at),
            'eit_schedule': (_section[at + 2] & 0x02) != 0,
            'eit_present_following': (_section[at + 2] & 0x01) != 0,
            'running_status': flags >> 13,
            'free_ca_mode': (flags >> 12) & 0x01,
            'descriptors': descriptors.decode_descriptors(
                _section[at + 5:at + 5 + descriptors_length]),
        })
        at += 5 + descriptors_length
    return {
        'ts_id': _header['table_id_extension'],
        'version': _header['version_number'],
        'actual': _header['table_id'] == TABLE_ID_SDT_ACTUAL,
        'original_network_id': utils.get_u16(_section, 8),
        'services': services,
    }


def decode_dvb_eit(_section, _header):
    end = section_end(_section)
    events = []
    at = 14
    while at + 12 <= end:
        flags = utils.get_u16(_section, at + 10)
        descriptors_length = flags & 0x0fff
        events.append({
            'event_id': utils.get_u16(_section, at),
            'start_time': timestamps.decode_utc_time(_section[at + 2:at + 7]),
            'duration': timestamps.decode_bcd_duration(_section[at + 7:at + 10]),
            'running_status': flags >> 13,
            'free_ca_mode': (flags >> 12) & 0x01,
            'descriptors': descriptors.decode_descriptors(
                _section[at + 12:at + 12 + descriptors_length]),
        })
        at += 12 + descriptors_length
    return {
        'service_id': _header['table_id_extension'],
        'version': _header['version_number'],
        'section_number': _header['section_number'],
        'ts_id': utils.get_u16(_section, 8),
        'original_network_id': utils.get_u16(_section, 10),
        'segment_last_section_number': _section[12],
        'last_table_id': _section[13],
        'events': events,
    }


def decode_tdt(_section, _header):
    return {'utc_time': timestamps.decode_utc_time(_section[3:8])}


def decode_tot(_section, _header):
    descriptors_length = utils.get_u16(_section, 8) & 0x0fff
    return {
        'utc_time': timestamps.decode_utc_time(_section[3:8]),
        'descriptors': descriptors.decode_descriptors(_section[10:10 + descriptors_length]),
    }


def decode_mgt(_section, _header):
    end = section_end(_section)
    tables_defined = utils.get_u16(_section, 9)
    tables = []
    at = 11
    for i in range(tables_defined):
        if at + 11 > end:
            break
        table_type = utils.get_u16(_section, at)
        descriptors_length = utils.get_u16(_section, at + 9) & 0x0fff
        tables.append({
            'table_type': table_type,
            'table_type_name': decode_mgt_table_type(table_type),
            'pid': utils.get_u16(_section, at + 2) & 0x1fff,
            'version': _section[at + 4] & 0x1f,
            'number_bytes': utils.get_u32(_section, at + 5),
            'descriptors': descriptors.decode_descriptors(
                _section[at + 11:at + 11 + descriptors_length]),
        })
        at += 11 + descriptors_length
    data = {
        'version': _header['version_number'],
        'protocol_version': _section[8],
        'tables': tables,
    }
    if at + 2 <= end:
        descriptors_length = utils.get_u16(_section, at) & 0x0fff
        data['descriptors'] = descriptors.decode_descriptors(
            _section[at + 2:at + 2 + descriptors_length])
    return data


def decode_vct(_section, _header):
    """
    Terrestrial and cable VCT, A/65 Table 6.4 and 6.7
    """
    end = section_end(_section)
    is_cable = _header['table_id'] == TABLE_ID_CVCT
    num_channels = _section[9]
    channels = []
    at = 10
    for i in range(num_channels):
        if at + 32 > end:
            break
        # short_name is 7 UTF-16 code units
        short_name = _section[at:at + 14].decode('utf-16-be', errors='replace').rstrip('\x00')
        word = utils.get_u32(_section, at + 14)
        flags = utils.get_u16(_section, at + 26)
        descriptors_length = utils.get_u16(_section, at + 30) & 0x03ff
        modulation_mode = word & 0xff
        service_type = flags & 0x3f
        channel = {
            'short_name': short_name,
            'major_channel_number': (word >> 18) & 0x3ff,
            'minor_channel_number': (word >> 8) & 0x3ff,
            'modulation_mode': VCT_MODULATION_MODES.get(modulation_mode, modulation_mode),
            'carrier_frequency': utils.get_u32(_section, at + 18),
            'channel_ts_id': utils.get_u16(_section, at + 22),
            'program_number': utils.get_u16(_section, at + 24),
            'etm_location': (flags >> 14) & 0x03,
            'access_controlled': (flags & 0x2000) != 0,
            'hidden': (flags & 0x1000) != 0,
            'hide_guide': (flags & 0x0200) != 0,
            'service_type': VCT_SERVICE_TYPES.get(service_type, service_type),
            'source_id': utils.get_u16(_section, at + 28),
            'descriptors': descriptors.decode_descriptors(
                _section[at + 32:at + 32 + descriptors_length]),
        }
        if is_cable:
            channel['path_select'] = (flags >> 11) & 0x01
            channel['out_of_band'] = (flags & 0x0400) != 0
        channels.append(channel)
        at += 32 + descriptors_length
    data = {
        'ts_id': _header['table_id_extension'],
        'version': _header['version_number'],
        'cable': is_cable,
        'protocol_version': _section[8],
        'channels': channels,
    }
    if at + 2 <= end:
        descriptors_length = utils.get_u16(_section, at) & 0x03ff
        data['descriptors'] = descriptors.decode_descriptors(
            _section[at + 2:at + 2 + descriptors_length])
    return data


def decode_stt(_section, _header):
    # 4bytes system time = time since 1980 (GPS)
    # 1byte GPS_UTC_offset
    # 2bytes daylight_saving
    system_time = utils.get_u32(_section, 9)
    gps_utc_offset = _section[13]
    daylight_saving = utils.get_u16(_section, 14)
    return {
        'protocol_version': _section[8],
        'system_time': system_time,
        'gps_utc_offset': gps_utc_offset,
        'utc_time': timestamps.gps_to_utc(system_time, gps_utc_offset),
        'ds_status': (daylight_saving & 0x8000) != 0,
        'ds_day_of_month': (daylight_saving >> 8) & 0x1f,
        'ds_hour': daylight_saving & 0xff,
        'descriptors': descriptors.decode_descriptors(_section[16:section_end(_section)]),
    }


def decode_atsc_eit(_section, _header):
    end = section_end(_section)
    num_events = _section[9]
    events = []
    at = 10
    for i in range(num_events):
        if at + 10 > end:
            break
        event_id = utils.get_u16(_section, at) & 0x3fff
        start_time = utils.get_u32(_section, at + 2)
        length_word = utils.get_u24(_section, at + 6)
        title_length = _section[at + 9]
        title = text.decode_multiple_string(_section[at + 10:at + 10 + title_length])
        at += 10 + title_length
        descriptors_length = utils.get_u16(_section, at) & 0x0fff
        events.append({
            'event_id': event_id,
            'start_time': timestamps.gps_to_utc(start_time, timestamps.GPS_UTC_OFFSET),
            'etm_location': (length_word >> 20) & 0x03,
            'length_in_seconds': length_word & 0xfffff,
            'title': title,
            'descriptors': descriptors.decode_descriptors(
                _section[at + 2:at + 2 + descriptors_length]),
        })
        at += 2 + descriptors_length
    return {
        'source_id': _header['table_id_extension'],
        'version': _header['version_number'],
        'protocol_version': _section[8],
        'events': events,
    }


def decode_ett(_section, _header):
    etm_id = utils.get_u32(_section, 9)
    data = {
        'ett_table_id_extension': _header['table_id_extension'],
        'version': _header['version_number'],
        'protocol_version': _section[8],
        'etm_id': etm_id,
        'source_id': etm_id >> 16,
        'extended_text_message': text.decode_multiple_string(
            _section[13:section_end(_section)]),
    }
    # lowest 2 bits '10' mark an event ETM, 0 a channel ETM
    if etm_id & 0x03 == 0x02:
        data['event_id'] = (etm_id >> 2) & 0x3fff
    return data


TABLE_DECODERS = {
    TABLE_ID_PAT: ('PAT', decode_pat),
    TABLE_ID_CAT: ('CAT', decode_cat),
    TABLE_ID_PMT: ('PMT', decode_pmt),
    TABLE_ID_NIT_ACTUAL: ('NIT', decode_nit),
    TABLE_ID_NIT_OTHER: ('NIT', decode_nit),
    TABLE_ID_SDT_ACTUAL: ('SDT', decode_sdt),
    TABLE_ID_SDT_OTHER: ('SDT', decode_sdt),
    TABLE_ID_BAT: ('BAT', decode_nit),
    TABLE_ID_TDT: ('TDT', decode_tdt),
    TABLE_ID_TOT: ('TOT', decode_tot),
    TABLE_ID_MGT: ('MGT', decode_mgt),
    TABLE_ID_TVCT: ('VCT', decode_vct),
    TABLE_ID_CVCT: ('VCT', decode_vct),
    TABLE_ID_ATSC_EIT: ('EIT', decode_atsc_eit),
    TABLE_ID_ETT: ('ETT', decode_ett),
    TABLE_ID_STT: ('STT', decode_stt),
}
for _tid in range(TABLE_ID_EIT_FIRST, TABLE_ID_EIT_LAST + 1):
    TABLE_DECODERS[_tid] = ('EIT', decode_dvb_eit)

# emitted for every section, no table wide merge
PER_SECTION_TABLES = {TABLE_ID_ETT} \
    | set(range(TABLE_ID_EIT_FIRST, TABLE_ID_EIT_LAST + 1))

# time tables, emitted on every occurrence
TIME_TABLES = {TABLE_ID_TDT, TABLE_ID_TOT, TABLE_ID_STT}


def get_decoder(_table_id):
    """
    Returns (table_name, decode function) or None for unknown table ids
    """
    return TABLE_DECODERS.get(_table_id)
