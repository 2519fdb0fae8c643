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
import struct

import tstables.common.utils as utils
import tstables.tables.text as text

DESC_NAMES = {
    # ISO/IEC 13818-1
    0x02: 'video_stream_descriptor',
    0x03: 'audio_stream_descriptor',
    0x04: 'hierarchy_descriptor',
    0x05: 'registration_descriptor',
    0x06: 'data_stream_alignment_descriptor',
    0x07: 'target_background_grid_descriptor',
    0x08: 'video_window_descriptor',
    0x09: 'CA_descriptor',
    0x0A: 'ISO_639_language_descriptor',
    0x0B: 'system_clock_descriptor',
    0x0C: 'multiplex_buffer_utilization_descriptor',
    0x0D: 'copyright_descriptor',
    0x0E: 'maximum_bitrate_descriptor',
    0x0F: 'private_data_indicator_descriptor',
    0x10: 'smoothing_buffer_descriptor',
    0x11: 'STD_descriptor',
    0x12: 'IBP_descriptor',
    0x1B: 'MPEG-4_video_descriptor',
    0x1C: 'MPEG-4_audio_descriptor',
    0x1D: 'IOD_descriptor',
    0x1E: 'SL_descriptor',
    0x1F: 'FMC_descriptor',
    0x20: 'External_ES_ID_descriptor',
    0x21: 'MuxCode_descriptor',
    0x22: 'FmxBufferSize_descriptor',
    0x23: 'MultiplexBuffer_descriptor',
    0x24: 'FlexMuxTiming_descriptor',
    0x28: 'AVC_video_descriptor',
    # ETSI EN 300 468
    0x40: 'network_name_descriptor',
    0x41: 'service_list_descriptor',
    0x42: 'stuffing_descriptor',
    0x43: 'satellite_delivery_system_descriptor',
    0x44: 'cable_delivery_system_descriptor',
    0x47: 'bouquet_name_descriptor',
    0x48: 'service_descriptor',
    0x4A: 'linkage_descriptor',
    0x4D: 'short_event_descriptor',
    0x4E: 'extended_event_descriptor',
    0x50: 'component_descriptor',
    0x52: 'stream_identifier_descriptor',
    0x54: 'content_descriptor',
    0x55: 'parental_rating_descriptor',
    0x56: 'teletext_descriptor',
    0x58: 'local_time_offset_descriptor',
    0x59: 'subtitling_descriptor',
    0x5A: 'terrestrial_delivery_system_descriptor',
    0x6A: 'AC-3_descriptor',
    0x7A: 'enhanced_AC-3_descriptor',
    # ATSC A/52, A/65
    0x80: 'Stuffing Descriptor',
    0x81: 'AC-3 Descriptor',
    0x86: 'Caption Service Descriptor',
    0x87: 'Content Advisory Descriptor',
    0xA0: 'Extended Channel name descriptor',
    0xA1: 'Service location descriptor',
    0xA2: 'Time-shifted service descriptor',
    0xA3: 'Component name descriptor',
    0xA4: 'Data Service descriptor',
    0xA5: 'pid_count descriptor',
    0xA6: 'Download descriptor',
    0xA7: 'Multiprotocol Encapsulation descriptor',
    0xA8: 'DCC Departing request descriptor',
    0xA9: 'DCC Arriving request descriptor',
    0xAA: 'Redistribution Control descriptor',
    0xAB: 'Genre descriptor',
    0xAD: 'ATSC Private Information descriptor',
    0xB2: 'Enhanced Signaling descriptor',
    0xC6: 'Content Identifier descriptor',
}


def decode_registration(_value):
    return {'format_identifier': _value[0:4].decode('latin-1')}


def decode_iso_639_language(_value):
    languages = []
    for at in range(0, len(_value) - 3, 4):
        languages.append({
            'language': _value[at:at + 3].decode('latin-1'),
            'audio_type': _value[at + 3]})
    return {'languages': languages}


def decode_network_name(_value):
    return {'network_name': text.decode_dvb_text(_value)}


def decode_service_list(_value):
    services = []
    for at in range(0, len(_value) - 2, 3):
        services.append({
            'service_id': utils.get_u16(_value, at),
            'service_type': _value[at + 2]})
    return {'services': services}


def decode_service(_value):
    service_type = _value[0]
    provider_length = _value[1]
    at = 2
    provider_name = text.decode_dvb_text(_value[at:at + provider_length])
    at += provider_length
    name_length = _value[at]
    at += 1
    service_name = text.decode_dvb_text(_value[at:at + name_length])
    return {
        'service_type': service_type,
        'provider_name': provider_name,
        'service_name': service_name}


def decode_short_event(_value):
    language = _value[0:3].decode('latin-1')
    name_length = _value[3]
    at = 4
    event_name = text.decode_dvb_text(_value[at:at + name_length])
    at += name_length
    text_length = _value[at]
    at += 1
    return {
        'language': language,
        'event_name': event_name,
        'text': text.decode_dvb_text(_value[at:at + text_length])}


def decode_stream_identifier(_value):
    return {'component_tag': _value[0]}


def decode_extended_channel_name(_value):
    return {'long_channel_name': text.decode_multiple_string(_value)}


def decode_service_location(_value):
    pcr_pid = utils.get_u16(_value, 0) & 0x1FFF
    number_elements = _value[2]
    elements = []
    at = 3
    for i in range(number_elements):
        if at + 6 > len(_value):
            break
        elements.append({
            'stream_type': _value[at],
            'elementary_pid': utils.get_u16(_value, at + 1) & 0x1FFF,
            'language': _value[at + 3:at + 6].decode('latin-1').strip('\x00')})
        at += 6
    return {'pcr_pid': pcr_pid, 'elements': elements}


DESC_DECODERS = {
    0x05: decode_registration,
    0x0A: decode_iso_639_language,
    0x40: decode_network_name,
    0x41: decode_service_list,
    0x48: decode_service,
    0x4D: decode_short_event,
    0x52: decode_stream_identifier,
    0xA0: decode_extended_channel_name,
    0xA1: decode_service_location,
}


def decode_descriptors(_data):
    """
    Decodes a descriptor loop of tag-length-value entries into a list of
    dicts with the tag, its name, the raw data as hex and, for the tags
    understood here, the decoded fields
    http://www.etherguidesystems.com/Help/SDOs/MPEG/semantics/mpeg-2/descriptor__loop.aspx
    """
    at = 0
    descriptors = []
    while at + 2 <= len(_data):
        tag = _data[at]
        length = _data[at + 1]
        value = _data[at + 2:at + 2 + length]
        at += 2 + length

        name = DESC_NAMES.get(tag)
        if name is None:
            name = 'unknown-{}'.format(tag)
        descriptor = {
            'tag': tag,
            'name': name,
            'data': binascii.hexlify(value).decode('ascii')}
        decoder = DESC_DECODERS.get(tag)
        if decoder is not None and len(value) == length:
            try:
                descriptor.update(decoder(value))
            except (IndexError, struct.error):
                # truncated payload, keep the raw data only
                pass
        descriptors.append(descriptor)
    return descriptors
