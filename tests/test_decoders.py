import struct

import tstables.tables.decoders as decoders
import tstables.tables.descriptors as descriptors
import tstables.tables.sections as sections
import tstables.tables.text as text
import tstables.tables.timestamps as timestamps

from ts_builder import (
    long_section, short_section, pat_body, pmt_body, sdt_body, service_descriptor,
    mgt_body, vct_body, stt_body, atsc_eit_body, multiple_string)


def decode(section):
    header = sections.parse_section_header(section)
    table_name, decode_func = decoders.get_decoder(header['table_id'])
    return table_name, decode_func(section, header)


def test_pat():
    name, data = decode(long_section(0x00, 0x0815, pat_body([(0, 0x10), (1, 0x100), (2, 0x200)]), version=3))
    assert name == 'PAT'
    assert data['ts_id'] == 0x0815
    assert data['version'] == 3
    assert data['network_pid'] == 0x10
    assert data['programs'] == [
        {'program_number': 1, 'pid': 0x100},
        {'program_number': 2, 'pid': 0x200}]


def test_pmt():
    language = bytes([0x0A, 4]) + b'eng\x00'
    body = pmt_body(0x101, [(0x02, 0x101, b''), (0x81, 0x104, language)])
    name, data = decode(long_section(0x02, 1, body))
    assert name == 'PMT'
    assert data['program_number'] == 1
    assert data['pcr_pid'] == 0x101
    assert [s['elementary_pid'] for s in data['streams']] == [0x101, 0x104]
    assert data['streams'][0]['stream_type_name'] == 'MPEG-2 Video'
    audio_descriptor = data['streams'][1]['descriptors'][0]
    assert audio_descriptor['name'] == 'ISO_639_language_descriptor'
    assert audio_descriptor['languages'] == [{'language': 'eng', 'audio_type': 0}]


def test_sdt():
    services = [(0x10, service_descriptor(b'Provider', b'Channel One'))]
    name, data = decode(long_section(0x42, 0x0815, sdt_body(0x2000, services)))
    assert name == 'SDT'
    assert data['actual'] is True
    assert data['original_network_id'] == 0x2000
    service = data['services'][0]
    assert service['service_id'] == 0x10
    assert service['eit_present_following'] is True
    assert service['running_status'] == 4
    assert service['descriptors'][0]['provider_name'] == 'Provider'
    assert service['descriptors'][0]['service_name'] == 'Channel One'


def test_mgt():
    tables = [(0x0000, 0x1FFB, 1, 100), (0x0100, 0x1D00, 2, 500), (0x0200, 0x1E00, 3, 700)]
    name, data = decode(long_section(0xC7, 0, mgt_body(tables)))
    assert name == 'MGT'
    assert [t['table_type_name'] for t in data['tables']] == [
        'Terrestrial VCT with current_next_indicator=1', 'EIT-0', 'Event ETT-0']
    assert [t['pid'] for t in data['tables']] == [0x1FFB, 0x1D00, 0x1E00]
    assert data['tables'][1]['version'] == 2
    assert data['tables'][2]['number_bytes'] == 700


def test_vct():
    channels = [('KQED-HD', 9, 1, 0x0815, 3, 1), ('KQED', 9, 2, 0x0815, 4, 2)]
    name, data = decode(long_section(0xC8, 0x0815, vct_body(channels)))
    assert name == 'VCT'
    assert data['cable'] is False
    first = data['channels'][0]
    assert first['short_name'] == 'KQED-HD'
    assert (first['major_channel_number'], first['minor_channel_number']) == (9, 1)
    assert first['modulation_mode'] == '8VSB'
    assert first['service_type'] == 'ATSC_digital_television'
    assert first['program_number'] == 3
    assert data['channels'][1]['minor_channel_number'] == 2
    assert data['channels'][1]['source_id'] == 2


def test_stt():
    # 2021-01-01 00:00:00 UTC is 1293494400 s after the GPS epoch, plus 18 leap seconds
    name, data = decode(long_section(0xCD, 0, stt_body(1293494418, 18)))
    assert name == 'STT'
    assert data['gps_utc_offset'] == 18
    assert data['utc_time'] == '2021-01-01T00:00:00+00:00'


def test_atsc_eit():
    name, data = decode(long_section(0xCB, 3, atsc_eit_body([(0x0101, 1293494418, 1800, 'News')])))
    assert name == 'EIT'
    assert data['source_id'] == 3
    event = data['events'][0]
    assert event['event_id'] == 0x0101
    assert event['length_in_seconds'] == 1800
    assert event['title'] == [{'language': 'eng', 'text': 'News'}]
    assert event['start_time'] == '2021-01-01T00:00:00+00:00'


def test_ett():
    etm_id = (3 << 16) | (0x0101 << 2) | 0x02
    body = bytes([0]) + struct.pack('>I', etm_id) + multiple_string('Evening news')
    name, data = decode(long_section(0xCC, 0, body))
    assert name == 'ETT'
    assert data['source_id'] == 3
    assert data['event_id'] == 0x0101
    assert data['extended_text_message'][0]['text'] == 'Evening news'


def test_tdt():
    name, data = decode(short_section(0x70, struct.pack('>H', 59215) + b'\x12\x34\x56'))
    assert name == 'TDT'
    assert data['utc_time'] == '2021-01-01T12:34:56+00:00'


def test_unknown_table_has_no_decoder():
    assert decoders.get_decoder(0x72) is None


def test_mjd_conversion():
    assert timestamps.mjd_to_date(59215) == (2021, 1, 1)
    assert timestamps.decode_bcd_duration(b'\x01\x30\x00') == 5400


def test_unknown_descriptor_keeps_raw_data():
    result = descriptors.decode_descriptors(bytes([0xF0, 2, 0xAB, 0xCD]))
    assert result == [{'tag': 0xF0, 'name': 'unknown-240', 'data': 'abcd'}]


def test_dvb_text_charset_selector():
    assert text.decode_dvb_text(b'\x15caf\xc3\xa9') == 'café'
    assert text.decode_dvb_text(b'plain') == 'plain'
