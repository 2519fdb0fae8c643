import pytest

import tstables.common.exceptions as exceptions
import tstables.tables.packets as packets
from tstables.tables.crc import MpegCrc

from ts_builder import ts_packet, long_section, pat_body


def test_decode_header_fields():
    fields = packets.decode_ts_packet(ts_packet(0x1FFB, b'\x00\x01', pusi=True, cc=7))
    assert fields['pid'] == 0x1FFB
    assert fields['payload_unit_start_indicator'] is True
    assert fields['transport_error_indicator'] is False
    assert fields['cont_counter'] == 7
    assert fields['adaptation_field_control'] == 1
    assert len(fields['payload']) == 184
    assert fields['payload'][:2] == b'\x00\x01'


def test_adaptation_field_is_skipped():
    payload = bytes([3, 0x00, 0xAA, 0xBB]) + b'\x12\x34'
    fields = packets.decode_ts_packet(ts_packet(0x100, payload, afc=3))
    assert fields['adapt'] == b'\x00\xaa\xbb'
    assert fields['payload'][:2] == b'\x12\x34'


def test_adaptation_only_has_no_payload():
    fields = packets.decode_ts_packet(ts_packet(0x100, bytes([183]) + b'\x00' * 183, afc=2))
    assert 'payload' not in fields


def test_bad_sync_byte():
    packet = b'\x48' + ts_packet(0, b'')[1:]
    with pytest.raises(exceptions.MalformedStreamError):
        packets.decode_ts_packet(packet)


def test_adaptation_length_beyond_packet():
    with pytest.raises(exceptions.MalformedStreamError):
        packets.decode_ts_packet(ts_packet(0x100, bytes([200]), afc=3))


def test_crc_check_value():
    assert MpegCrc().calc(b'123456789') == 0x0376E6E7


def test_crc_verify():
    crc = MpegCrc()
    section = long_section(0x00, 1, pat_body([(1, 0x100)]))
    assert crc.verify(section)
    broken = section[:9] + bytes([section[9] ^ 0x01]) + section[10:]
    assert not crc.verify(broken)
