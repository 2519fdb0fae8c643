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
import struct

import tstables.common.exceptions as exceptions
import tstables.tables.decoders as decoders
import tstables.tables.packets as packets
import tstables.tables.sections as sections
from tstables.tables.crc import MpegCrc
from tstables.tables.records import TableRecord, PsipEvent

EVENT_DATA = 'data'
EVENT_PSIP = 'psip'

WATCHED_PIDS = {
    packets.PID_PAT: 'PAT',
    packets.PID_CAT: 'CAT',
    packets.PID_NIT: 'NIT',
    packets.PID_SDT: 'SDT/BAT',
    packets.PID_EIT: 'EIT',
    packets.PID_TDT: 'TDT/TOT',
    packets.PID_ATSC_BASE: 'PSIP',
}


def merge_section_data(_merged, _data):
    """
    Merges the payload of a later section into the first one.
    List fields are concatenated, other fields keep the first value
    """
    for key, value in _data.items():
        if key in _merged and isinstance(value, list) \
                and isinstance(_merged[key], list):
            _merged[key] = _merged[key] + value
        elif key not in _merged:
            _merged[key] = value
    return _merged


class TableParser:
    """
    Consumes transport stream bytes and emits tables through callbacks.
    Table mode emits TableRecord objects on the 'data' event, once per
    table version.  Pass-through mode emits a PsipEvent on the 'psip'
    event for every section seen.
    """

    def __init__(self, _pass_through=False, _verify_crc=True):
        self.logger = logging.getLogger(__name__)
        self.pass_through = _pass_through
        if _verify_crc:
            self.crc = MpegCrc()
        else:
            self.crc = None
        if _pass_through:
            self.event_name = EVENT_PSIP
        else:
            self.event_name = EVENT_DATA
        self.listeners = []
        self.buffer = bytearray()
        self.pids = dict(WATCHED_PIDS)
        self.assemblers = {}
        self.pending = {}
        self.versions = {}
        self.packet_count = 0
        self.section_count = 0

    def on(self, _event, _callback):
        if _event != self.event_name:
            raise ValueError(
                'Event {} is not produced in {} mode, use {}'
                .format(_event, self.mode_str(), self.event_name))
        self.listeners.append(_callback)
        return self

    def mode_str(self):
        if self.pass_through:
            return 'pass-through'
        return 'table'

    def emit(self, _obj):
        for callback in self.listeners:
            callback(_obj)

    def watch_pid(self, _pid, _label):
        if _pid not in self.pids:
            self.logger.debug('Watching pid 0x{:04x} for {}'.format(_pid, _label))
            self.pids[_pid] = _label

    def feed(self, _chunk):
        self.buffer += _chunk
        at = 0
        while at + packets.TS_PACKET_SIZE <= len(self.buffer):
            self.process_packet(bytes(self.buffer[at:at + packets.TS_PACKET_SIZE]))
            at += packets.TS_PACKET_SIZE
        del self.buffer[:at]

    def close(self):
        if self.buffer:
            self.logger.warning(
                'Stream ended with a partial packet of {} bytes'.format(len(self.buffer)))
            self.buffer = bytearray()
        self.logger.debug('{} packets, {} sections processed'
                          .format(self.packet_count, self.section_count))

    def parse_stream(self, _chunks):
        for chunk in _chunks:
            self.feed(chunk)
        self.close()

    def process_packet(self, _packet):
        self.packet_count += 1
        try:
            fields = packets.decode_ts_packet(_packet)
        except exceptions.MalformedStreamError as ex:
            raise exceptions.MalformedStreamError(
                '{} at packet {}'.format(str(ex), self.packet_count)) from ex
        if fields['transport_error_indicator']:
            self.logger.trace('Skipping packet {} with transport error set'
                              .format(self.packet_count))
            return
        pid = fields['pid']
        if pid not in self.pids:
            return
        assembler = self.assemblers.get(pid)
        if assembler is None:
            assembler = sections.SectionAssembler(pid)
            self.assemblers[pid] = assembler
        for section in assembler.push(fields):
            self.process_section(pid, section)

    def process_section(self, _pid, _section):
        header = sections.parse_section_header(_section)
        if header is None:
            self.logger.debug('Short section on pid 0x{:04x} dropped'.format(_pid))
            return
        if self.crc is not None and sections.has_crc(header) \
                and not self.crc.verify(_section):
            self.logger.warning(
                'CRC error on pid 0x{:04x} table_id 0x{:02x}, section dropped'
                .format(_pid, header['table_id']))
            return
        self.section_count += 1
        self.logger.trace('Section pid=0x{:04x} table_id=0x{:02x} length={}'
                          .format(_pid, header['table_id'], len(_section)))
        self.learn_pids(_pid, header, _section)
        if self.pass_through:
            self.emit(PsipEvent(_pid, header, _section))
        else:
            self.process_table(_pid, header, _section)

    def learn_pids(self, _pid, _header, _section):
        """
        PMT PIDs come from the PAT, ATSC EIT and ETT PIDs from the MGT
        """
        table_id = _header['table_id']
        if table_id == decoders.TABLE_ID_PAT and _pid == packets.PID_PAT:
            pat = self.decode(decoders.decode_pat, _pid, _header, _section)
            for program in pat.get('programs', []):
                self.watch_pid(program['pid'], 'PMT')
        elif table_id == decoders.TABLE_ID_MGT and _pid == packets.PID_ATSC_BASE:
            mgt = self.decode(decoders.decode_mgt, _pid, _header, _section)
            for table in mgt.get('tables', []):
                if decoders.is_mgt_event_table(table['table_type']):
                    self.watch_pid(table['pid'], table['table_type_name'])

    def process_table(self, _pid, _header, _section):
        table_id = _header['table_id']
        decoder = decoders.get_decoder(table_id)
        if decoder is None:
            self.logger.trace('No decoder for table_id 0x{:02x} on pid 0x{:04x}'
                              .format(table_id, _pid))
            return
        table_name, decode_func = decoder

        if table_id in decoders.TIME_TABLES or not _header['section_syntax_indicator']:
            self.emit_record(table_id, table_name, _pid,
                             self.decode(decode_func, _pid, _header, _section))
            return
        if not _header['current_next_indicator']:
            # next version, not applicable yet
            return
        if _header['section_number'] > _header['last_section_number']:
            self.logger.debug('Section {} beyond last section {} on pid 0x{:04x} dropped'
                              .format(_header['section_number'],
                                      _header['last_section_number'], _pid))
            return

        version = _header['version_number']
        key = (_pid, table_id, _header['table_id_extension'])
        if table_id in decoders.PER_SECTION_TABLES:
            key = key + (_header['section_number'],)
        if self.versions.get(key) == version:
            return

        if table_id in decoders.PER_SECTION_TABLES or _header['last_section_number'] == 0:
            self.versions[key] = version
            self.emit_record(table_id, table_name, _pid,
                             self.decode(decode_func, _pid, _header, _section))
            return

        pending = self.pending.get(key)
        if pending is None or pending['version'] != version \
                or pending['last_section_number'] != _header['last_section_number']:
            pending = {
                'version': version,
                'last_section_number': _header['last_section_number'],
                'sections': {}}
            self.pending[key] = pending
        pending['sections'][_header['section_number']] = (_header, _section)
        if len(pending['sections']) <= pending['last_section_number']:
            return

        del self.pending[key]
        self.versions[key] = version
        merged = None
        for section_number in sorted(pending['sections']):
            header, section = pending['sections'][section_number]
            data = self.decode(decode_func, _pid, header, section)
            if merged is None:
                merged = data
            else:
                merged = merge_section_data(merged, data)
        self.emit_record(table_id, table_name, _pid, merged)

    def decode(self, _decode_func, _pid, _header, _section):
        try:
            return _decode_func(_section, _header)
        except (IndexError, struct.error):
            self.logger.warning(
                'Truncated table_id 0x{:02x} section on pid 0x{:04x}'
                .format(_header['table_id'], _pid))
            return {}

    def emit_record(self, _table_id, _table_name, _pid, _data):
        self.logger.debug('{} table_id=0x{:02x} on pid 0x{:04x}'
                          .format(_table_name, _table_id, _pid))
        self.emit(TableRecord(_table_id, _table_name, _pid, _data))


def parse_stream(_chunks, _callback, _pass_through=False, _verify_crc=True):
    """
    Parses a sequence of byte chunks, calling _callback for every record
    or event the parser emits
    """
    parser = TableParser(_pass_through, _verify_crc)
    parser.on(parser.event_name, _callback)
    parser.parse_stream(_chunks)
    return parser
