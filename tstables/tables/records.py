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


class TableRecord:
    """
    One decoded table.  data holds the table specific payload
    """

    def __init__(self, _table_id, _table_name, _pid, _data):
        self.table_id = _table_id
        self.table_name = _table_name
        self.pid = _pid
        self.data = _data

    def to_dict(self):
        record = {
            'table_id': self.table_id,
            'table_name': self.table_name,
            'pid': self.pid,
        }
        for key, value in self.data.items():
            if key not in record:
                record[key] = value
        return record

    def __repr__(self):
        return 'TableRecord(table_id=0x{:02x}, table_name={}, pid=0x{:04x})' \
            .format(self.table_id, self.table_name, self.pid)


class PsipEvent:
    """
    One PSI/PSIP section seen in pass-through mode
    """

    def __init__(self, _pid, _header, _section):
        self.pid = _pid
        self.table_id = _header['table_id']
        self.table_id_extension = _header.get('table_id_extension')
        self.version = _header.get('version_number')
        self.section_number = _header.get('section_number')
        self.last_section_number = _header.get('last_section_number')
        self.section = _section

    def to_dict(self):
        return {
            'table_id': self.table_id,
            'pid': self.pid,
            'table_id_extension': self.table_id_extension,
            'version': self.version,
            'section_number': self.section_number,
            'last_section_number': self.last_section_number,
            'section_length': len(self.section),
        }

    def __repr__(self):
        return 'PsipEvent(table_id=0x{:02x}, pid=0x{:04x})'.format(self.table_id, self.pid)


def make_table_filter(_table_name):
    """
    Returns the predicate used to select records by table name.
    No name accepts every record
    """
    if _table_name is None:
        return lambda _record: True
    return lambda _record: _record.table_name == _table_name
