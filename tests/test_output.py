import io
import json

import tstables.common.output as output
from tstables.tables.records import TableRecord, PsipEvent


def test_print_table_record():
    out = io.StringIO()
    record = TableRecord(2, 'PMT', 0x100, {'program_number': 1, 'streams': []})
    output.print_table_record(record, out)
    lines = out.getvalue().split('\n')
    assert lines[0] == 'table id: 2'
    assert lines[1] == 'table name: PMT'
    assert lines[2] == 'table data:'
    data = json.loads('\n'.join(lines[3:]))
    assert data == {'table_id': 2, 'table_name': 'PMT', 'pid': 256,
                    'program_number': 1, 'streams': []}


def test_print_table_id():
    out = io.StringIO()
    header = {'table_id': 0xC8, 'section_syntax_indicator': True}
    output.print_table_id(PsipEvent(0x1FFB, header, b''), out)
    assert out.getvalue() == '200\n'
