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

import json
import sys


def to_json(_record):
    return json.dumps(_record.to_dict(), indent=2, default=str)


def print_table_record(_record, _out=None):
    """
    Writes the table id, table name and the full
    record as indented JSON
    """
    out = _out or sys.stdout
    out.write('table id: {}\n'.format(_record.table_id))
    out.write('table name: {}\n'.format(_record.table_name))
    out.write('table data:\n{}\n'.format(to_json(_record)))
    out.flush()


def print_table_id(_event, _out=None):
    out = _out or sys.stdout
    out.write('{}\n'.format(_event.table_id))
    out.flush()
