import pytest

from tstables.streams.file_source import FileSource, DEFAULT_CHUNK_SIZE


def test_chunks_in_file_order(tmp_path):
    (tmp_path / 'a.ts').write_bytes(b'0123456789')
    source = FileSource(tmp_path, 4)
    assert list(source.open_stream('a.ts')) == [b'0123', b'4567', b'89']


def test_each_open_is_a_fresh_sequence(tmp_path):
    (tmp_path / 'a.ts').write_bytes(b'abc')
    source = FileSource(tmp_path, 2)
    first = source.open_stream('a.ts')
    assert b''.join(first) == b'abc'
    assert list(first) == []
    assert b''.join(source.open_stream('a.ts')) == b'abc'


def test_missing_file_raises_on_first_read(tmp_path):
    chunks = FileSource(tmp_path).open_stream('missing.ts')
    with pytest.raises(FileNotFoundError):
        next(chunks)


def test_invalid_chunk_size_uses_default(tmp_path):
    assert FileSource(tmp_path, 0).chunk_size == DEFAULT_CHUNK_SIZE
    assert FileSource(tmp_path, None).chunk_size == DEFAULT_CHUNK_SIZE


def test_path_is_below_base(tmp_path):
    assert FileSource(tmp_path).get_path('x.ts') == tmp_path / 'x.ts'
