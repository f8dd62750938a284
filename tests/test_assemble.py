#!/usr/bin/env python3

import os
import tempfile
import zipfile
from pathlib import Path

import pytest

from tests.helpers import archive_contents, make_archive, stored_archive
from zipsplit import (
    Bucket,
    Entry,
    SourceReadError,
    WriteError,
    cost,
    materialize,
    pack,
    read_entries,
)
from zipsplit.archive import RawZipWriter


def bucket_for(entries, filename):
    bucket = Bucket(filename=str(filename))
    for entry in entries:
        bucket.add(entry, cost(entry))
    return bucket


def test_copies_raw_bytes_and_metadata():
    with tempfile.TemporaryDirectory() as tmp:
        work = Path(tmp)
        info = zipfile.ZipInfo('docs/readme.txt', date_time=(2001, 2, 3, 4, 5, 6))
        info.compress_type = zipfile.ZIP_DEFLATED
        info.comment = b'keep me'
        info.external_attr = 0o644 << 16
        source = make_archive(work / 'src.zip', [(info, b'hello ' * 500), ('b.bin', os.urandom(300))],
                              zipfile.ZIP_DEFLATED)

        entries = read_entries(source)
        dest = materialize(bucket_for(entries, work / 'part.zip'), source)

        with zipfile.ZipFile(source) as zs, zipfile.ZipFile(dest) as zd:
            assert zd.testzip() is None
            for orig in zs.infolist():
                copied = zd.getinfo(orig.filename)
                assert copied.compress_type == orig.compress_type
                assert copied.compress_size == orig.compress_size
                assert copied.CRC == orig.CRC
                assert copied.date_time == orig.date_time
                assert copied.comment == orig.comment
                assert copied.external_attr == orig.external_attr
                assert zd.read(copied) == zs.read(orig)


def test_writes_in_bucket_order():
    with tempfile.TemporaryDirectory() as tmp:
        work = Path(tmp)
        source = stored_archive(work / 'src.zip', [10, 20, 30])
        entries = read_entries(source)
        dest = materialize(bucket_for(list(reversed(entries)), work / 'part.zip'), source)
        with zipfile.ZipFile(dest) as zf:
            assert zf.namelist() == ['f2', 'f1', 'f0']


def test_duplicate_names_each_copied_once():
    with tempfile.TemporaryDirectory() as tmp:
        work = Path(tmp)
        source = work / 'src.zip'
        with zipfile.ZipFile(source, 'w') as zf:
            zf.writestr('same.txt', b'first')
            with pytest.warns(UserWarning):
                zf.writestr('same.txt', b'second!')
        entries = read_entries(source)
        assert len(entries) == 2
        buckets = pack(entries, 10000)
        dest = materialize(buckets[0], source)
        with zipfile.ZipFile(dest) as zf:
            infos = zf.infolist()
            assert [i.filename for i in infos] == ['same.txt', 'same.txt']
            assert [zf.read(i) for i in infos] == [b'second!', b'first']


def test_missing_entry_fails_and_removes_partial_file():
    with tempfile.TemporaryDirectory() as tmp:
        work = Path(tmp)
        source = stored_archive(work / 'src.zip', [100, 200])
        entries = read_entries(source)

        good = materialize(bucket_for(entries[:1], work / 'out-001.zip'), source)
        ghost = Entry(name=b'ghost.txt', compress_size=5)
        with pytest.raises(WriteError, match='ghost.txt not found'):
            materialize(bucket_for([entries[1], ghost], work / 'out-002.zip'), source)

        assert good.exists()
        assert archive_contents(good).keys() == {'f0'}
        assert not (work / 'out-002.zip').exists()


def test_uncreatable_output_is_write_error():
    with tempfile.TemporaryDirectory() as tmp:
        work = Path(tmp)
        source = stored_archive(work / 'src.zip', [10])
        entries = read_entries(source)
        with pytest.raises(WriteError, match='Cannot create'):
            materialize(bucket_for(entries, work / 'no-such-dir' / 'part.zip'), source)


def test_unreadable_source():
    with tempfile.TemporaryDirectory() as tmp:
        work = Path(tmp)
        with pytest.raises(SourceReadError):
            read_entries(work / 'missing.zip')
        junk = work / 'junk.zip'
        junk.write_bytes(b'this is not a zip file at all')
        with pytest.raises(SourceReadError):
            read_entries(junk)
        with pytest.raises(SourceReadError):
            materialize(Bucket(filename=str(work / 'p.zip')), junk)
        assert not (work / 'p.zip').exists()


def test_encrypted_entry_without_descriptor_is_refused():
    with tempfile.TemporaryDirectory() as tmp:
        work = Path(tmp)
        source = make_archive(work / 'src.zip', [('secret.txt', b'0123456789')])
        data = bytearray(source.read_bytes())
        # set the encryption bit in the local header and the central record
        for sig in (b'PK\x03\x04', b'PK\x01\x02'):
            pos = data.find(sig)
            flag_at = pos + (6 if sig == b'PK\x03\x04' else 8)
            data[flag_at] |= 0x01
        source.write_bytes(bytes(data))

        entries = read_entries(source)
        with pytest.raises(WriteError, match='encrypted'):
            materialize(bucket_for(entries, work / 'part.zip'), source)
        assert not (work / 'part.zip').exists()


def test_writer_refuses_offsets_at_the_zip64_marker():
    with tempfile.TemporaryDirectory() as tmp:
        work = Path(tmp)
        source = stored_archive(work / 'src.zip', [10])
        with zipfile.ZipFile(source) as zf:
            [info] = zf.infolist()
        with open(source, 'rb') as src, open(work / 'part.zip', 'wb') as out:
            writer = RawZipWriter(out)
            writer.offset = 0xFFFFFFFF
            with pytest.raises(WriteError, match='Zip64'):
                writer.copy(info, src)


def main():
    test_copies_raw_bytes_and_metadata()
    test_writes_in_bucket_order()
    test_duplicate_names_each_copied_once()
    test_missing_entry_fails_and_removes_partial_file()
    test_uncreatable_output_is_write_error()
    test_unreadable_source()
    test_writer_refuses_offsets_at_the_zip64_marker()
    test_encrypted_entry_without_descriptor_is_refused()


if __name__ == '__main__':
    main()
