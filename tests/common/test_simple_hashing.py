import hashlib

import pytest

from photomedia.services.hashing.simple_hashing import SimpleHashing


def test_streams_in_chunks(tmp_path):
    p = tmp_path / "blob.bin"
    data = b"x" * 10_000 + b"tail"
    p.write_bytes(data)
    assert SimpleHashing(chunk_size=1024).content_hash(p) == hashlib.sha256(data).hexdigest()
    assert SimpleHashing("md5").content_hash(str(p)) == hashlib.md5(data).hexdigest()


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        SimpleHashing().content_hash(tmp_path / "nope")


def test_unknown_algorithm():
    with pytest.raises(ValueError):
        SimpleHashing("nope")
