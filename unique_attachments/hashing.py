# hashing.py — content fingerprints used as canonical attachment names
# MD5 is used for naming and deduplication only, never for security.
# Two different byte sequences sharing a digest would be treated as the
# same attachment; that risk is accepted.

import hashlib

DIGEST_LENGTH = 32  # hex characters of an MD5 digest

def fingerprint(data: bytes) -> str:
    """Hex MD5 digest of the full byte content. Empty input has a digest too."""
    return hashlib.md5(data).hexdigest()

CHUNK_SIZE = 65536

def fingerprint_file(file_obj) -> str:
    """Same digest as fingerprint(), read from a binary file object in chunks."""
    h = hashlib.md5()
    for chunk in iter(lambda: file_obj.read(CHUNK_SIZE), b""):
        h.update(chunk)
    return h.hexdigest()
