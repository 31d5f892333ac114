"""naming.py - put a content digest into a filename and take it back out.

    format_name("js/app.min.js", "b633...d628")  -> "js/app-b633...d628.min.js"
    parse_name("js/app-b633...d628.min.js")      -> ("js/app.min.js", "b633...d628")

the digest goes right before the first dot of the base name, so
x.tar.gz keeps .tar.gz whole. no dot means the digest is appended.
paths are always "/"-separated, whatever the host OS.

pure functions, no state. safe to call from templates.
"""

import posixpath

DIGEST_HEX_LEN = 64
HEX_CHARS = frozenset("0123456789abcdef")


def _split(filename: str) -> tuple[str, str, str]:
    """dir, stem, ext. ext starts at the first dot of the base name."""
    dirname, base = posixpath.split(filename)
    i = base.find(".")
    if i == -1:
        return dirname, base, ""
    return dirname, base[:i], base[i:]


def _join(dirname: str, base: str) -> str:
    if not dirname:
        return base
    return posixpath.normpath(posixpath.join(dirname, base))


def _has_digest_suffix(stem: str) -> bool:
    """stem ends with "-" plus exactly DIGEST_HEX_LEN lowercase hex chars."""
    if len(stem) < DIGEST_HEX_LEN + 1:
        return False
    if stem[-DIGEST_HEX_LEN - 1] != "-":
        return False
    for c in stem[-DIGEST_HEX_LEN:]:
        if c not in HEX_CHARS:
            return False
    return True


def format_name(filename: str, digest_hex: str) -> str:
    """insert digest_hex before the extension of filename.

    blank filename gives blank, blank digest gives filename back untouched.
    """
    if not filename:
        return ""
    if not digest_hex:
        return filename

    dirname, stem, ext = _split(filename)
    return _join(dirname, f"{stem}-{digest_hex}{ext}")


def parse_name(filename: str) -> tuple[str, str]:
    """split a hashed filename into (base path, digest hex).

    a name without a full-length digest comes back unchanged with an
    empty digest. a blank name gives ("", "").
    """
    if not filename:
        return "", ""

    dirname, stem, ext = _split(filename)
    if not _has_digest_suffix(stem):
        return filename, ""

    base = stem[:-DIGEST_HEX_LEN - 1] + ext
    return _join(dirname, base), stem[-DIGEST_HEX_LEN:]


def is_hashed_name(filename: str) -> bool:
    return bool(parse_name(filename)[1])
