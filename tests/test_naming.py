"""tests for hashed filename formatting and parsing."""

from hashstatic.naming import format_name, parse_name, is_hashed_name, DIGEST_HEX_LEN

DIGEST = "b633a587c652d02386c4f16f8c6f6aab7352d97f16367c3c40576214372dd628"


class TestFormatName:

    def test_with_ext(self):
        assert format_name("x.txt", "0000") == "x-0000.txt"

    def test_no_ext(self):
        assert format_name("x", "0000") == "x-0000"

    def test_multiple_ext(self):
        assert format_name("x.tar.gz", "0000") == "x-0000.tar.gz"

    def test_no_hash(self):
        assert format_name("x", "") == "x"

    def test_no_filename(self):
        assert format_name("", "0000") == ""

    def test_with_dir(self):
        assert format_name("js/vendor/app.min.js", DIGEST) == f"js/vendor/app-{DIGEST}.min.js"

    def test_dot_in_dir_not_treated_as_ext(self):
        assert format_name("v1.2/app", "0000") == "v1.2/app-0000"

    def test_full_digest(self):
        assert format_name("baz.html", DIGEST) == f"baz-{DIGEST}.html"


class TestParseName:

    def test_with_ext(self):
        assert parse_name(f"baz-{DIGEST}.html") == ("baz.html", DIGEST)

    def test_no_ext(self):
        assert parse_name(f"baz-{DIGEST}") == ("baz", DIGEST)

    def test_multiple_ext(self):
        assert parse_name(f"baz-{DIGEST}.tar.gz") == ("baz.tar.gz", DIGEST)

    def test_short_hash(self):
        name = f"baz-{DIGEST[:-1]}.tar.gz"
        assert parse_name(name) == (name, "")

    def test_with_dir(self):
        assert parse_name(f"testdata/baz-{DIGEST}.tar.gz") == ("testdata/baz.tar.gz", DIGEST)

    def test_blank(self):
        assert parse_name("") == ("", "")

    def test_no_hash(self):
        assert parse_name("testdata/baz.html") == ("testdata/baz.html", "")

    def test_uppercase_hex_is_not_a_digest(self):
        name = f"baz-{DIGEST.upper()}.html"
        assert parse_name(name) == (name, "")

    def test_missing_dash(self):
        name = f"baz{DIGEST}.html"
        assert parse_name(name) == (name, "")

    def test_non_hex_char(self):
        bad = DIGEST[:-1] + "g"
        name = f"baz-{bad}.html"
        assert parse_name(name) == (name, "")

    def test_digest_only_stem(self):
        assert parse_name(f"-{DIGEST}.css") == (".css", DIGEST)

    def test_longer_hex_run_takes_last_64(self):
        name = f"baz-ff{DIGEST}.js"
        # "-" is not right before the last 64 chars
        assert parse_name(name) == (name, "")


class TestRoundTrip:

    def test_inverse(self):
        for path in ("x", "x.txt", "x.tar.gz", "a/b/c.min.js", "dir.v2/file"):
            assert parse_name(format_name(path, DIGEST)) == (path, DIGEST)

    def test_digest_length(self):
        assert DIGEST_HEX_LEN == len(DIGEST)


class TestIsHashedName:

    def test_hashed(self):
        assert is_hashed_name(f"baz-{DIGEST}.html")

    def test_plain(self):
        assert not is_hashed_name("baz.html")
        assert not is_hashed_name("")
