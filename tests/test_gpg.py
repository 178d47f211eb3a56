"""Tests for gpg argument building and diagnostic parsing."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

from skpass.gpg import (
    decrypt_args,
    encrypt_args,
    list_keys,
    list_only_args,
    parse_recipient_key_ids,
)
from skpass.models import ProcessResult


class TestParseRecipientKeyIds:
    """The fifth field of a line is a key id only if it is 16 chars long."""

    def test_four_field_line_contributes_nothing(self):
        assert parse_recipient_key_ids("sec  rsa2048/ABCDEF0123456789 2020-01-01") == []

    def test_fifth_field_of_sixteen_chars_is_accepted(self):
        line = "pub  rsa2048/ABCDEF0123456789 2020-01-01 [E] ABCDEF0123456789"
        assert parse_recipient_key_ids(line) == ["ABCDEF0123456789"]

    def test_gpg_public_key_line(self):
        assert parse_recipient_key_ids("gpg: public key is 0123456789ABCDEF") == [
            "0123456789ABCDEF"
        ]

    def test_wrong_length_is_ignored(self):
        text = "gpg: public key is 0123456789ABCDE\ngpg: public key is 0123456789ABCDEF0"
        assert parse_recipient_key_ids(text) == []

    def test_sixteen_chars_in_other_position_is_ignored(self):
        assert parse_recipient_key_ids("ABCDEF0123456789 a b c d") == []
        assert parse_recipient_key_ids("a b c d e ABCDEF0123456789") == []

    def test_multiple_lines_keep_order(self):
        text = (
            "gpg: public key is BBBBBBBBBBBBBBB2\n"
            "gpg: encrypted with 2048-bit RSA key, ID BBBBBBBBBBBBBBB2, created 2020-01-01\n"
            "gpg: public key is AAAAAAAAAAAAAAA1\n"
        )
        assert parse_recipient_key_ids(text) == ["BBBBBBBBBBBBBBB2", "AAAAAAAAAAAAAAA1"]

    def test_empty_output(self):
        assert parse_recipient_key_ids("") == []


class TestArgs:
    """Command lines handed to gpg."""

    def test_decrypt_args(self):
        args = decrypt_args(Path("/s/a.gpg"))
        assert args[0] == "-d"
        assert "--batch" in args and "--no-encrypt-to" in args
        assert args[-1] == "/s/a.gpg"

    def test_encrypt_args_one_flag_per_recipient(self):
        args = encrypt_args(Path("/s/a.gpg"), ["K1", "K2"], overwrite=False)
        assert args == ["--batch", "-eq", "--output", "/s/a.gpg", "-r", "K1", "-r", "K2", "-"]

    def test_encrypt_args_overwrite(self):
        args = encrypt_args(Path("/s/a.gpg"), ["K1"], overwrite=True)
        assert "--yes" in args
        assert args[-1] == "-"

    def test_list_only_args(self):
        args = list_only_args(Path("/s/a.gpg"))
        assert "--list-only" in args
        assert "--keyid-format=long" in args


PUBLIC = """\
tru::1:1577836800:0:3:1:5
pub:u:2048:1:AAAAAAAAAAAAAAA1:1577836800:::u:::scESC::::::23::0:
fpr:::::::::1111AAAAAAAAAAAAAAA1:
uid:u::::1577836800::HASH::Alice <alice@example.org>::::::::::0:
sub:u:2048:1:DDDDDDDDDDDDDDD4:1577836800::::::e::::::23:
fpr:::::::::2222DDDDDDDDDDDDDDD4:
pub:f:2048:1:BBBBBBBBBBBBBBB2:1577836800:::f:::scESC::::::23::0:
fpr:::::::::3333BBBBBBBBBBBBBBB2:
uid:f::::1577836800::HASH::Bob <bob@example.org>::::::::::0:
"""

SECRET = """\
sec:u:2048:1:AAAAAAAAAAAAAAA1:1577836800:::u:::scESC:::+:::23::0:
fpr:::::::::1111AAAAAAAAAAAAAAA1:
uid:u::::1577836800::HASH::Alice <alice@example.org>::::::::::0:
"""


class TestListKeys:
    """Keyring listing via --with-colons."""

    def test_marks_secret_keys(self):
        executor = MagicMock()
        executor.run_blocking.side_effect = [
            ProcessResult(program="gpg", stdout=PUBLIC),
            ProcessResult(program="gpg", stdout=SECRET),
        ]
        users = list_keys(executor)

        assert [u.key_id for u in users] == ["AAAAAAAAAAAAAAA1", "BBBBBBBBBBBBBBB2"]
        alice, bob = users
        assert alice.have_secret is True
        assert alice.name == "Alice <alice@example.org>"
        assert alice.fingerprint == "1111AAAAAAAAAAAAAAA1"
        assert bob.have_secret is False

    def test_failed_listing_returns_empty(self):
        executor = MagicMock()
        executor.run_blocking.return_value = ProcessResult(
            program="gpg", exit_code=2, stderr="no keyring",
        )
        assert list_keys(executor) == []
