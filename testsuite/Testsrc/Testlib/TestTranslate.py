import os
import sys
from HDFSPerms.Translate import *

# add all parent testsuite directories to sys.path to allow (most)
# relative imports
path = os.path.dirname(__file__)
while path != "/":
    if os.path.basename(path).lower().startswith("test"):
        sys.path.append(path)
    if os.path.basename(path) == "testsuite":
        break
    path = os.path.dirname(path)
from common import *


class TestTranslateMode(HDFSPermsTestCase):
    def test_is_numeric_mode(self):
        for mode in ["644", "0644", "4750", "000", "777"]:
            self.assertTrue(is_numeric_mode(mode), mode)
        for mode in ["u+x", "g-w", "a=r", "64", "06444", "648", "", "rwx"]:
            self.assertFalse(is_numeric_mode(mode), mode)

    def test_translate(self):
        # tuples of (file mode, directory mode)
        tests = [("644", "755"),
                 ("600", "700"),
                 ("640", "750"),
                 ("444", "555"),
                 ("420", "530"),
                 ("000", "000"),
                 ("755", "755"),
                 ("711", "711"),
                 ("0644", "0755"),
                 ("4750", "4750"),
                 ("4640", "4750"),
                 ("2640", "2750"),
                 ("1777", "1777")]
        for mode, expected in tests:
            self.assertEqual(translate_mode(mode), expected,
                             "%s should translate to %s" % (mode, expected))

    def test_translate_idempotent(self):
        for mode in ["644", "600", "4640", "420", "000", "751"]:
            once = translate_mode(mode)
            self.assertEqual(translate_mode(once), once)

    def test_translate_only_adds_bits(self):
        for mode in ["644", "600", "4640", "420", "751", "246"]:
            translated = translate_mode(mode)
            for before, after in zip(mode, translated):
                self.assertEqual(int(before) & int(after), int(before))

    def test_symbolic_passthrough(self):
        for mode in ["u+x", "g-w,o-rwx", "a=rX", "06444", "888"]:
            self.assertEqual(translate_mode(mode), mode)


class TestTranslateAcl(HDFSPermsTestCase):
    def test_translate_acl_entry(self):
        tests = [("user::rw-", "user::rwx"),
                 ("user:hadoop:rw-", "user:hadoop:rwx"),
                 ("group:staff:r--", "group:staff:r-x"),
                 ("default:group:staff:rw-", "default:group:staff:rwx"),
                 ("mask::rwx", "mask::rwx"),
                 ("other::---", "other::---"),
                 ("default:other::---", "default:other::---")]
        for entry, expected in tests:
            self.assertEqual(translate_acl_entry(entry), expected)

    def test_translate_acl(self):
        self.assertEqual(
            translate_acl("user::rw-,group::rw-,other::---"),
            "user::rwx,group::rwx,other::---")
        self.assertEqual(
            translate_acl("user:hadoop:rw-,group:staff:rw-"),
            "user:hadoop:rwx,group:staff:rwx")
        self.assertEqual(
            translate_acl("default:user:etl:r--,user:etl:---"),
            "default:user:etl:r-x,user:etl:---")

    def test_translate_acl_preserves_order(self):
        spec = "other::---,user::rw-,group:b:rw-,group:a:r--"
        self.assertEqual([e.split(":")[:2] for e in
                          translate_acl(spec).split(",")],
                         [e.split(":")[:2] for e in spec.split(",")])

    def test_translate_acl_drops_empty_entries(self):
        self.assertEqual(translate_acl("user::rw-,,other::---,"),
                         "user::rwx,other::---")

    def test_translate_acl_idempotent(self):
        spec = "user::rw-,group:staff:r--,other::---"
        once = translate_acl(spec)
        self.assertEqual(translate_acl(once), once)
