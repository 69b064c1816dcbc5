import os
import sys
from HDFSPerms.Rules import *

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


class TestRuleParseError(HDFSPermsTestCase):
    def test_str(self):
        err = RuleParseError(3, "/data hdfs", "Too few fields")
        self.assertEqual(str(err), "Line 3: Too few fields: /data hdfs")
        self.assertEqual(err.lineno, 3)
        self.assertEqual(err.reason, "Too few fields")

        err = RuleParseError(None, "/data hdfs", "Too few fields")
        self.assertEqual(str(err), "Too few fields: /data hdfs")


class TestRule(HDFSPermsTestCase):
    def test_equality(self):
        self.assertEqual(AclRule("/a", "user::rw-"),
                         AclRule("/a", "user::rw-", lineno=12))
        self.assertNotEqual(AclRule("/a", "user::rw-"),
                            AclRule("/a", "user::rw-", recursive=True))
        self.assertEqual(OwnershipModeRule("/a", "u", "g", "644"),
                         OwnershipModeRule("/a", "u", "g", "644"))
        self.assertNotEqual(OwnershipModeRule("/a", "u", "g", "644"),
                            OwnershipModeRule("/a", "u", "g", "640"))
        self.assertNotEqual(AclRule("/a", "user::rw-"),
                            OwnershipModeRule("/a", "u", "g", "644",
                                              acl="user::rw-"))
        self.assertEqual(len(set([AclRule("/a", "user::rw-"),
                                  AclRule("/a", "user::rw-")])), 1)


class TestIsIgnored(HDFSPermsTestCase):
    def test_is_ignored(self):
        for line in ["", "\n", "   \t\n", "# comment", "   # indented\n",
                     "/data#1 ACL user::rw-", "/data/*#old hdfs hdfs 644\n"]:
            self.assertTrue(is_ignored(line), repr(line))
        for line in ["/data hdfs hdfs 644", "/data ACL user::rw- #note"]:
            self.assertFalse(is_ignored(line), repr(line))


class TestParseRule(HDFSPermsTestCase):
    def test_ignored(self):
        self.assertIsNone(parse_rule("# /data hdfs hdfs 644\n"))
        self.assertIsNone(parse_rule("\n"))

    def test_ownership(self):
        rule = parse_rule("/test/Lev1/*/something_else/* hdfs hdfs 420\n",
                          lineno=2)
        self.assertIsInstance(rule, OwnershipModeRule)
        self.assertEqual(rule.pattern, "/test/Lev1/*/something_else/*")
        self.assertEqual(rule.owner, "hdfs")
        self.assertEqual(rule.group, "hdfs")
        self.assertEqual(rule.mode, "420")
        self.assertIsNone(rule.acl)
        self.assertFalse(rule.recursive)
        self.assertFalse(rule.notranslate)
        self.assertEqual(rule.lineno, 2)
        self.assertEqual(rule.kind, "ownership")

    def test_ownership_with_acl(self):
        rule = parse_rule("/test/Lev1/*/* hdfs hdfs 640 "
                          "user::rw-,group::rw-,other::---")
        self.assertEqual(rule,
                         OwnershipModeRule("/test/Lev1/*/*", "hdfs", "hdfs",
                                           "640",
                                           acl="user::rw-,group::rw-,"
                                           "other::---"))

    def test_ownership_modifiers(self):
        rule = parse_rule("/test/Lev1/*/* hdfs hdfs 640 "
                          "user::rw-,group::rw-,other::--- --notranslate")
        self.assertEqual(rule.acl, "user::rw-,group::rw-,other::---")
        self.assertTrue(rule.notranslate)
        self.assertFalse(rule.recursive)

        rule = parse_rule("/data etl etl 750 -R")
        self.assertIsNone(rule.acl)
        self.assertTrue(rule.recursive)

        rule = parse_rule("/data etl etl 750 --recursive --notranslate")
        self.assertTrue(rule.recursive)
        self.assertTrue(rule.notranslate)

        rule = parse_rule("/data etl etl 750 --notranslate -R")
        self.assertTrue(rule.recursive)
        self.assertTrue(rule.notranslate)

    def test_symbolic_mode(self):
        rule = parse_rule("/data etl etl g+w")
        self.assertEqual(rule.mode, "g+w")

    def test_acl(self):
        rule = parse_rule("/test/Lev1/*/something/* ACL "
                          "user:hadoop:rw-,group:staff:rw-", lineno=5)
        self.assertIsInstance(rule, AclRule)
        self.assertEqual(rule.pattern, "/test/Lev1/*/something/*")
        self.assertEqual(rule.acl, "user:hadoop:rw-,group:staff:rw-")
        self.assertFalse(rule.recursive)
        self.assertFalse(rule.notranslate)
        self.assertEqual(rule.kind, "acl")
        self.assertEqual(rule.lineno, 5)

    def test_acl_modifiers(self):
        rule = parse_rule("/test/Lev1/vendor/something ACL "
                          "user:hadoop:rw-,group:staff:rw- -R")
        self.assertTrue(rule.recursive)
        self.assertFalse(rule.notranslate)

        rule = parse_rule("/a ACL default:group:staff:rw- --notranslate "
                          "--recursive")
        self.assertTrue(rule.recursive)
        self.assertTrue(rule.notranslate)

    def test_extra_whitespace(self):
        self.assertEqual(parse_rule("  /data\thdfs   hdfs 644  \n"),
                         OwnershipModeRule("/data", "hdfs", "hdfs", "644"))

    def test_too_few_fields(self):
        for line in ["/data", "/data hdfs", "/data ACL"]:
            self.assertRaises(RuleParseError, parse_rule, line)

    def test_missing_ownership_fields(self):
        self.assertRaises(RuleParseError, parse_rule, "/data hdfs hdfs")
        self.assertRaises(RuleParseError, parse_rule, "/data hdfs hdfs -R")
        self.assertRaises(RuleParseError, parse_rule,
                          "/data hdfs -R 644")

    def test_missing_acl(self):
        try:
            parse_rule("/data ACL -R", lineno=7)
        except RuleParseError:
            err = sys.exc_info()[1]
            self.assertEqual(err.lineno, 7)
            self.assertEqual(err.reason, "Missing ACL spec")
        else:
            self.fail("Missing ACL spec did not raise RuleParseError")

    def test_unknown_modifier(self):
        self.assertRaises(RuleParseError, parse_rule,
                          "/data hdfs hdfs 644 -r")
        self.assertRaises(RuleParseError, parse_rule,
                          "/data hdfs hdfs 644 user::rw- --force")
        self.assertRaises(RuleParseError, parse_rule,
                          "/data ACL user::rw- extra")
        self.assertRaises(RuleParseError, parse_rule,
                          "/data hdfs hdfs 644 user::rw- other::---")
