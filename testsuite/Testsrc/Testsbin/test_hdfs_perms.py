import os
import sys
import stat
import shutil
import tempfile
import lxml.etree
from HDFSPerms.CLI import main

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


#: A stand-in for the hadoop client that records its arguments and
#: prints a canned listing
FAKE_HADOOP = """#!/bin/sh
echo "$@" >> %(calls)s
case "$2" in
    -ls) cat %(listing)s ;;
    -getfacl) echo "# file: $3"; echo "user::rwx" ;;
    -chmod) [ -n "$HADOOP_FAIL_CHMOD" ] && echo "denied" >&2 && exit 1 ;;
esac
exit 0
"""


class TestHDFSPerms(HDFSPermsTestCase):
    def setUp(self):
        self.basedir = tempfile.mkdtemp()
        self.calls = os.path.join(self.basedir, "calls")
        self.listing = os.path.join(self.basedir, "listing")
        open(self.listing, "w").write(LISTING)
        hadoop = os.path.join(self.basedir, "hadoop")
        open(hadoop, "w").write(FAKE_HADOOP % dict(calls=self.calls,
                                                   listing=self.listing))
        os.chmod(hadoop, stat.S_IRWXU)

        patcher = patch.dict(os.environ, HADOOP_CMD=hadoop)
        patcher.start()
        self.addCleanup(patcher.stop)
        os.environ.pop("HADOOP_FAIL_CHMOD", None)

        patcher = patch("HDFSPerms.Logger.setup_logging")
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self):
        shutil.rmtree(self.basedir)

    def write_rules(self, data):
        rulefile = os.path.join(self.basedir, "rules")
        open(rulefile, "w").write(data)
        return rulefile

    def get_calls(self):
        if not os.path.exists(self.calls):
            return []
        calls = open(self.calls, encoding="utf-8", errors="surrogateescape")
        return [l.split() for l in calls.read().splitlines()]

    def test_apply(self):
        rulefile = self.write_rules(
            "# landing zone\n"
            "/data/* hdfs hadoop 640 user::rw-,other::---\n")
        self.assertEqual(main(["-c", "-O", rulefile]), 0)
        self.assertEqual(self.get_calls(),
                         [["fs", "-ls", "-R", "/data/*"],
                          ["fs", "-chown", "hdfs:hadoop", "/data/a"],
                          ["fs", "-chmod", "750", "/data/a"],
                          ["fs", "-setfacl", "-m", "user::rwx,other::---",
                           "/data/a"],
                          ["fs", "-chown", "hdfs:hadoop",
                           "/data/a/part-0000"],
                          ["fs", "-chmod", "640", "/data/a/part-0000"],
                          ["fs", "-setfacl", "-m", "user::rw-,other::---",
                           "/data/a/part-0000"]])

    def test_notranslate(self):
        rulefile = self.write_rules("/data/a hdfs hadoop 640\n")
        self.assertEqual(main(["-c", "-O", "-x", rulefile]), 0)
        self.assertIn(["fs", "-chmod", "640", "/data/a"], self.get_calls())

    def test_dry_run(self):
        rulefile = self.write_rules("/data/* hdfs hadoop 640\n"
                                    "/data/a ACL group:staff:r-- -R\n")
        self.assertEqual(main(["-c", "-n", "-l", rulefile]), 0)
        self.assertEqual([c[1] for c in self.get_calls()],
                         ["-ls", "-ls", "-getfacl", "-ls", "-getfacl",
                          "-ls", "-getfacl", "-getfacl"])

    def test_failures_are_not_fatal(self):
        os.environ["HADOOP_FAIL_CHMOD"] = "1"
        rulefile = self.write_rules("/data/* hdfs hadoop 640\n"
                                    "broken line\n"
                                    "/data/a ACL user::rw-\n")
        report = os.path.join(self.basedir, "report.xml")
        self.assertEqual(main(["-c", "-O", "--report", report, rulefile]),
                         0)
        self.assertEqual([c[1] for c in self.get_calls()],
                         ["-ls", "-chown", "-chmod", "-chown", "-chmod",
                          "-ls", "-setfacl", "-setfacl"])

        xdata = lxml.etree.parse(report).getroot()
        stats = xdata.find("Statistics")
        self.assertEqual(stats.get("state"), "dirty")
        self.assertEqual(stats.get("bad"), "2")
        self.assertEqual(stats.get("good"), "2")
        self.assertEqual(len(xdata.findall("Errors/RuleError")), 1)

    def test_missing_rulefile(self):
        self.assertEqual(main(["-c", "-O",
                               os.path.join(self.basedir, "missing")]), 1)
        self.assertEqual(main(["-c"]), 1)
        self.assertEqual(self.get_calls(), [])

    def test_undecodable_listing(self):
        open(self.listing, "wb").write(
            b"Found 1 items\n"
            b"drwxr-x---   - hdfs hadoop          0 2014-05-01 10:00 "
            b"/data/caf\xe9\n")
        rulefile = self.write_rules("/data/* hdfs hadoop 640\n"
                                    "/other hdfs hadoop 640\n")
        self.assertEqual(main(["-c", "-O", rulefile]), 0)
        calls = self.get_calls()
        self.assertIn(["fs", "-chmod", "750", "/data/caf\udce9"], calls)
        self.assertIn(["fs", "-ls", "-d", "/other"], calls)
        # the path goes back to the client byte for byte
        self.assertIn(b"-chown hdfs:hadoop /data/caf\xe9\n",
                      open(self.calls, "rb").read())

    def test_undecodable_rulefile(self):
        rulefile = os.path.join(self.basedir, "rules")
        open(rulefile, "wb").write(b"/data/caf\xe9 hdfs hadoop 640\n"
                                   b"/data/* hdfs hadoop 640\n")
        self.assertEqual(main(["-c", "-O", rulefile]), 0)
        calls = self.get_calls()
        self.assertEqual(calls[0], ["fs", "-ls", "-d", "/data/caf\udce9"])
        self.assertIn(["fs", "-ls", "-R", "/data/*"], calls)
        self.assertIn(["fs", "-chmod", "640", "/data/a/part-0000"], calls)
