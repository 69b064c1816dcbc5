import os
import sys
import shutil
import tempfile
import lxml.etree
from io import StringIO
from lockfile import LockTimeout, AlreadyLocked, LockFailed
from HDFSPerms.Runner import *
from HDFSPerms.Client import HDFSClient
from HDFSPerms.Config import RunConfig
from HDFSPerms.Rules import OwnershipModeRule

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


RULES = """# ownership for the landing zone
/data/* hdfs hadoop 640

/data/a ACL user:etl:rw- -R
/data/b hdfs
"""


class TestRunner(HDFSPermsTestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def get_obj(self, **kwargs):
        self.executor = MockExecutor()
        self.executor.results["-ls"] = (LISTING, '', 0)
        config = RunConfig(**kwargs)
        runner = Runner(config,
                        client=HDFSClient(config, executor=self.executor))
        runner.logger = Mock()
        return runner

    def write_rules(self, data=RULES):
        rulefile = os.path.join(self.tmpdir, "rules")
        open(rulefile, "w").write(data)
        return rulefile

    def test_process(self):
        runner = self.get_obj()
        self.assertFalse(runner.process(StringIO(RULES)))
        self.assertEqual(self.executor.commands,
                         [["-ls", "-R", "/data/*"],
                          ["-chown", "hdfs:hadoop", "/data/a"],
                          ["-chmod", "750", "/data/a"],
                          ["-chown", "hdfs:hadoop", "/data/a/part-0000"],
                          ["-chmod", "640", "/data/a/part-0000"],
                          ["-ls", "-d", "/data/a"],
                          ["-setfacl", "-R", "-m", "user:etl:rwx",
                           "/data/a"],
                          ["-setfacl", "-R", "-m", "user:etl:rw-",
                           "/data/a/part-0000"]])
        self.assertEqual(runner.counts, dict(good=4, bad=0))
        # entries are only kept for a run report
        self.assertEqual(runner.states, [])

        # the malformed last line was skipped and recorded
        self.assertEqual(len(runner.errors), 1)
        self.assertEqual(runner.errors[0].lineno, 5)
        self.assertTrue(runner.logger.error.called)

    def test_process_clean(self):
        runner = self.get_obj()
        self.assertTrue(runner.process(StringIO("# nothing\n\n"
                                                "/data/* hdfs hadoop 640\n")))
        self.assertEqual(runner.errors, [])

    def test_process_failure_continues(self):
        runner = self.get_obj(report="report.xml")
        self.executor.results["-chown"] = ('', "Permission denied", 1)
        self.assertFalse(runner.process(StringIO("/data/* hdfs hadoop 640\n"
                                                 "/data/x ACL user::rw-\n")))
        self.assertEqual([c[0] for c in self.executor.commands],
                         ["-ls", "-chown", "-chmod", "-chown", "-chmod",
                          "-ls", "-setfacl", "-setfacl"])
        self.assertEqual([s[2] for s in runner.states],
                         [False, False, True, True])
        self.assertEqual(runner.counts, dict(good=2, bad=2))

    def test_process_unexpected_error(self):
        runner = self.get_obj(report="report.xml")
        runner.applier.apply = Mock()
        runner.applier.apply.side_effect = [ValueError("boom"), True]
        self.assertFalse(runner.process(StringIO("/data/* hdfs hadoop 640")))
        self.assertEqual([s[2] for s in runner.states], [False, True])

    def test_run(self):
        runner = self.get_obj(no_lock=True)
        runner.process = Mock()
        rulefile = self.write_rules()
        self.assertEqual(runner.run(rulefile), runner.process.return_value)
        self.assertEqual(runner.process.call_args[0][0].name, rulefile)
        self.assertIn("start", runner.times)
        self.assertIn("finish", runner.times)

    def test_run_missing_file(self):
        runner = self.get_obj(no_lock=True)
        self.assertRaises(IOError, runner.run,
                          os.path.join(self.tmpdir, "missing"))
        self.assertEqual(self.executor.calls, [])

    @patch("HDFSPerms.Runner.FileLock")
    def test_run_lock(self, mock_FileLock):
        lockfile = os.path.join(self.tmpdir, "lock")
        runner = self.get_obj(lockfile=lockfile)
        runner.process = Mock()
        runner.run(self.write_rules())
        mock_FileLock.assert_called_with(lockfile)
        mock_FileLock.return_value.acquire.assert_called_with(
            timeout=LOCK_TIMEOUT)
        self.assertTrue(mock_FileLock.return_value.release.called)

    @patch("HDFSPerms.Runner.FileLock")
    def test_run_lock_released_on_error(self, mock_FileLock):
        runner = self.get_obj(lockfile=os.path.join(self.tmpdir, "lock"))
        runner.process = Mock()
        runner.process.side_effect = KeyboardInterrupt
        self.assertRaises(KeyboardInterrupt, runner.run, self.write_rules())
        self.assertTrue(mock_FileLock.return_value.release.called)

    @patch("HDFSPerms.Runner.FileLock")
    def test_run_locked(self, mock_FileLock):
        runner = self.get_obj(lockfile=os.path.join(self.tmpdir, "lock"))
        runner.process = Mock()
        rulefile = self.write_rules()
        for exc in [LockTimeout, AlreadyLocked]:
            mock_FileLock.return_value.acquire.side_effect = exc("locked")
            self.assertRaises(RunLockError, runner.run, rulefile)
            self.assertFalse(runner.process.called)

    @patch("HDFSPerms.Runner.FileLock")
    def test_run_lock_failed(self, mock_FileLock):
        runner = self.get_obj(lockfile=os.path.join(self.tmpdir, "lock"))
        runner.process = Mock()
        mock_FileLock.return_value.acquire.side_effect = \
            LockFailed("read-only filesystem")
        runner.run(self.write_rules())
        self.assertTrue(runner.process.called)
        self.assertFalse(mock_FileLock.return_value.release.called)

    @patch("HDFSPerms.Runner.FileLock")
    def test_run_no_lock(self, mock_FileLock):
        lockfile = os.path.join(self.tmpdir, "lock")
        for kwargs in [dict(no_lock=True, lockfile=lockfile),
                       dict(dry_run=True, lockfile=lockfile),
                       dict()]:
            runner = self.get_obj(**kwargs)
            runner.process = Mock()
            runner.run(self.write_rules())
            self.assertTrue(runner.process.called)
        self.assertFalse(mock_FileLock.called)

    def test_run_real_lock(self):
        lockfile = os.path.join(self.tmpdir, "lock")
        runner = self.get_obj(lockfile=lockfile)
        runner.run(self.write_rules("/data/* hdfs hadoop 640\n"))
        self.assertFalse(os.path.exists(lockfile + ".lock"))

    def test_run_writes_report(self):
        report = os.path.join(self.tmpdir, "report.xml")
        runner = self.get_obj(no_lock=True, report=report)
        runner.run(self.write_rules())
        self.assertTrue(os.path.exists(report))
        xdata = lxml.etree.parse(report).getroot()
        self.assertEqual(xdata.tag, "Run")
        self.assertEqual(xdata.get("rulefile"),
                         os.path.join(self.tmpdir, "rules"))

    def test_generate_report(self):
        runner = self.get_obj(dry_run=True, report="report.xml")
        runner.process(StringIO(RULES))
        report = runner.generate_report("rules")
        self.assertEqual(report.get("rulefile"), "rules")

        flags = dict((f.get("name"), f.get("value"))
                     for f in report.findall("Flags/Flag"))
        self.assertEqual(flags, dict(dry_run="True", notranslate="False",
                                     log_current="False"))

        stats = report.find("Statistics")
        self.assertEqual(stats.get("total"), "4")
        self.assertEqual(stats.get("good"), "4")
        self.assertEqual(stats.get("bad"), "0")
        self.assertEqual(stats.get("state"), "dirty")

        good = stats.findall("Good/Entry")
        self.assertEqual(len(good), 4)
        self.assertEqual(good[0].get("path"), "/data/a")
        self.assertEqual(good[0].get("kind"), "ownership")
        self.assertEqual(good[0].get("mode"), "750")
        self.assertEqual(good[0].get("owner"), "hdfs")
        self.assertEqual(good[1].get("mode"), "640")
        self.assertEqual(good[2].get("kind"), "acl")
        self.assertEqual(good[2].get("acl"), "user:etl:rwx")
        self.assertIsNone(good[2].get("mode"))
        self.assertEqual(good[2].get("line"), "4")

        errors = report.findall("Errors/RuleError")
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].get("line"), "5")
        self.assertEqual(errors[0].text, "/data/b hdfs")

    def test_generate_report_clean(self):
        runner = self.get_obj(report="report.xml")
        runner._record(OwnershipModeRule("/data/a", "hdfs", "hadoop", "640",
                                         lineno=1),
                       make_entry(), False)
        stats = runner.generate_report().find("Statistics")
        self.assertEqual(stats.get("state"), "dirty")
        self.assertEqual(len(stats.findall("Bad/Entry")), 1)

        runner = self.get_obj(report="report.xml")
        stats = runner.generate_report().find("Statistics")
        self.assertEqual(stats.get("state"), "clean")
        self.assertEqual(stats.get("total"), "0")

    def test_write_report_failure(self):
        runner = self.get_obj()
        runner.write_report(os.path.join(self.tmpdir, "nope", "report.xml"))
        self.assertTrue(runner.logger.error.called)

    def test_record(self):
        rule = OwnershipModeRule("/data/a", "hdfs", "hadoop", "640")
        runner = self.get_obj()
        runner._record(rule, make_entry(), True)
        runner._record(rule, make_entry(), False)
        self.assertEqual(runner.counts, dict(good=1, bad=1))
        self.assertEqual(runner.states, [])

        runner = self.get_obj(report="report.xml")
        runner._record(rule, make_entry(), True)
        self.assertEqual(runner.counts, dict(good=1, bad=0))
        self.assertEqual(len(runner.states), 1)

    def test_process_listing_error(self):
        runner = self.get_obj()
        runner.resolver.resolve = Mock()

        def resolve(pattern):
            if pattern == "/data/*":
                raise UnicodeDecodeError("utf-8", b"\xe9", 0, 1,
                                         "invalid continuation byte")
            yield make_entry("/other")

        runner.resolver.resolve.side_effect = resolve
        self.assertFalse(runner.process(StringIO("/data/* hdfs hadoop 640\n"
                                                 "/other hdfs hadoop 640\n")))
        self.assertTrue(runner.logger.error.called)
        self.assertEqual(self.executor.commands,
                         [["-chown", "hdfs:hadoop", "/other"],
                          ["-chmod", "750", "/other"]])
        self.assertEqual(runner.counts, dict(good=1, bad=0))

    def test_process_listing_error_midway(self):
        runner = self.get_obj()
        runner.resolver.resolve = Mock()

        def resolve(pattern):
            yield make_entry("/data/a")
            raise OSError("connection reset")

        runner.resolver.resolve.side_effect = resolve
        self.assertFalse(runner.process_rule(
            OwnershipModeRule("/data/*", "hdfs", "hadoop", "640",
                              lineno=1)))
        self.assertEqual(runner.counts, dict(good=1, bad=0))

    def test_run_undecodable_rulefile(self):
        runner = self.get_obj(no_lock=True)
        self.executor.results["-ls"] = (
            "drwxr-x---   - hdfs hadoop          0 2014-05-01 10:00 "
            "/data/caf\udce9\n", '', 0)
        rulefile = os.path.join(self.tmpdir, "rules")
        open(rulefile, "wb").write(b"/data/caf\xe9 hdfs hadoop 640\n"
                                   b"/data/* hdfs hadoop 640\n")
        self.assertTrue(runner.run(rulefile))
        self.assertEqual(self.executor.commands[0],
                         ["-ls", "-d", "/data/caf\udce9"])
        self.assertIn(["-ls", "-R", "/data/*"], self.executor.commands)
        self.assertEqual(runner.counts, dict(good=2, bad=0))

    def test_generate_report_undecodable(self):
        runner = self.get_obj(report="report.xml")
        runner._record(OwnershipModeRule("/data/caf\udce9", "hdfs", "hadoop",
                                         "640", lineno=1),
                       make_entry("/data/caf\udce9"), True)
        report = runner.generate_report("rules")
        entry = report.find("Statistics/Good/Entry")
        self.assertEqual(entry.get("path"), "/data/caf\ufffd")
        self.assertEqual(entry.get("pattern"), "/data/caf\ufffd")
        lxml.etree.tostring(report, encoding="UTF-8")
