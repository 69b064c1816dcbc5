import os
import sys
import HDFSPerms.Options
from HDFSPerms.CLI import *
from HDFSPerms.Runner import RunLockError

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


class TestCLI(HDFSPermsTestCase):
    def setUp(self):
        patcher = patch("HDFSPerms.Logger.setup_logging")
        self.mock_setup_logging = patcher.start()
        self.addCleanup(patcher.stop)

        patcher = patch.dict(os.environ)
        patcher.start()
        self.addCleanup(patcher.stop)
        os.environ.pop("HADOOP_CMD", None)

    def assertExits(self, status, argv):
        try:
            CLI(argv=argv)
        except SystemExit:
            self.assertEqual(sys.exc_info()[1].code, status)
        else:
            self.fail("%s did not exit" % argv)

    def test_parse(self):
        CLI(argv=["rules.txt"])
        setup = HDFSPerms.Options.setup
        self.assertEqual(setup.rulefile, "rules.txt")
        self.assertFalse(setup.dry_run)
        self.assertFalse(setup.echo)
        self.assertFalse(setup.log_current)
        self.assertFalse(setup.notranslate)
        self.assertFalse(setup.no_lock)
        self.assertFalse(setup.quiet)
        self.assertFalse(setup.console_only)
        self.assertIsNone(setup.report)
        self.assertEqual(setup.hadoop, "hadoop")
        self.assertIsNone(setup.timeout)
        self.assertEqual(setup.lockfile, "/var/lock/hdfs-perms.run")
        self.assertEqual(setup.log_directory, "/var/log/hdfs-perms")
        self.assertTrue(self.mock_setup_logging.called)

    def test_parse_flags(self):
        CLI(argv=["-n", "-v", "-l", "-x", "-O", "-q", "-c",
                  "--report", "/tmp/report.xml", "rules.txt"])
        setup = HDFSPerms.Options.setup
        self.assertTrue(setup.dry_run)
        self.assertTrue(setup.echo)
        self.assertTrue(setup.log_current)
        self.assertTrue(setup.notranslate)
        self.assertTrue(setup.no_lock)
        self.assertTrue(setup.quiet)
        self.assertTrue(setup.console_only)
        self.assertEqual(setup.report, "/tmp/report.xml")

    def test_parse_long_flags(self):
        CLI(argv=["--nochange", "--verbose", "--log_current",
                  "--notranslate", "--no-lock", "--quiet", "rules.txt"])
        setup = HDFSPerms.Options.setup
        self.assertTrue(setup.dry_run)
        self.assertTrue(setup.echo)
        self.assertTrue(setup.log_current)
        self.assertTrue(setup.notranslate)
        self.assertTrue(setup.no_lock)
        self.assertTrue(setup.quiet)

    def test_hadoop_from_environment(self):
        os.environ["HADOOP_CMD"] = "/opt/hadoop/bin/hadoop"
        CLI(argv=["rules.txt"])
        self.assertEqual(HDFSPerms.Options.setup.hadoop,
                         "/opt/hadoop/bin/hadoop")

        del os.environ["HADOOP_CMD"]
        CLI(argv=["rules.txt"])
        self.assertEqual(HDFSPerms.Options.setup.hadoop, "hadoop")

    def test_unknown_flag(self):
        self.assertExits(1, ["--bogus", "rules.txt"])
        self.assertExits(1, ["rules.txt", "other.txt"])

    def test_help(self):
        self.assertExits(0, ["-h"])

    @patch("HDFSPerms.CLI.Runner")
    def test_run_no_rulefile(self, mock_Runner):
        cli = CLI(argv=["-n"])
        cli.logger = Mock()
        self.assertEqual(cli.run(), 1)
        self.assertTrue(cli.logger.error.called)
        self.assertFalse(mock_Runner.called)

    @patch("HDFSPerms.CLI.Runner")
    def test_run(self, mock_Runner):
        cli = CLI(argv=["-n", "-x", "rules.txt"])
        self.assertEqual(cli.run(), 0)
        config = mock_Runner.call_args[0][0]
        self.assertTrue(config.dry_run)
        self.assertTrue(config.notranslate)
        self.assertFalse(config.echo)
        self.assertEqual(config.hadoop, "hadoop")
        mock_Runner.return_value.run.assert_called_with("rules.txt")

    @patch("HDFSPerms.CLI.Runner")
    def test_run_failed_rule(self, mock_Runner):
        # failures applying rules do not change the exit status
        mock_Runner.return_value.run.return_value = False
        self.assertEqual(CLI(argv=["rules.txt"]).run(), 0)

    @patch("HDFSPerms.CLI.Runner")
    def test_run_unreadable(self, mock_Runner):
        mock_Runner.return_value.run.side_effect = \
            IOError(2, "No such file or directory")
        cli = CLI(argv=["rules.txt"])
        cli.logger = Mock()
        self.assertEqual(cli.run(), 1)
        self.assertTrue(cli.logger.error.called)

    @patch("HDFSPerms.CLI.Runner")
    def test_run_locked(self, mock_Runner):
        mock_Runner.return_value.run.side_effect = RunLockError("locked")
        cli = CLI(argv=["rules.txt"])
        cli.logger = Mock()
        self.assertEqual(cli.run(), 1)
        cli.logger.error.assert_called_with("locked")

    @patch("HDFSPerms.CLI.Runner")
    def test_main(self, mock_Runner):
        self.assertEqual(main(["rules.txt"]), 0)
        self.assertEqual(main([]), 1)
