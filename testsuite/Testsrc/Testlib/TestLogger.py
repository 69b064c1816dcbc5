import os
import sys
import stat
import struct
import time
import shutil
import logging
import tempfile
import HDFSPerms.Options
from HDFSPerms.Logger import *

# add all parent testsuite directories to sys.path to allow (most)
# relative imports
path = os.path.dirname(__file__)
while path != '/':
    if os.path.basename(path).lower().startswith("test"):
        sys.path.append(path)
    if os.path.basename(path) == "testsuite":
        break
    path = os.path.dirname(path)
from common import *


class TestTermiosFormatter(HDFSPermsTestCase):
    def get_record(self, msg):
        return logging.LogRecord("test", logging.INFO, __file__, 1, msg,
                                 None, None)

    def test_format(self):
        formatter = TermiosFormatter()
        formatter.width = 80
        self.assertEqual(formatter.format(self.get_record("Updating")),
                         "Updating")
        self.assertEqual(formatter.format(self.get_record("a\nb")), "a\nb")

    def test_format_wrap(self):
        formatter = TermiosFormatter()
        formatter.width = 10
        self.assertEqual(formatter.format(self.get_record("x" * 25)),
                         "\n".join(["x" * 10, "x" * 10, "x" * 5]))

    def test_format_date(self):
        formatter = TermiosFormatter(datefmt=DATE_FORMAT)
        formatter.width = 32768
        record = self.get_record("Updating single item: /data")
        expected = "%s Updating single item: /data" % \
            time.strftime(DATE_FORMAT, time.localtime(record.created))
        self.assertEqual(formatter.format(record), expected)

    def test_format_exact_width(self):
        formatter = TermiosFormatter()
        formatter.width = 10
        self.assertEqual(formatter.format(self.get_record("x" * 20)),
                         "\n".join(["x" * 10, "x" * 10]))
        self.assertEqual(formatter.format(self.get_record("a\n\nb")),
                         "a\n\nb")

    @patch("HDFSPerms.Logger.fcntl.ioctl")
    def test_terminal_width(self, mock_ioctl):
        mock_ioctl.return_value = struct.pack('hhhh', 24, 132, 0, 0)
        self.assertEqual(terminal_width(), 132)

        mock_ioctl.return_value = struct.pack('hhhh', 0, 0, 0, 0)
        self.assertEqual(terminal_width(), 80)

        mock_ioctl.side_effect = IOError
        self.assertEqual(terminal_width(default=100), 100)


class TestLogfiles(HDFSPermsTestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()

    def tearDown(self):
        for handler in logging.root.handlers[:]:
            if handler.get_name() == "file":
                handler.close()
                logging.root.removeHandler(handler)
        shutil.rmtree(self.tmpdir)

    def test_command_level(self):
        self.assertEqual(logging.getLevelName(COMMAND), "COMMAND")
        self.assertTrue(logging.INFO < COMMAND < logging.WARNING)

    def test_logfile_name(self):
        when = time.mktime((2014, 5, 1, 10, 2, 3, 0, 0, -1))
        self.assertEqual(logfile_name("/var/log/hdfs-perms", "hdfs-perms",
                                      when=when),
                         "/var/log/hdfs-perms/"
                         "hdfs-perms_2014_05_01_10_02_03.log")

    def test_logfile_name_defaults(self):
        name = logfile_name(self.tmpdir)
        self.assertTrue(name.startswith(os.path.join(self.tmpdir,
                                                     "hdfs-perms_")))
        self.assertTrue(name.endswith(".log"))

    def test_add_file_handler(self):
        logdir = os.path.join(self.tmpdir, "logs")
        logfile = os.path.join(logdir, "hdfs-perms.log")
        self.assertEqual(add_file_handler(logfile, level=logging.DEBUG),
                         logfile)
        self.assertEqual(stat.S_IMODE(os.stat(logdir).st_mode), 0o700)
        self.assertEqual(stat.S_IMODE(os.stat(logfile).st_mode), 0o600)
        handlers = [h for h in logging.root.handlers
                    if h.get_name() == "file"]
        self.assertEqual(len(handlers), 1)
        self.assertEqual(handlers[0].level, logging.DEBUG)

    def test_file_handler_undecodable_path(self):
        logfile = os.path.join(self.tmpdir, "hdfs-perms.log")
        add_file_handler(logfile)
        handler = [h for h in logging.root.handlers
                   if h.get_name() == "file"][0]
        handler.handle(logging.LogRecord("test", logging.INFO, __file__, 1,
                                         "Updating single item: %s",
                                         ("/data/caf\udce9",), None))
        handler.flush()
        self.assertIn("Updating single item: /data/caf\\udce9",
                      open(logfile).read())


class TestSetupLogging(HDFSPermsTestCase):
    def setUp(self):
        if hasattr(logging, "already_setup"):
            self.already_setup = logging.already_setup
            del logging.already_setup
        else:
            self.already_setup = None

    def tearDown(self):
        if hasattr(logging, "already_setup"):
            del logging.already_setup
        if self.already_setup is not None:
            logging.already_setup = self.already_setup

    def _setup(self, **kwargs):
        options = dict(quiet=False, console_only=False,
                       log_directory="/var/log/hdfs-perms")
        options.update(kwargs)
        return patch.multiple(HDFSPerms.Options.setup, create=True,
                              **options)

    @patch("HDFSPerms.Logger.add_file_handler")
    @patch("HDFSPerms.Logger.add_console_handler")
    def test_setup_logging(self, mock_add_console_handler,
                           mock_add_file_handler):
        with self._setup():
            logfile = setup_logging()
        mock_add_console_handler.assert_called_with(level=logging.INFO)
        mock_add_file_handler.assert_called_with(logfile,
                                                 level=logging.DEBUG)
        self.assertTrue(logfile.startswith("/var/log/hdfs-perms/"
                                           "hdfs-perms_"))

        # only set up once
        mock_add_console_handler.reset_mock()
        self.assertEqual(setup_logging(), logfile)
        self.assertFalse(mock_add_console_handler.called)

    @patch("HDFSPerms.Logger.add_file_handler")
    @patch("HDFSPerms.Logger.add_console_handler")
    def test_setup_logging_quiet(self, mock_add_console_handler,
                                 mock_add_file_handler):
        with self._setup(quiet=True):
            self.assertEqual(default_log_level(), COMMAND)
            logfile = setup_logging()
        mock_add_console_handler.assert_called_with(level=COMMAND)
        mock_add_file_handler.assert_called_with(logfile, level=COMMAND)

    @patch("HDFSPerms.Logger.add_file_handler")
    @patch("HDFSPerms.Logger.add_console_handler")
    def test_setup_logging_console_only(self, mock_add_console_handler,
                                        mock_add_file_handler):
        with self._setup(console_only=True):
            self.assertIsNone(setup_logging())
        self.assertTrue(mock_add_console_handler.called)
        self.assertFalse(mock_add_file_handler.called)

    @patch("HDFSPerms.Logger.add_file_handler")
    @patch("HDFSPerms.Logger.add_console_handler")
    def test_setup_logging_unwritable(self, mock_add_console_handler,
                                      mock_add_file_handler):
        mock_add_file_handler.side_effect = OSError(13, "Permission denied")
        with self._setup():
            self.assertIsNone(setup_logging())
        self.assertTrue(mock_add_console_handler.called)
