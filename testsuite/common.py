""" In order to make testing easier and more consistent, we provide a
number of convenience functions, variables, and classes.  To import
this module, add the ``testsuite`` directory to ``sys.path`` (every
test module does this) and then simply do:

.. code-block:: python

    from common import *
"""

import sys
import HDFSPerms.Options
import HDFSPerms.Utils
from HDFSPerms.Client import FilesystemEntry
from mock import patch, Mock, MagicMock, call
from unittest import skip, skipIf, skipUnless, TestCase


#: A function to set a default config option if it's not already set
def set_setup_default(option, value=None):
    if not hasattr(HDFSPerms.Options.setup, option):
        setattr(HDFSPerms.Options.setup, option, value)

# skip config file reading; tests that parse a config file turn it
# back on
HDFSPerms.Options.Parser.unit_test = True

#: The name of the builtin module, for mocking Python builtins.  To
#: patch a builtin, you must do something like:
#:
#: .. code-block:: python
#:
#:     @patch("%s.open" % builtins)
#:     def test_something(self, mock_open):
#:         ...
builtins = "builtins"

#: A canned ``hadoop fs -ls -R`` output with one directory and one
#: file, preceded by the summary line
LISTING = """Found 2 items
drwxr-x---   - hdfs hadoop          0 2014-05-01 10:00 /data/a
-rw-r-----   3 hdfs hadoop       1024 2014-05-01 10:01 /data/a/part-0000
"""


def make_entry(path="/data/a", directory=True):
    """ Get a :class:`HDFSPerms.Client.FilesystemEntry` for a
    directory or a file """
    if directory:
        return FilesystemEntry(path, "drwxr-x---", owner="hdfs",
                               group="hadoop", size="0",
                               mtime="2014-05-01 10:00")
    return FilesystemEntry(path, "-rw-r-----", owner="hdfs",
                           group="hadoop", size="1024",
                           mtime="2014-05-01 10:01")


class MockExecutor(object):
    """mock object for :class:`HDFSPerms.Utils.Executor` objects."""
    def __init__(self, timeout=None):
        self.timeout = timeout

        # variables that can be set to control the result returned
        self.stdout = ''
        self.stderr = ''
        self.retval = 0

        #: Optional dict of ``hadoop fs`` subcommand (e.g.,
        #: ``"-chmod"``) -> (stdout, stderr, retval), overriding the
        #: values above for that subcommand
        self.results = dict()

        # variables that record how run() was called
        self.calls = []

    def run(self, command, timeout=None):
        self.calls.append({"command": command,
                           "timeout": timeout or self.timeout})
        if len(command) > 2 and command[2] in self.results:
            return HDFSPerms.Utils.ExecutorResult(*self.results[command[2]])
        return HDFSPerms.Utils.ExecutorResult(self.stdout, self.stderr,
                                              self.retval)

    @property
    def commands(self):
        """ The ``hadoop fs`` arguments of every command run, in
        order """
        return [c["command"][2:] for c in self.calls]


class HDFSPermsTestCase(TestCase):
    """ Base TestCase class that inherits from
    :class:`unittest.TestCase`, and sends stderr to stdout so that
    test runners capture it. """
    capture_stderr = True

    @classmethod
    def setUpClass(cls):
        cls._stderr = sys.stderr
        if cls.capture_stderr:
            sys.stderr = sys.stdout

    @classmethod
    def tearDownClass(cls):
        if cls.capture_stderr:
            sys.stderr = cls._stderr

    assertItemsEqual = TestCase.assertCountEqual
