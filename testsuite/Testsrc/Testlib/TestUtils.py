import os
import sys
import subprocess
from HDFSPerms.Utils import *

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


class TestExecutorResult(HDFSPermsTestCase):
    def test_success(self):
        result = ExecutorResult("Found 1 items\n", "", 0)
        self.assertTrue(result.success)
        self.assertTrue(result)
        self.assertIsNone(result.error)
        self.assertIn("Found 1 items", repr(result))

    def test_error(self):
        result = ExecutorResult("", "chmod: Permission denied\n", 1)
        self.assertFalse(result.success)
        self.assertFalse(result)
        self.assertEqual(result.error, "chmod: Permission denied (rv: 1)")

        result = ExecutorResult("something went wrong", "", 255)
        self.assertEqual(result.error, "something went wrong (rv: 255)")

        result = ExecutorResult("", "", 2)
        self.assertEqual(result.error, "No output or error; return value 2")


class TestExecutor(HDFSPermsTestCase):
    def _popen(self, mock_Popen, stdout=b"", stderr=b"", retval=0):
        proc = mock_Popen.return_value
        proc.communicate.return_value = (stdout, stderr)
        proc.returncode = retval
        return proc

    @patch("subprocess.Popen")
    def test_run(self, mock_Popen):
        self._popen(mock_Popen, stdout=b"Found 1 items\n")

        result = Executor().run(["hadoop", "fs", "-ls", "-d", "/data"])
        self.assertTrue(result.success)
        self.assertEqual(result.stdout, "Found 1 items\n")
        self.assertEqual(mock_Popen.call_args[0][0],
                         ["hadoop", "fs", "-ls", "-d", "/data"])
        kwargs = mock_Popen.call_args[1]
        self.assertEqual(kwargs["stdin"], subprocess.DEVNULL)
        self.assertEqual(kwargs["stdout"], subprocess.PIPE)
        self.assertEqual(kwargs["stderr"], subprocess.PIPE)
        self.assertNotIn("shell", kwargs)
        self.assertNotIn("universal_newlines", kwargs)

    @patch("subprocess.Popen")
    def test_run_failure(self, mock_Popen):
        self._popen(mock_Popen, stderr=b"denied\n", retval=1)

        result = Executor().run(["hadoop", "fs", "-chmod", "750",
                                 "/data/with space"])
        self.assertFalse(result)
        self.assertEqual(result.retval, 1)
        self.assertEqual(result.error, "denied (rv: 1)")

    @patch("subprocess.Popen")
    def test_run_undecodable_output(self, mock_Popen):
        self._popen(mock_Popen,
                    stdout=b"drwxr-x---   - hdfs hadoop 0 "
                    b"2014-05-01 10:00 /data/caf\xe9\n",
                    stderr=b"warning: caf\xe9\n")

        result = Executor().run(["hadoop", "fs", "-ls", "-R", "/data/*"])
        self.assertTrue(result.stdout.endswith("/data/caf\udce9\n"))
        self.assertEqual(result.stderr, "warning: caf\udce9\n")
        # the original bytes come back when the path is used as an
        # argument again
        self.assertEqual("/data/caf\udce9".encode("utf-8", "surrogateescape"),
                         b"/data/caf\xe9")

    def test_decode_output(self):
        self.assertEqual(decode_output(b"/data/a"), "/data/a")
        self.assertEqual(decode_output("/data/café".encode("utf-8")),
                         "/data/café")
        self.assertEqual(decode_output(b"/data/caf\xe9"), "/data/caf\udce9")

    @patch("threading.Timer")
    @patch("subprocess.Popen")
    def test_run_timeout(self, mock_Popen, mock_Timer):
        proc = self._popen(mock_Popen)

        executor = Executor(timeout=30)
        executor.run(["hadoop", "fs", "-ls", "-d", "/"])
        mock_Timer.assert_called_with(30.0, executor._kill, [proc])
        self.assertTrue(mock_Timer.return_value.start.called)
        self.assertTrue(mock_Timer.return_value.cancel.called)

        # an explicit timeout of 0 overrides the default
        mock_Timer.reset_mock()
        executor.run(["hadoop", "fs", "-ls", "-d", "/"], timeout=0)
        self.assertFalse(mock_Timer.called)

        # no timeout by default
        Executor().run(["hadoop", "fs", "-ls", "-d", "/"])
        self.assertFalse(mock_Timer.called)

    @patch("threading.Timer")
    @patch("subprocess.Popen")
    def test_timer_cancelled_on_error(self, mock_Popen, mock_Timer):
        proc = self._popen(mock_Popen)
        proc.communicate.side_effect = KeyboardInterrupt

        self.assertRaises(KeyboardInterrupt, Executor(timeout=5).run,
                          ["hadoop", "fs", "-ls", "-d", "/"])
        self.assertTrue(mock_Timer.return_value.cancel.called)

    def test__kill(self):
        executor = Executor()
        proc = Mock()
        proc.poll.return_value = None
        executor._kill(proc)
        self.assertTrue(proc.kill.called)

        proc.reset_mock()
        proc.poll.return_value = 0
        executor._kill(proc)
        self.assertFalse(proc.kill.called)
