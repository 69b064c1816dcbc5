""" Running the external ``hadoop`` client.

Output is read as bytes and decoded as UTF-8 with ``surrogateescape``,
so paths that are not valid UTF-8 survive the trip from a listing back
onto the command line of a later call. """

import logging
import subprocess
import threading


def decode_output(data):
    """ Decode command output so that undecodable bytes round-trip
    through :data:`sys.argv` style string arguments """
    return data.decode('utf-8', 'surrogateescape')


class ExecutorResult(object):
    """ The outcome of :func:`HDFSPerms.Utils.Executor.run`.  Evaluates
    true when the command exited 0. """

    def __init__(self, stdout, stderr, retval):
        self.stdout = stdout
        self.stderr = stderr
        self.retval = retval
        self.success = retval == 0

    @property
    def error(self):
        """ A one-line description of a failure, or None on success """
        if self.success:
            return None
        output = self.stderr.strip() or self.stdout.strip()
        if output:
            return "%s (rv: %s)" % (output, self.retval)
        return "No output or error; return value %s" % self.retval

    def __repr__(self):
        if not self.success:
            return "Failed command: %s" % self.error
        return "Successful command: %s" % (self.stdout.strip() or
                                           "no output")

    def __bool__(self):
        return self.success


class Executor(object):
    """ Runs commands given as argument lists, with stdin closed and an
    optional kill timer """

    def __init__(self, timeout=None):
        """
        :param timeout: Default number of seconds after which a command
                        is killed; None for no limit
        :type timeout: float
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self.timeout = timeout

    def _kill(self, proc):
        """ Timer callback that kills ``proc`` if it is still running """
        if proc.poll() is None:
            self.logger.warning("Command exceeded its timeout of %s "
                                "seconds, killing it" % self.timeout)
            proc.kill()

    def run(self, command, timeout=None):
        """ Run a command and collect its output.

        :param command: The program and its arguments
        :type command: list
        :param timeout: Overrides the default timeout for this command;
                        0 or less disables it
        :type timeout: float
        :returns: :class:`HDFSPerms.Utils.ExecutorResult`
        :raises: OSError if the program cannot be started
        """
        self.logger.debug("Running: %s" % " ".join(command))
        proc = subprocess.Popen(command, stdin=subprocess.DEVNULL,
                                stdout=subprocess.PIPE,
                                stderr=subprocess.PIPE, close_fds=True)
        if timeout is None:
            timeout = self.timeout
        timer = None
        if timeout is not None and timeout > 0:
            timer = threading.Timer(float(timeout), self._kill, [proc])
            timer.start()
        try:
            stdout, stderr = proc.communicate()
        finally:
            if timer is not None:
                timer.cancel()
        stdout = decode_output(stdout)
        stderr = decode_output(stderr)
        for line in stdout.splitlines():
            self.logger.debug('< %s' % line)
        for line in stderr.splitlines():
            self.logger.info(line)
        return ExecutorResult(stdout, stderr, proc.returncode)
