""" Access to the distributed filesystem through the ``hadoop fs``
command line client. """

import sys
import logging
from HDFSPerms.Logger import COMMAND
from HDFSPerms.Utils import Executor, ExecutorResult

#: First token of the summary line ``hadoop fs -ls`` prints before
#: the contents of a directory
LISTING_HEADER = "Found"

#: Number of whitespace-separated columns in a listing line
LISTING_COLUMNS = 8


class FilesystemEntry(object):
    """ One path as reported by a listing, with its current
    metadata. """

    def __init__(self, path, permissions, owner=None, group=None,
                 size=None, mtime=None):
        self.path = path
        #: The raw permission string column, e.g. ``drwxr-x---+``
        self.permissions = permissions
        self.owner = owner
        self.group = group
        self.size = size
        self.mtime = mtime

    @property
    def is_directory(self):
        """ Whether or not the entry is a directory """
        return self.permissions.startswith('d')

    def __repr__(self):
        return "%s(%s, %s)" % (self.__class__.__name__, self.path,
                               self.permissions)


def parse_listing(output, logger=None):
    """ Parse the output of ``hadoop fs -ls`` into
    :class:`HDFSPerms.Client.FilesystemEntry` objects.  Lines look
    like::

        drwxr-x---   - hdfs hadoop          0 2014-05-01 10:00 /data/a

    :param output: The listing output
    :type output: string
    :returns: generator of FilesystemEntry objects
    """
    for line in output.splitlines():
        fields = line.split(None, LISTING_COLUMNS - 1)
        if not fields or fields[0] == LISTING_HEADER:
            continue
        if len(fields) < LISTING_COLUMNS:
            if logger is not None:
                logger.debug("Skipping unparseable listing line: %s" % line)
            continue
        perms, _, owner, group, size, date, mtime, path = fields
        yield FilesystemEntry(path, perms, owner=owner, group=group,
                              size=size, mtime="%s %s" % (date, mtime))


class HDFSClient(object):
    """ Runs ``hadoop fs`` subcommands.  Read-only commands always
    run; mutating commands are echoed when requested, and skipped in
    dry run mode. """

    def __init__(self, config, executor=None):
        """
        :param config: The run configuration
        :type config: HDFSPerms.Config.RunConfig
        :param executor: The executor to run commands with; by
                         default a new
                         :class:`HDFSPerms.Utils.Executor`
        """
        self.config = config
        if executor is None:
            executor = Executor(timeout=config.timeout)
        self.cmd = executor
        self.logger = logging.getLogger(__name__)

    def _command(self, *args):
        """ Build the argument list for a ``hadoop fs`` subcommand """
        return [self.config.hadoop, "fs"] + list(args)

    def _run(self, command):
        """ Run a command, converting failure to start it into a failed
        result """
        try:
            return self.cmd.run(command)
        except OSError:
            err = sys.exc_info()[1]
            self.logger.error("Failed to run %s: %s" % (command[0], err))
            return ExecutorResult('', str(err), 127)

    def _mutate(self, command):
        """ Run a command that changes the filesystem """
        if self.config.dry_run or self.config.echo:
            self.logger.log(COMMAND, "**** %s" % " ".join(command))
        if self.config.dry_run:
            return ExecutorResult('', '', 0)
        return self._run(command)

    def list(self, path, recursive=False):
        """ List ``path`` recursively, or list only ``path`` itself
        (``-d``). """
        if recursive:
            flag = "-R"
        else:
            flag = "-d"
        return self._run(self._command("-ls", flag, path))

    def entries(self, path, recursive=False):
        """ Get the entries a listing of ``path`` reports.  A failed
        listing produces no entries.

        :returns: generator of
                  :class:`HDFSPerms.Client.FilesystemEntry` objects
        """
        result = self.list(path, recursive=recursive)
        if not result.success:
            self.logger.warning("Listing %s failed: %s" % (path,
                                                           result.error))
            return
        for entry in parse_listing(result.stdout, logger=self.logger):
            yield entry

    def chown(self, owner, group, path, recursive=False):
        """ Set owner and group of ``path`` """
        args = ["-chown"]
        if recursive:
            args.append("-R")
        return self._mutate(self._command(*(args + ["%s:%s" % (owner,
                                                               group),
                                                    path])))

    def chmod(self, mode, path, recursive=False):
        """ Set the mode of ``path`` """
        args = ["-chmod"]
        if recursive:
            args.append("-R")
        return self._mutate(self._command(*(args + [mode, path])))

    def setfacl(self, spec, path, recursive=False):
        """ Merge the ACL entries in ``spec`` into the ACL of ``path``,
        leaving other entries alone """
        args = ["-setfacl"]
        if recursive:
            args.append("-R")
        return self._mutate(self._command(*(args + ["-m", spec, path])))

    def getfacl(self, path):
        """ Get the current ACL of ``path`` """
        return self._run(self._command("-getfacl", path))
