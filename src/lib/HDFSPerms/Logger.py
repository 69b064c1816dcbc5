"""hdfs-perms logging support"""

import fcntl
import logging
import os
import struct
import sys
import termios
import time
import HDFSPerms.Options

logging.raiseExceptions = 0

#: Log level for echoed filesystem commands.  It sits between INFO
#: and WARNING so that ``--quiet`` hides progress messages but still
#: shows the commands a dry run would have executed.
COMMAND = 25
logging.addLevelName(COMMAND, "COMMAND")

#: Timestamp format of console and log file lines
DATE_FORMAT = "%m/%d/%y %H:%M --"


def terminal_width(default=80):
    """ Get the width of the controlling terminal, or ``default`` if it
    cannot be determined """
    try:
        winsize = fcntl.ioctl(0, termios.TIOCGWINSZ, b"\000" * 8)
        return struct.unpack('hhhh', winsize)[1] or default
    except (IOError, struct.error):
        return default


class TermiosFormatter(logging.Formatter):
    """ Console formatter that prefixes every message line with the
    time and cuts lines at the terminal width.  When stdout is not a
    terminal lines are effectively never cut. """

    def __init__(self, fmt=None, datefmt=None):
        logging.Formatter.__init__(self, fmt, datefmt)
        if sys.stdout.isatty():
            self.width = terminal_width()
        else:
            self.width = 32768

    def format(self, record):
        prefix = ''
        if self.datefmt:
            prefix = self.formatTime(record, self.datefmt) + ' '
        lines = []
        for line in record.getMessage().split('\n'):
            line = prefix + line
            lines.extend(line[start:start + self.width]
                         for start in range(0, max(len(line), 1),
                                            self.width))
        if record.exc_info:
            lines.append(self.formatException(record.exc_info))
        return '\n'.join(lines)


def add_console_handler(level=logging.DEBUG):
    """ Add a logging handler that logs at a level to sys.stdout """
    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(TermiosFormatter(datefmt=DATE_FORMAT))
    console.set_name("console")
    logging.root.addHandler(console)


def logfile_name(directory, procname=None, when=None):
    """ Get the path of the log file for a run started at ``when``
    (seconds since the epoch; default now). """
    if procname is None:
        procname = HDFSPerms.Options.setup.name
    if when is None:
        when = time.time()
    stamp = time.strftime("%Y_%m_%d_%H_%M_%S", time.localtime(when))
    return os.path.join(directory, "%s_%s.log" % (procname, stamp))


def add_file_handler(path, level=logging.DEBUG):
    """Add a logging handler that appends to the given file.  The
    file, and its directory if that has to be created, are only
    accessible by the owner."""
    directory = os.path.dirname(path)
    if directory and not os.path.isdir(directory):
        os.makedirs(directory, 0o700)
    old_umask = os.umask(0o077)
    try:
        filelog = logging.FileHandler(path, mode='a', encoding='utf-8',
                                      errors='backslashreplace')
    finally:
        os.umask(old_umask)
    filelog.set_name("file")
    filelog.setLevel(level)
    filelog.setFormatter(
        logging.Formatter('%(asctime)s %(message)s', DATE_FORMAT))
    logging.root.addHandler(filelog)
    return path


def default_log_level():
    """ Get the default log level, according to the configuration """
    if HDFSPerms.Options.setup.quiet:
        return COMMAND
    else:
        return logging.INFO


def setup_logging():
    """Setup logging for hdfs-perms.  Returns the path of the log
    file, or None if only logging to the console."""
    if hasattr(logging, 'already_setup'):
        return logging.already_setup

    level = default_log_level()
    params = []

    params.append("%s to console" % logging.getLevelName(level))
    add_console_handler(level=level)

    logfile = None
    if not HDFSPerms.Options.setup.console_only:
        # the log file also captures command output, unless asked to
        # be quiet
        if level < COMMAND:
            flvl = logging.DEBUG
        else:
            flvl = level
        logfile = logfile_name(HDFSPerms.Options.setup.log_directory)
        try:
            add_file_handler(logfile, level=flvl)
            params.append("%s to %s" % (logging.getLevelName(flvl), logfile))
        except (IOError, OSError):
            err = sys.exc_info()[1]
            logging.root.error("Failed to open log file %s: %s" %
                               (logfile, err))
            logfile = None

    logging.root.setLevel(logging.DEBUG)
    logging.root.debug("Configured logging: %s" % "; ".join(params))
    logging.already_setup = logfile
    return logfile


class _OptionContainer(object):
    """ Container for options loaded at import-time to configure
    logging """
    options = [
        HDFSPerms.Options.OptionGroup(
            HDFSPerms.Options.BooleanOption(
                '-q', '--quiet',
                help='Turn off verbosity; only commands, warnings and '
                'errors are logged'),
            HDFSPerms.Options.BooleanOption(
                '-c', dest="console_only",
                help='Do not write a log file, just output to console'),
            HDFSPerms.Options.PathOption(
                cf=('logging', 'directory'), dest="log_directory",
                default='/var/log/hdfs-perms',
                help='Directory that run log files are written to'),
            title="Logging options")]

    @staticmethod
    def options_parsed_hook():
        """ configure logging once all options are known """
        setup_logging()


HDFSPerms.Options.get_parser().add_component(_OptionContainer)
