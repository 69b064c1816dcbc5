""" The hdfs-perms command line interface """

import sys
import logging
import argparse
import HDFSPerms.Logger
import HDFSPerms.Options
from HDFSPerms.Config import RunConfig
from HDFSPerms.Runner import Runner, RunLockError

USAGE = """\
Sets directory and file ownership, permissions and ACLs on HDFS
according to the rules in <rulefile>, one rule per line:

  <pattern> [ACL|<user> <group> <permissions>] [<acl spec>] \\
      [--notranslate] [-R|--recursive]

Permissions are numeric unix permissions.  ACL specs follow the
"hdfs dfs -setfacl" syntax and are merged into existing ACLs.

The execute bit may be left out for directories; it is added
automatically.  For example, with 644 on a /*/*/* pattern, files get
644 while directories get 755.  '+/-' permission specs are accepted
but never translated.  ACL specs get the execute permission added the
same way, unless -x or a rule's --notranslate is given.  ACL specs
that contain "default" are only applied to directories.

Lines whose pattern contains '#' and blank lines are ignored.

Examples:

  /test/Lev1/*/* hdfs hdfs 640 user::rw-,group::rw-,other::---
  /test/Lev1/*/something_else/* hdfs hdfs 420
  /test/Lev1/*/something/* ACL user:hadoop:rw-,group:staff:rw-
  /test/Lev1/*/* hdfs hdfs 640 user::rw-,group::rw-,other::--- --notranslate
  /test/Lev1/vendor/something ACL user:hadoop:rw-,group:staff:rw- -R
"""


class CLI(object):
    """ The hdfs-perms CLI """

    options = [
        HDFSPerms.Options.PositionalArgument(
            "rulefile", nargs='?', help="File of permission rules"),
        HDFSPerms.Options.OptionGroup(
            HDFSPerms.Options.BooleanOption(
                "-n", "--nochange", dest="dry_run",
                help="Do not actually change anything, just print the "
                "intent"),
            HDFSPerms.Options.BooleanOption(
                "-v", "--verbose", dest="echo",
                help="Print each hadoop command before executing it"),
            HDFSPerms.Options.BooleanOption(
                "-l", "--log_current", dest="log_current",
                help="Log the current state of each path before applying "
                "new permissions"),
            HDFSPerms.Options.BooleanOption(
                "-x", "--notranslate", dest="notranslate",
                help='Do not add the execute ("x") bit for directories'),
            HDFSPerms.Options.BooleanOption(
                "-O", "--no-lock", dest="no_lock",
                help="Omit the check for another running instance"),
            HDFSPerms.Options.PathOption(
                "--report", help="Write an XML report of the run to this "
                "file"),
            title="Run options"),
        HDFSPerms.Options.Option(
            cf=('hdfs', 'command'), env="HADOOP_CMD", dest="hadoop",
            default="hadoop", help="The hadoop executable"),
        HDFSPerms.Options.Option(
            cf=('hdfs', 'timeout'), dest="timeout",
            type=HDFSPerms.Options.timeout,
            help="Kill hadoop commands that run longer than this many "
            "seconds"),
        HDFSPerms.Options.PathOption(
            cf=('components', 'lockfile'), dest="lockfile",
            default='/var/lock/hdfs-perms.run', help="Run lock file")]

    def __init__(self, argv=None):
        parser = HDFSPerms.Options.get_parser(
            description="Bulk-apply HDFS ownership, permissions and ACLs",
            components=[self, HDFSPerms.Logger._OptionContainer],
            epilog=USAGE, formatter_class=argparse.RawDescriptionHelpFormatter)
        parser.parse(argv=argv)
        self.logger = logging.getLogger(parser.prog)

    def run(self):
        """ Run hdfs-perms.  Returns the exit status. """
        rulefile = HDFSPerms.Options.setup.rulefile
        if not rulefile:
            self.logger.error("No patterns file parameter found. Please run "
                              "me with -h for usage")
            return 1

        runner = Runner(RunConfig.from_setup())
        try:
            runner.run(rulefile)
        except IOError:
            err = sys.exc_info()[1]
            self.logger.error("Could not read rule file %s: %s" %
                              (rulefile, err))
            return 1
        except RunLockError:
            self.logger.error(str(sys.exc_info()[1]))
            return 1
        return 0


def main(argv=None):
    """ Entry point of the ``hdfs-perms`` script """
    return CLI(argv=argv).run()
