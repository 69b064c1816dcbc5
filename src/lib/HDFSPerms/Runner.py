""" Driving a whole rule file through the resolver and applier. """

import sys
import time
import logging
import lxml.etree
from lockfile import FileLock, LockTimeout, AlreadyLocked, LockFailed
from HDFSPerms.Applier import RuleApplier
from HDFSPerms.Client import HDFSClient
from HDFSPerms.Resolver import EntryResolver
from HDFSPerms.Rules import parse_rule, RuleParseError
from HDFSPerms.version import __version__

#: Seconds to wait for another run to release the run lock
LOCK_TIMEOUT = 10


def xml_safe(value):
    """ Replace undecodable bytes carried in ``value`` so that it can
    go into an XML document """
    return value.encode('utf-8', 'surrogateescape').decode('utf-8',
                                                          'replace')


class RunLockError(Exception):
    """ Raised when another run holds the run lock """


class Runner(object):
    """ Applies every rule of a rule file, in file order.  A rule is
    fully expanded and applied before the next one is read. """

    def __init__(self, config, client=None):
        """
        :param config: The run configuration
        :type config: HDFSPerms.Config.RunConfig
        :param client: The filesystem client; by default a new
                       :class:`HDFSPerms.Client.HDFSClient`
        """
        self.config = config
        if client is None:
            client = HDFSClient(config)
        self.client = client
        self.resolver = EntryResolver(client)
        self.applier = RuleApplier(client, config)
        self.logger = logging.getLogger(__name__)

        #: Number of entries updated successfully and unsuccessfully
        self.counts = dict(good=0, bad=0)

        #: A list of ``(rule, entry, success)`` tuples, one for each
        #: entry a rule was applied to.  Only kept when a run report
        #: was requested.
        self.states = []

        #: :class:`HDFSPerms.Rules.RuleParseError` objects for the
        #: lines that were skipped
        self.errors = []
        self.times = dict()

    def process_rule(self, rule):
        """ Apply a rule to every entry its pattern matches.

        :returns: bool - True if every entry was updated successfully
        """
        rv = True
        entries = iter(self.resolver.resolve(rule.pattern))
        while True:
            try:
                entry = next(entries)
            except StopIteration:
                break
            except Exception:  # pylint: disable=W0703
                self.logger.error("Failed to list %s for line %s" %
                                  (rule.pattern, rule.lineno), exc_info=1)
                return False
            try:
                success = self.applier.apply(rule, entry)
            except Exception:  # pylint: disable=W0703
                self.logger.error("Unexpected error applying line %s to %s" %
                                  (rule.lineno, entry.path), exc_info=1)
                success = False
            self._record(rule, entry, success)
            rv &= success
        return rv

    def _record(self, rule, entry, success):
        """ Count the outcome of applying ``rule`` to ``entry``, and
        keep it for the run report if there will be one """
        if success:
            self.counts['good'] += 1
        else:
            self.counts['bad'] += 1
        if self.config.report:
            self.states.append((rule, entry, success))

    def process(self, rulefile):
        """ Apply every rule in an open rule file.  Malformed lines
        are logged and skipped.

        :param rulefile: The rule file
        :type rulefile: file-like object
        :returns: bool - True if every line parsed and every entry was
                  updated successfully
        """
        rv = True
        for lineno, line in enumerate(rulefile, 1):
            try:
                rule = parse_rule(line, lineno=lineno)
            except RuleParseError:
                err = sys.exc_info()[1]
                self.logger.error("Skipping malformed rule: %s" % err)
                self.errors.append(err)
                rv = False
                continue
            if rule is None:
                continue
            rv &= self.process_rule(rule)
        return rv

    def _lock(self):
        """ Take the run lock.  Returns the lock, or None if no lock
        was taken. """
        if (self.config.no_lock or self.config.dry_run or
                not self.config.lockfile):
            return None
        lock = FileLock(self.config.lockfile)
        try:
            lock.acquire(timeout=LOCK_TIMEOUT)
        except (LockTimeout, AlreadyLocked):
            raise RunLockError("Another instance of hdfs-perms is running. "
                               "If you want to bypass the check, run with "
                               "the -O/--no-lock option")
        except LockFailed:
            err = sys.exc_info()[1]
            self.logger.error("Failed to take lock %s: %s" %
                              (self.config.lockfile, err))
            return None
        self.logger.debug("Acquired lock at %s" % self.config.lockfile)
        return lock

    def run(self, filename):
        """ Apply the rules in the named file.

        :param filename: Path to the rule file
        :type filename: string
        :returns: bool - True if every line parsed and every entry was
                  updated successfully
        :raises: IOError if the rule file cannot be read,
                 :class:`HDFSPerms.Runner.RunLockError` if another run
                 is in progress
        """
        self.logger.info("Reading patterns list from file: %s" % filename)
        self.times['start'] = time.time()
        # paths need not be valid UTF-8; undecodable bytes are passed
        # through to the client unchanged
        with open(filename, encoding='utf-8',
                  errors='surrogateescape') as rulefile:
            lock = self._lock()
            try:
                rv = self.process(rulefile)
            finally:
                if lock is not None:
                    lock.release()
                    self.logger.debug("Released lock at %s" %
                                      self.config.lockfile)
        self.times['finish'] = time.time()

        self.logger.info("Finished: %s entries updated, %s failed, %s "
                         "malformed rules" % (self.counts['good'],
                                              self.counts['bad'],
                                              len(self.errors)))
        if self.config.report:
            self.write_report(self.config.report, filename)
        return rv

    def generate_report(self, filename=None):
        """ Generate an XML summary of the run.

        :returns: lxml.etree._Element
        """
        report = lxml.etree.Element("Run", version=__version__)
        if filename:
            report.set("rulefile", xml_safe(filename))
        for (event, timestamp) in sorted(self.times.items()):
            report.set(event, str(timestamp))
        flags = lxml.etree.SubElement(report, "Flags")
        for flag in ["dry_run", "notranslate", "log_current"]:
            lxml.etree.SubElement(flags, "Flag", name=flag,
                                  value=str(getattr(self.config, flag)))

        good = [s for s in self.states if s[2]]
        bad = [s for s in self.states if not s[2]]
        stats = lxml.etree.SubElement(
            report, "Statistics",
            total=str(self.counts['good'] + self.counts['bad']),
            good=str(self.counts['good']), bad=str(self.counts['bad']))
        if self.counts['bad'] or self.errors:
            stats.set('state', 'dirty')
        else:
            stats.set('state', 'clean')

        for (data, ename) in [(good, "Good"), (bad, "Bad")]:
            container = lxml.etree.SubElement(stats, ename)
            for rule, entry, _ in data:
                item = lxml.etree.SubElement(
                    container, "Entry", line=str(rule.lineno),
                    pattern=xml_safe(rule.pattern), kind=rule.kind,
                    path=xml_safe(entry.path),
                    permissions=entry.permissions)
                mode = self.applier.effective_mode(rule, entry)
                if mode is not None:
                    item.set("owner", xml_safe(rule.owner))
                    item.set("group", xml_safe(rule.group))
                    item.set("mode", mode)
                acl = self.applier.effective_acl(rule, entry)
                if acl:
                    item.set("acl", xml_safe(acl))

        errors = lxml.etree.SubElement(report, "Errors")
        for err in self.errors:
            item = lxml.etree.SubElement(errors, "RuleError",
                                         line=str(err.lineno),
                                         reason=xml_safe(err.reason))
            item.text = xml_safe(err.line)
        return report

    def write_report(self, path, filename=None):
        """ Write the XML summary of the run to ``path`` """
        try:
            lxml.etree.ElementTree(self.generate_report(filename)).write(
                path, pretty_print=True, xml_declaration=True,
                encoding='UTF-8')
            self.logger.info("Wrote run report to %s" % path)
        except IOError:
            err = sys.exc_info()[1]
            self.logger.error("Failed to write run report %s: %s" %
                              (path, err))
