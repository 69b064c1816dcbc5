""" The immutable configuration of a single run. """

import collections
import HDFSPerms.Options

_FIELDS = ['dry_run', 'echo', 'log_current', 'notranslate', 'hadoop',
           'timeout', 'lockfile', 'no_lock', 'report']


class RunConfig(collections.namedtuple('RunConfig', _FIELDS)):
    """ Settings that govern a run, fixed when the run starts.

    ``dry_run``
        Print the mutating commands instead of running them.
    ``echo``
        Print each mutating command before running it.
    ``log_current``
        Log the listing and ACL of each path before changing it.
    ``notranslate``
        Never add execute bits to directory modes or ACLs.
    ``hadoop``
        The ``hadoop`` executable.
    ``timeout``
        Seconds after which a command is killed, or None.
    ``lockfile``
        Path of the run lock.
    ``no_lock``
        Skip the run lock.
    ``report``
        Path to write an XML run report to, or None.
    """
    __slots__ = ()

    def __new__(cls, dry_run=False, echo=False, log_current=False,
                notranslate=False, hadoop="hadoop", timeout=None,
                lockfile=None, no_lock=False, report=None):
        return super(RunConfig, cls).__new__(
            cls, dry_run, echo, log_current, notranslate, hadoop, timeout,
            lockfile, no_lock, report)

    @classmethod
    def from_setup(cls, namespace=None):
        """ Build a RunConfig from parsed options.

        :param namespace: The parsed options; by default
                          :attr:`HDFSPerms.Options.setup`
        :type namespace: argparse.Namespace
        """
        if namespace is None:
            namespace = HDFSPerms.Options.setup
        return cls(**dict((field, getattr(namespace, field))
                          for field in _FIELDS
                          if hasattr(namespace, field)))
