""" The hdfs-perms option parser """

import argparse
import configparser
import os
import sys

from HDFSPerms.version import __version__
from HDFSPerms.Options.Options import Option, PathOption

__all__ = ["setup", "OptionParserException", "Parser", "get_parser"]


#: All parsed options of hdfs-perms
setup = argparse.Namespace(version=__version__,  # pylint: disable=C0103
                           name="hdfs-perms")


class OptionParserException(Exception):
    """ Raised when options are declared inconsistently """


class Parser(argparse.ArgumentParser):
    """ Parses the command line, the environment and the config file
    into a namespace, :attr:`HDFSPerms.Options.setup` by default.

    Components are objects (usually classes) with an ``options`` list
    and, optionally, an ``options_parsed_hook`` callable that runs once
    parsing is done.  Most code should call
    :func:`HDFSPerms.Options.get_parser` rather than create a
    parser. """

    #: Path to the config file.  The default file may be missing, an
    #: explicitly given one may not.
    configfile = PathOption('-C', '--config', env="HDFS_PERMS_CONFIG",
                            default="/etc/hdfs-perms.conf",
                            help="Path to configuration file")

    options = [configfile,
               Option('--version', action="version",
                      version="%(prog)s " + __version__,
                      help="Print the version and exit")]

    #: Set by unit tests to skip reading the config file
    unit_test = False

    def __init__(self, components=None, namespace=None, **kwargs):
        argparse.ArgumentParser.__init__(self, **kwargs)
        if namespace is None:
            namespace = setup
        self.namespace = namespace
        self.components = []
        self.option_list = []
        self.add_component(self)
        for component in components or []:
            self.add_component(component)

    def error(self, message):
        """ Print usage and the error, and exit 1 """
        self.print_usage(sys.stderr)
        self.exit(1, "%s: error: %s\n" % (self.prog, message))

    def add_options(self, options):
        """ Add options and option groups to the parser """
        for option in options:
            new = [o for o in option.list_options()
                   if o not in self.option_list]
            if not new:
                continue
            for opt in new:
                for other in self.option_list:
                    if opt.env and opt.env == other.env:
                        raise OptionParserException(
                            "Duplicate environment variable option: %s" %
                            opt.env)
                    if opt.cf and opt.cf == other.cf:
                        raise OptionParserException(
                            "Duplicate config file option: %s" % (opt.cf,))
            option.add_to_parser(self)
            self.option_list.extend(new)

    def add_component(self, component):
        """ Add a component and all of its options """
        if component not in self.components:
            self.components.append(component)
            self.add_options(getattr(component, "options", []))

    def _read_config(self, argv):
        """ Find the config file named by ``-C`` or the environment and
        read it """
        cfp = configparser.ConfigParser()
        bootstrap = argparse.ArgumentParser(add_help=False)
        self.configfile.add_to_parser(bootstrap)
        bootstrap.set_defaults(config=self.configfile.value_from(cfp))
        path = bootstrap.parse_known_args(argv)[0].config
        if self.unit_test:
            return cfp
        if os.path.exists(path):
            try:
                cfp.read([path])
            except configparser.Error:
                self.error("Could not parse %s: %s" % (path,
                                                       sys.exc_info()[1]))
        elif path != self.configfile.default:
            self.error("Could not read %s" % path)
        return cfp

    def parse(self, argv=None):
        """ Parse options into the namespace and run the
        ``options_parsed_hook`` of every component.

        :param argv: The arguments; ``sys.argv[1:]`` by default
        :type argv: list
        :returns: argparse.Namespace
        """
        if argv is None:
            argv = sys.argv[1:]  # pragma: nocover
        for attr in list(vars(self.namespace)):
            if not attr.startswith("_") and attr not in ['version', 'name']:
                delattr(self.namespace, attr)

        cfp = self._read_config(argv)
        try:
            for opt in self.option_list:
                if not opt.flags:
                    setattr(self.namespace, opt.dest, opt.value_from(cfp))
                elif opt.env or opt.cf:
                    self.set_defaults(**{opt.dest: opt.value_from(cfp)})
        except ValueError:
            self.error("Bad value for %s: %s" % (opt, sys.exc_info()[1]))

        remaining = self.parse_known_args(argv, namespace=self.namespace)[1]
        if remaining:
            self.error("Unknown options: %s" % " ".join(remaining))

        for component in self.components:
            hook = getattr(component, "options_parsed_hook", None)
            if hook is not None:
                hook()
        return self.namespace


#: The parser shared by everything that runs in one process
_parser = Parser()  # pylint: disable=C0103


def get_parser(description=None, components=None, namespace=None,
               **kwargs):
    """ Get the shared :class:`HDFSPerms.Options.Parser`, after adding
    the given components and setting the given parser attributes.  In
    unit tests a new parser is returned each time. """
    if Parser.unit_test:
        return Parser(description=description, components=components,
                      namespace=namespace, **kwargs)
    if description:
        _parser.description = description
    for key, val in kwargs.items():
        setattr(_parser, key, val)
    for component in components or []:
        _parser.add_component(component)
    if namespace is not None:
        _parser.namespace = namespace
    return _parser
