""" Option objects for hdfs-perms.

Each option can be set, from highest to lowest precedence, on the
command line, through an environment variable, in the config file, or
by its built-in default.  Options exist independently of any parser;
components list them in an ``options`` attribute and
:class:`HDFSPerms.Options.Parser` collects them. """

import configparser
import os

__all__ = ["Option", "BooleanOption", "PathOption", "PositionalArgument",
           "OptionGroup", "boolean", "expand_path", "timeout"]


def expand_path(value):
    """ Expand ``~`` and make the path absolute.  The path need not
    exist. """
    return os.path.abspath(os.path.expanduser(value))


def timeout(value):
    """ Seconds as a float; zero or less means no timeout (None) """
    if value is None:
        return None
    seconds = float(value)
    if seconds <= 0:
        return None
    return seconds


def boolean(value):
    """ Interpret a config file or environment string as a boolean,
    accepting the same words as :mod:`configparser` """
    try:
        return configparser.ConfigParser.BOOLEAN_STATES[value.lower()]
    except KeyError:
        raise ValueError("Invalid boolean value %s" % value)


class Option(object):
    """ A single setting.

    Positional arguments are the command line flags, as for
    :meth:`argparse.ArgumentParser.add_argument`; an option without
    flags can only be set in the environment or the config file.
    Keyword arguments are passed on to ``add_argument``, except:

    :param cf: ``(section, option)`` in the config file
    :type cf: tuple
    :param env: Environment variable to read the value from
    :type env: string
    :param dest: Namespace attribute to store the value in.  For
                 options without flags it defaults to the lowercased
                 environment variable or config file option name.
    :type dest: string
    """

    def __init__(self, *flags, **kwargs):
        self.flags = flags
        self.cf = kwargs.pop('cf', None)  # pylint: disable=C0103
        self.env = kwargs.pop('env', None)
        self.default = kwargs.get('default')
        self.help = kwargs.get('help')

        #: Converts string values from the environment or the config
        #: file
        self.convert = kwargs.get('type')

        if flags:
            self.dest = kwargs.get('dest')
        else:
            self.dest = kwargs.pop('dest', None)
            if self.dest is None:
                self.dest = self.env or self.cf[1]
            self.dest = self.dest.lower().replace("-", "_")
        self.kwargs = kwargs

    def __repr__(self):
        where = list(self.flags)
        if self.cf:
            where.append("[%s] %s" % self.cf)
        if self.env:
            where.append("$" + self.env)
        return "%s(%s: %s)" % (self.__class__.__name__, self.dest,
                               ", ".join(where))

    def list_options(self):
        """ Get the options this object stands for """
        return [self]

    def add_to_parser(self, parser):
        """ Add the command line flags of this option, if any, to an
        argparse parser or argument group """
        if self.flags:
            self.dest = parser.add_argument(*self.flags, **self.kwargs).dest

    def value_from(self, cfp):
        """ Get the value of this option from the environment, the
        config file or the default, in that order.

        :param cfp: The config file contents
        :type cfp: configparser.ConfigParser
        :raises: ValueError if the value cannot be converted
        """
        if self.env and self.env in os.environ:
            return self._convert(os.environ[self.env])
        if self.cf and cfp.has_option(*self.cf):
            return self._convert(cfp.get(*self.cf))
        return self.default

    def _convert(self, value):
        if self.convert is None:
            return value
        return self.convert(value)


class PathOption(Option):
    """ An option whose value is a filesystem path, see
    :func:`expand_path` """

    def __init__(self, *flags, **kwargs):
        kwargs.setdefault('type', expand_path)
        kwargs.setdefault('metavar', '<path>')
        Option.__init__(self, *flags, **kwargs)


class BooleanOption(Option):
    """ An on/off option.  Giving the flag stores the opposite of the
    built-in default (False unless ``default=True`` is passed), even
    when the environment or the config file changed the default. """

    def __init__(self, *flags, **kwargs):
        kwargs.setdefault('default', False)
        if flags:
            kwargs.setdefault('action', 'store_const')
            kwargs['const'] = not kwargs['default']
        Option.__init__(self, *flags, **kwargs)
        self.convert = boolean


class PositionalArgument(Option):
    """ A positional command line argument """

    def __init__(self, name, **kwargs):
        kwargs.setdefault('metavar', '<%s>' % name)
        Option.__init__(self, name, **kwargs)


class OptionGroup(list):
    """ Options shown together under a title in ``--help`` """

    def __init__(self, *options, **kwargs):
        list.__init__(self, options)
        self.title = kwargs.pop('title')
        self.description = kwargs.pop('description', None)

    def list_options(self):
        """ Get the options in this group """
        return list(self)

    def add_to_parser(self, parser):
        """ Add the group and its options to a parser """
        group = parser.add_argument_group(self.title, self.description)
        for option in self:
            option.add_to_parser(group)
