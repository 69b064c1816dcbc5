""" Parsing of rule files.

Each non-comment line of a rule file is one rule::

    <pattern> ACL <acl spec> [--notranslate] [-R|--recursive]
    <pattern> <owner> <group> <mode> [<acl spec>] [--notranslate] [-R|--recursive]

The first form only merges ACL entries; the second sets ownership and
mode, and optionally merges ACL entries too.  A line whose first field
contains ``#`` is a comment.
"""

#: Keyword in the second field that marks an ACL-only rule
ACL_KEYWORD = "ACL"

#: Trailing modifier tokens and the rule attribute each one sets
MODIFIERS = {'-R': 'recursive',
             '--recursive': 'recursive',
             '--notranslate': 'notranslate'}


class RuleParseError(Exception):
    """ Raised when a rule file line cannot be parsed into a rule """

    def __init__(self, lineno, line, reason):
        Exception.__init__(self, lineno, line, reason)
        self.lineno = lineno
        self.line = line
        self.reason = reason

    def __str__(self):
        if self.lineno is None:
            return "%s: %s" % (self.reason, self.line)
        return "Line %s: %s: %s" % (self.lineno, self.reason, self.line)


class Rule(object):
    """ Base class for a single parsed rule """

    #: A short name for the kind of rule, used in logs and reports
    kind = None

    def __init__(self, pattern, acl=None, recursive=False,
                 notranslate=False, lineno=None):
        self.pattern = pattern
        self.acl = acl
        self.recursive = recursive
        self.notranslate = notranslate
        self.lineno = lineno

    def _fields(self):
        """ Get the attributes that identify this rule """
        return (self.pattern, self.acl, self.recursive, self.notranslate)

    def __eq__(self, other):
        return (self.__class__ is other.__class__ and
                self._fields() == other._fields())

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash((self.__class__.__name__,) + self._fields())

    def __repr__(self):
        return "%s(%s)" % (self.__class__.__name__,
                           ", ".join(repr(f) for f in self._fields()))


class OwnershipModeRule(Rule):
    """ A rule that sets owner, group and mode, and optionally merges
    ACL entries. """
    kind = "ownership"

    def __init__(self, pattern, owner, group, mode, **kwargs):
        Rule.__init__(self, pattern, **kwargs)
        self.owner = owner
        self.group = group
        self.mode = mode

    def _fields(self):
        return ((self.pattern, self.owner, self.group, self.mode) +
                Rule._fields(self)[1:])


class AclRule(Rule):
    """ A rule that only merges ACL entries. """
    kind = "acl"

    def __init__(self, pattern, acl, **kwargs):
        Rule.__init__(self, pattern, acl=acl, **kwargs)


def is_ignored(line):
    """ Return True if the line is blank or a comment.  A line whose
    pattern contains ``#`` anywhere is a comment, so patterns cannot
    contain ``#``. """
    tokens = line.split()
    return not tokens or '#' in tokens[0]


def _scan_modifiers(tokens, lineno, line):
    """ Turn trailing modifier tokens into a dict of rule keyword
    arguments """
    flags = dict(recursive=False, notranslate=False)
    for token in tokens:
        try:
            flags[MODIFIERS[token]] = True
        except KeyError:
            raise RuleParseError(lineno, line,
                                 "Unknown modifier %s" % token)
    return flags


def parse_rule(line, lineno=None):
    """ Parse a single line of a rule file.

    :param line: The line to parse
    :type line: string
    :param lineno: The line number, for error messages
    :type lineno: int
    :returns: :class:`HDFSPerms.Rules.Rule`, or None for a blank
              line or a comment
    :raises: :class:`HDFSPerms.Rules.RuleParseError`
    """
    if is_ignored(line):
        return None
    line = line.strip()
    tokens = line.split()
    if len(tokens) < 3:
        raise RuleParseError(lineno, line, "Too few fields")

    if tokens[1] == ACL_KEYWORD:
        acl = tokens[2]
        if acl in MODIFIERS:
            raise RuleParseError(lineno, line, "Missing ACL spec")
        flags = _scan_modifiers(tokens[3:], lineno, line)
        return AclRule(tokens[0], acl, lineno=lineno, **flags)

    if len(tokens) < 4 or any(t in MODIFIERS for t in tokens[1:4]):
        raise RuleParseError(lineno, line,
                             "Expected <owner> <group> <mode> or ACL")
    pattern, owner, group, mode = tokens[:4]
    rest = tokens[4:]
    acl = None
    if rest and not rest[0].startswith('-'):
        acl = rest.pop(0)
    flags = _scan_modifiers(rest, lineno, line)
    return OwnershipModeRule(pattern, owner, group, mode, acl=acl,
                             lineno=lineno, **flags)
