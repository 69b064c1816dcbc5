""" Execute bit inference for directories.

Rule files describe the permissions wanted on files; directories
matched by the same rule need the execute (traverse) bit wherever read
or write access is granted.  The functions here compute the directory
flavor of a numeric mode or an ACL spec. """

import re

#: Modes that are translated: three permission digits, optionally
#: preceded by one setuid/setgid/sticky digit.  Anything else
#: (symbolic modes such as ``u+x``, longer strings) passes through.
NUMERIC_MODE_RE = re.compile(r'^[0-7]?[0-7]{3}$')

#: The permission triad of an ACL entry that grants nothing
EMPTY_TRIAD = '---'


def is_numeric_mode(mode):
    """ Return True if ``mode`` is a numeric mode that
    :func:`translate_mode` will translate. """
    return bool(NUMERIC_MODE_RE.match(mode))


def translate_mode(mode):
    """ Add the execute bit to every owner/group/other digit of a
    numeric mode that grants read or write access but not execute.
    Setuid/setgid/sticky digits are copied verbatim, and non-numeric
    modes are returned unchanged.

    >>> translate_mode("640")
    '750'
    >>> translate_mode("4640")
    '4750'

    :param mode: The mode as given in the rule file
    :type mode: string
    :returns: string
    """
    if not is_numeric_mode(mode):
        return mode
    special, perms = mode[:-3], mode[-3:]
    rv = []
    for digit in perms:
        bits = int(digit)
        if bits and not bits & 1:
            bits |= 1
        rv.append(str(bits))
    return special + "".join(rv)


def translate_acl_entry(entry):
    """ Force the execute slot of a single ACL entry to ``x``, unless
    the entry grants nothing at all.  The read and write slots and the
    scope/qualifier prefix are left alone.

    :param entry: An ACL entry, e.g. ``default:group:staff:rw-``
    :type entry: string
    :returns: string
    """
    if entry[-3:] == EMPTY_TRIAD:
        return entry
    return entry[:-1] + 'x'


def translate_acl(spec):
    """ Translate every entry of a comma-separated ACL spec with
    :func:`translate_acl_entry`, preserving order.  Empty entries are
    dropped.

    >>> translate_acl("user::rw-,other::---")
    'user::rwx,other::---'

    :param spec: The ACL spec as given in the rule file
    :type spec: string
    :returns: string
    """
    return ",".join(translate_acl_entry(entry)
                    for entry in spec.split(",") if entry)
