""" Expansion of rule path patterns into filesystem entries. """

import re
import logging

#: Matches any character that makes a path a glob pattern
GLOB_CHARS_RE = re.compile(r'[^A-Za-z0-9_/\-]')


class EntryResolver(object):
    """ Expands path patterns with the filesystem listing.  Patterns
    are listed recursively; plain paths are listed as themselves, so
    that a directory is not replaced by its contents. """

    def __init__(self, client):
        """
        :param client: The filesystem client to list with
        :type client: HDFSPerms.Client.HDFSClient
        """
        self.client = client
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def is_pattern(path):
        """ Return True if ``path`` contains glob metacharacters """
        return GLOB_CHARS_RE.search(path) is not None

    def resolve(self, pattern):
        """ Get the entries a pattern matches, in listing order.  The
        listing runs when iteration starts, and each call lists
        afresh.

        :param pattern: The path pattern
        :type pattern: string
        :returns: generator of
                  :class:`HDFSPerms.Client.FilesystemEntry` objects
        """
        recursive = self.is_pattern(pattern)
        if recursive:
            self.logger.info("Updating by pattern: %s" % pattern)
        else:
            self.logger.info("Updating single item: %s" % pattern)
        return self.client.entries(pattern, recursive=recursive)
