""" hdfs-perms options parsing. """

# pylint: disable=W0401
from HDFSPerms.Options.Options import *
from HDFSPerms.Options.Parser import *
