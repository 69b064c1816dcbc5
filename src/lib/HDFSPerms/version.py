""" hdfs-perms version declaration """

__version__ = "0.3.0"
