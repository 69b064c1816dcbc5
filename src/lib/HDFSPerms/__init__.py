"""Bulk ownership, permission and ACL remediation for HDFS trees,
driven by a file of path patterns."""
