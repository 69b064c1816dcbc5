#!/usr/bin/env python

from setuptools import setup
from glob import glob

version_file = 'src/lib/HDFSPerms/version.py'
exec(compile(open(version_file).read(), version_file, 'exec'))

inst_reqs = [
    'lockfile',
    'lxml',
]

setup(name="hdfs-perms",
      version=__version__,  # Defined in src/lib/HDFSPerms/version.py
      description="Bulk HDFS ownership, permission and ACL remediation",
      packages=["HDFSPerms",
                "HDFSPerms.Options",
                ],
      install_requires=inst_reqs,
      extras_require={'test': ['pytest', 'mock']},
      package_dir={'': 'src/lib', },
      scripts=glob('src/sbin/*'),
      )
