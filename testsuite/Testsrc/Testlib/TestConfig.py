import os
import sys
import argparse
from HDFSPerms.Config import *

# add all parent testsuite directories to sys.path to allow (most)
# relative imports
path = os.path.dirname(__file__)
while path != "/":
    if os.path.basename(path).lower().startswith("test"):
        sys.path.append(path)
    if os.path.basename(path) == "testsuite":
        break
    path = os.path.dirname(path)
from common import *


class TestRunConfig(HDFSPermsTestCase):
    def test_defaults(self):
        config = RunConfig()
        self.assertFalse(config.dry_run)
        self.assertFalse(config.echo)
        self.assertFalse(config.log_current)
        self.assertFalse(config.notranslate)
        self.assertFalse(config.no_lock)
        self.assertEqual(config.hadoop, "hadoop")
        self.assertIsNone(config.timeout)
        self.assertIsNone(config.lockfile)
        self.assertIsNone(config.report)

    def test_immutable(self):
        config = RunConfig(dry_run=True)
        self.assertRaises(AttributeError, setattr, config, "dry_run", False)
        self.assertRaises(AttributeError, setattr, config, "quiet", True)
        self.assertFalse(config._replace(dry_run=False).dry_run)
        self.assertTrue(config.dry_run)

    def test_from_setup(self):
        namespace = argparse.Namespace(dry_run=True, echo=False,
                                       log_current=True, notranslate=False,
                                       hadoop="/usr/bin/hadoop",
                                       timeout=30.0,
                                       lockfile="/var/lock/hdfs-perms.run",
                                       no_lock=False, report=None,
                                       quiet=True, rulefile="rules")
        config = RunConfig.from_setup(namespace)
        self.assertEqual(config,
                         RunConfig(dry_run=True, log_current=True,
                                   hadoop="/usr/bin/hadoop", timeout=30.0,
                                   lockfile="/var/lock/hdfs-perms.run"))

    def test_from_setup_partial(self):
        config = RunConfig.from_setup(argparse.Namespace(echo=True))
        self.assertEqual(config, RunConfig(echo=True))

    def test_from_setup_global(self):
        with patch("HDFSPerms.Options.setup",
                   argparse.Namespace(notranslate=True)):
            self.assertEqual(RunConfig.from_setup(),
                             RunConfig(notranslate=True))
