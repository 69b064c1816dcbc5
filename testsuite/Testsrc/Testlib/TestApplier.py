import os
import sys
from HDFSPerms.Applier import *
from HDFSPerms.Client import HDFSClient
from HDFSPerms.Config import RunConfig
from HDFSPerms.Rules import AclRule, OwnershipModeRule

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


class TestRuleApplier(HDFSPermsTestCase):
    def get_obj(self, **kwargs):
        self.executor = MockExecutor()
        config = RunConfig(**kwargs)
        return RuleApplier(HDFSClient(config, executor=self.executor),
                           config)

    def test_effective_mode(self):
        applier = self.get_obj()
        rule = OwnershipModeRule("/data/*", "hdfs", "hadoop", "644")
        self.assertEqual(applier.effective_mode(rule, make_entry()), "755")
        self.assertEqual(
            applier.effective_mode(rule, make_entry(directory=False)),
            "644")
        self.assertIsNone(applier.effective_mode(
            AclRule("/data/*", "user::rw-"), make_entry()))

    def test_effective_mode_notranslate(self):
        rule = OwnershipModeRule("/data/*", "hdfs", "hadoop", "644",
                                 notranslate=True)
        self.assertEqual(self.get_obj().effective_mode(rule, make_entry()),
                         "644")

        rule = OwnershipModeRule("/data/*", "hdfs", "hadoop", "644")
        applier = self.get_obj(notranslate=True)
        self.assertEqual(applier.effective_mode(rule, make_entry()), "644")

    def test_effective_mode_symbolic(self):
        rule = OwnershipModeRule("/data/*", "hdfs", "hadoop", "g+w")
        self.assertEqual(self.get_obj().effective_mode(rule, make_entry()),
                         "g+w")

    def test_effective_acl(self):
        applier = self.get_obj()
        rule = AclRule("/data/*", "user:hadoop:rw-,group:staff:rw-")
        self.assertEqual(applier.effective_acl(rule, make_entry()),
                         "user:hadoop:rwx,group:staff:rwx")
        self.assertEqual(
            applier.effective_acl(rule, make_entry(directory=False)),
            "user:hadoop:rw-,group:staff:rw-")
        self.assertIsNone(applier.effective_acl(
            OwnershipModeRule("/data/*", "hdfs", "hadoop", "644"),
            make_entry()))

        rule.notranslate = True
        self.assertEqual(applier.effective_acl(rule, make_entry()),
                         "user:hadoop:rw-,group:staff:rw-")

    def test_apply_ownership_directory(self):
        applier = self.get_obj()
        rule = OwnershipModeRule("/data/*", "hdfs", "hadoop", "640",
                                 acl="user::rw-,group::rw-,other::---")
        self.assertTrue(applier.apply(rule, make_entry()))
        self.assertEqual(self.executor.commands,
                         [["-chown", "hdfs:hadoop", "/data/a"],
                          ["-chmod", "750", "/data/a"],
                          ["-setfacl", "-m",
                           "user::rwx,group::rwx,other::---", "/data/a"]])

    def test_apply_ownership_file(self):
        applier = self.get_obj()
        rule = OwnershipModeRule("/data/*", "hdfs", "hadoop", "640")
        entry = make_entry("/data/a/part-0000", directory=False)
        self.assertTrue(applier.apply(rule, entry))
        self.assertEqual(self.executor.commands,
                         [["-chown", "hdfs:hadoop", "/data/a/part-0000"],
                          ["-chmod", "640", "/data/a/part-0000"]])

    def test_apply_recursive(self):
        applier = self.get_obj()
        rule = OwnershipModeRule("/data/a", "hdfs", "hadoop", "640",
                                 recursive=True)
        applier.apply(rule, make_entry())
        self.assertEqual(self.executor.commands,
                         [["-chown", "-R", "hdfs:hadoop", "/data/a"],
                          ["-chmod", "-R", "750", "/data/a"]])

    def test_apply_acl(self):
        applier = self.get_obj()
        rule = AclRule("/data/a", "user:hadoop:rw-,group:staff:rw-",
                       recursive=True)
        self.assertTrue(applier.apply(rule, make_entry()))
        self.assertEqual(self.executor.commands,
                         [["-setfacl", "-R", "-m",
                           "user:hadoop:rwx,group:staff:rwx", "/data/a"]])

    def test_apply_default_acl(self):
        applier = self.get_obj()
        rule = AclRule("/data/*", "default:group:staff:r--")

        self.assertTrue(applier.apply(rule, make_entry(directory=False)))
        self.assertEqual(self.executor.calls, [])

        self.assertTrue(applier.apply(rule, make_entry()))
        self.assertEqual(self.executor.commands,
                         [["-setfacl", "-m", "default:group:staff:r-x",
                           "/data/a"]])

    def test_apply_default_acl_with_mode(self):
        applier = self.get_obj()
        rule = OwnershipModeRule("/data/*", "hdfs", "hadoop", "640",
                                 acl="default:user:etl:rw-")
        applier.apply(rule, make_entry(directory=False))
        self.assertEqual(self.executor.commands,
                         [["-chown", "hdfs:hadoop", "/data/a"],
                          ["-chmod", "640", "/data/a"]])

    def test_apply_failure(self):
        applier = self.get_obj()
        applier.logger = Mock()
        self.executor.results["-chmod"] = ('', "Permission denied", 1)
        rule = OwnershipModeRule("/data/*", "hdfs", "hadoop", "640",
                                 acl="user::rw-")
        self.assertFalse(applier.apply(rule, make_entry()))
        # the remaining calls are still made
        self.assertEqual([c[0] for c in self.executor.commands],
                         ["-chown", "-chmod", "-setfacl"])
        self.assertEqual(applier.logger.error.call_count, 1)

    def test_apply_dry_run(self):
        applier = self.get_obj(dry_run=True)
        rule = OwnershipModeRule("/data/*", "hdfs", "hadoop", "640",
                                 acl="user::rw-")
        self.assertTrue(applier.apply(rule, make_entry()))
        self.assertEqual(self.executor.calls, [])

    def test_log_current(self):
        applier = self.get_obj(log_current=True)
        applier.logger = Mock()
        self.executor.stdout = "# file: /data/a\nuser::rwx\n"
        rule = OwnershipModeRule("/data/*", "hdfs", "hadoop", "640")
        applier.apply(rule, make_entry())
        self.assertEqual(self.executor.commands,
                         [["-ls", "-d", "/data/a"],
                          ["-getfacl", "/data/a"],
                          ["-chown", "hdfs:hadoop", "/data/a"],
                          ["-chmod", "750", "/data/a"]])
        messages = [c[0][0] for c in applier.logger.info.call_args_list]
        self.assertEqual(messages[0], "------- Current --------")
        self.assertIn("user::rwx", messages)
        self.assertIn("------- New --------", messages)

        # ACL rules only log the current ACL
        self.executor.calls = []
        applier.apply(AclRule("/data/*", "user::rw-"), make_entry())
        self.assertEqual(self.executor.commands,
                         [["-getfacl", "/data/a"],
                          ["-setfacl", "-m", "user::rwx", "/data/a"]])

    def test_log_current_dry_run(self):
        applier = self.get_obj(log_current=True, dry_run=True)
        applier.apply(AclRule("/data/*", "user::rw-"), make_entry())
        self.assertEqual(self.executor.commands, [["-getfacl", "/data/a"]])
