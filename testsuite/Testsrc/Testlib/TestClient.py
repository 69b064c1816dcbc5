import os
import sys
from HDFSPerms.Client import *
from HDFSPerms.Config import RunConfig
from HDFSPerms.Logger import COMMAND

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


class TestFilesystemEntry(HDFSPermsTestCase):
    def test_is_directory(self):
        self.assertTrue(make_entry().is_directory)
        self.assertFalse(make_entry(directory=False).is_directory)
        self.assertTrue(FilesystemEntry("/a", "drwxr-x---+").is_directory)
        self.assertFalse(FilesystemEntry("/a", "-rw-r-----+").is_directory)


class TestParseListing(HDFSPermsTestCase):
    def test_parse_listing(self):
        entries = list(parse_listing(LISTING))
        self.assertEqual([e.path for e in entries],
                         ["/data/a", "/data/a/part-0000"])
        self.assertTrue(entries[0].is_directory)
        self.assertFalse(entries[1].is_directory)
        self.assertEqual(entries[1].permissions, "-rw-r-----")
        self.assertEqual(entries[1].owner, "hdfs")
        self.assertEqual(entries[1].group, "hadoop")
        self.assertEqual(entries[1].size, "1024")
        self.assertEqual(entries[1].mtime, "2014-05-01 10:01")

    def test_path_with_spaces(self):
        entries = list(parse_listing(
            "drwxr-xr-x   - etl etl 0 2014-05-01 10:00 /data/with space\n"))
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].path, "/data/with space")

    def test_skip_garbage(self):
        logger = Mock()
        output = "\n".join(["Found 3 items",
                            "",
                            "WARN util.NativeCodeLoader: oops",
                            "drwxr-xr-x - etl etl 0 2014-05-01 10:00 /x"])
        entries = list(parse_listing(output, logger=logger))
        self.assertEqual([e.path for e in entries], ["/x"])
        self.assertTrue(logger.debug.called)

    def test_empty(self):
        self.assertEqual(list(parse_listing("")), [])


class TestHDFSClient(HDFSPermsTestCase):
    def get_obj(self, **kwargs):
        self.executor = MockExecutor()
        return HDFSClient(RunConfig(**kwargs), executor=self.executor)

    def test__init(self):
        client = HDFSClient(RunConfig(timeout=30.0))
        self.assertEqual(client.cmd.timeout, 30.0)

    def test_hadoop_command(self):
        client = self.get_obj(hadoop="/opt/hadoop/bin/hadoop")
        client.chmod("644", "/data")
        self.assertEqual(self.executor.calls[0]["command"],
                         ["/opt/hadoop/bin/hadoop", "fs", "-chmod", "644",
                          "/data"])

    def test_list(self):
        client = self.get_obj()
        self.executor.stdout = LISTING
        result = client.list("/data/*", recursive=True)
        self.assertEqual(result.stdout, LISTING)
        client.list("/data")
        self.assertEqual(self.executor.commands,
                         [["-ls", "-R", "/data/*"], ["-ls", "-d", "/data"]])

    def test_entries(self):
        client = self.get_obj()
        self.executor.stdout = LISTING
        self.assertEqual([e.path for e in client.entries("/data/*",
                                                         recursive=True)],
                         ["/data/a", "/data/a/part-0000"])

    def test_entries_failure(self):
        client = self.get_obj()
        client.logger = Mock()
        self.executor.stderr = "ls: `/nope': No such file or directory"
        self.executor.retval = 1
        self.assertEqual(list(client.entries("/nope")), [])
        self.assertTrue(client.logger.warning.called)

    def test_mutations(self):
        client = self.get_obj()
        client.chown("hdfs", "hadoop", "/data")
        client.chown("hdfs", "hadoop", "/data", recursive=True)
        client.chmod("750", "/data")
        client.chmod("750", "/data", recursive=True)
        client.setfacl("user::rwx", "/data")
        client.setfacl("user::rwx", "/data", recursive=True)
        client.getfacl("/data")
        self.assertEqual(self.executor.commands,
                         [["-chown", "hdfs:hadoop", "/data"],
                          ["-chown", "-R", "hdfs:hadoop", "/data"],
                          ["-chmod", "750", "/data"],
                          ["-chmod", "-R", "750", "/data"],
                          ["-setfacl", "-m", "user::rwx", "/data"],
                          ["-setfacl", "-R", "-m", "user::rwx", "/data"],
                          ["-getfacl", "/data"]])

    def test_dry_run(self):
        client = self.get_obj(dry_run=True)
        client.logger = Mock()
        self.assertTrue(client.chown("hdfs", "hadoop", "/data").success)
        self.assertTrue(client.chmod("750", "/data").success)
        self.assertTrue(client.setfacl("user::rwx", "/data").success)
        self.assertEqual(self.executor.calls, [])
        client.logger.log.assert_has_calls([
            call(COMMAND, "**** hadoop fs -chown hdfs:hadoop /data"),
            call(COMMAND, "**** hadoop fs -chmod 750 /data"),
            call(COMMAND, "**** hadoop fs -setfacl -m user::rwx /data")])

        # read-only commands still run
        client.list("/data")
        client.getfacl("/data")
        self.assertEqual(self.executor.commands,
                         [["-ls", "-d", "/data"], ["-getfacl", "/data"]])

    def test_echo(self):
        client = self.get_obj(echo=True)
        client.logger = Mock()
        client.chmod("750", "/data")
        client.logger.log.assert_called_with(
            COMMAND, "**** hadoop fs -chmod 750 /data")
        self.assertEqual(self.executor.commands, [["-chmod", "750", "/data"]])

    def test_no_echo(self):
        client = self.get_obj()
        client.logger = Mock()
        client.chmod("750", "/data")
        self.assertFalse(client.logger.log.called)

    def test_failed_start(self):
        executor = Mock()
        executor.run.side_effect = OSError(2, "No such file or directory")
        client = HDFSClient(RunConfig(), executor=executor)
        client.logger = Mock()
        result = client.chmod("750", "/data")
        self.assertFalse(result.success)
        self.assertEqual(result.retval, 127)
        self.assertTrue(client.logger.error.called)
