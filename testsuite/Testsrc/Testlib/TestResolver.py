import os
import sys
from HDFSPerms.Resolver import *
from HDFSPerms.Client import HDFSClient
from HDFSPerms.Config import RunConfig

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


class TestEntryResolver(HDFSPermsTestCase):
    def get_obj(self):
        self.executor = MockExecutor()
        self.executor.stdout = LISTING
        return EntryResolver(HDFSClient(RunConfig(), executor=self.executor))

    def test_is_pattern(self):
        for path in ["/data/*", "/test/Lev1/*/*", "/data/part-?",
                     "/data/[ab]", "/data/{a,b}", "/data/file.txt",
                     "/data/with space"]:
            self.assertTrue(EntryResolver.is_pattern(path), path)
        for path in ["/data", "/test/Lev1/vendor/something",
                     "/user/etl_user/in-bound"]:
            self.assertFalse(EntryResolver.is_pattern(path), path)

    def test_resolve_pattern(self):
        resolver = self.get_obj()
        entries = list(resolver.resolve("/data/*"))
        self.assertEqual([e.path for e in entries],
                         ["/data/a", "/data/a/part-0000"])
        self.assertEqual(self.executor.commands,
                         [["-ls", "-R", "/data/*"]])

    def test_resolve_single(self):
        resolver = self.get_obj()
        self.executor.stdout = \
            "drwxr-x---   - hdfs hadoop 0 2014-05-01 10:00 /data\n"
        entries = list(resolver.resolve("/data"))
        self.assertEqual([e.path for e in entries], ["/data"])
        self.assertEqual(self.executor.commands, [["-ls", "-d", "/data"]])

    def test_resolve_lazy(self):
        resolver = self.get_obj()
        entries = resolver.resolve("/data/*")
        self.assertEqual(self.executor.calls, [])
        list(entries)
        self.assertEqual(len(self.executor.calls), 1)

        # each resolution lists afresh
        list(resolver.resolve("/data/*"))
        self.assertEqual(len(self.executor.calls), 2)

    def test_resolve_no_match(self):
        resolver = self.get_obj()
        self.executor.stdout = ""
        self.executor.stderr = "ls: `/data/nope*': No such file or directory"
        self.executor.retval = 1
        self.assertEqual(list(resolver.resolve("/data/nope*")), [])
