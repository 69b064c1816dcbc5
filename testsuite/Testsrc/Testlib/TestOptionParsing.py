"""basic option parsing tests."""

import argparse
import configparser
import os
import sys
import tempfile
from functools import wraps
from HDFSPerms.Options import Option, PathOption, BooleanOption, Parser, \
    PositionalArgument, OptionGroup, OptionParserException, boolean, \
    expand_path, timeout

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


class make_config(object):  # pylint: disable=invalid-name
    """decorator to create a temporary config file from a dict.

    The filename of the temporary config file is added as the last
    positional argument to the function call.
    """
    def __init__(self, config_data=None):
        self.config_data = config_data or {}

    def __call__(self, func):
        @wraps(func)
        def inner(*args, **kwargs):
            """decorated function."""
            cfp = configparser.ConfigParser()
            for section, options in self.config_data.items():
                cfp.add_section(section)
                for key, val in options.items():
                    cfp.set(section, key, val)
            fd, name = tempfile.mkstemp()
            config_file = os.fdopen(fd, 'w')
            cfp.write(config_file)
            config_file.close()

            args = list(args) + [name]
            try:
                rv = func(*args, **kwargs)
            finally:
                os.unlink(name)
            return rv

        return inner


class OptionTestCase(HDFSPermsTestCase):
    """test case that doesn't mock out config file reading."""

    @classmethod
    def setUpClass(cls):
        # ensure that the option parser actually reads config files
        Parser.unit_test = False
        HDFSPermsTestCase.setUpClass()

    @classmethod
    def tearDownClass(cls):
        Parser.unit_test = True
        HDFSPermsTestCase.tearDownClass()


class TestConverters(HDFSPermsTestCase):
    def test_path(self):
        self.assertEqual(expand_path("~/rules"),
                         os.path.expanduser("~/rules"))
        self.assertEqual(expand_path("./rules"), os.path.abspath("./rules"))
        self.assertEqual(expand_path("/etc/hdfs-perms.conf"),
                         "/etc/hdfs-perms.conf")

    def test_timeout(self):
        self.assertIsNone(timeout(None))
        self.assertIsNone(timeout("0"))
        self.assertIsNone(timeout("-1"))
        self.assertEqual(timeout("30"), 30.0)
        self.assertEqual(timeout("1.5"), 1.5)
        self.assertRaises(ValueError, timeout, "forever")

    def test_boolean(self):
        for value in ["1", "yes", "True", "on"]:
            self.assertTrue(boolean(value), value)
        for value in ["0", "no", "FALSE", "off"]:
            self.assertFalse(boolean(value), value)
        self.assertRaises(ValueError, boolean, "you betcha")


class TestBasicOptions(OptionTestCase):
    """test basic option parsing."""
    def setUp(self):
        # a parser records its dest on each option it is given, so
        # build them fresh for each test
        self.options = [
            BooleanOption("--test-true-boolean", env="TEST_TRUE_BOOLEAN",
                          cf=("test", "true_boolean"), default=True),
            BooleanOption("--test-false-boolean", env="TEST_FALSE_BOOLEAN",
                          cf=("test", "false_boolean"), default=False),
            BooleanOption(cf=("test", "true_config_boolean"),
                          default=True),
            Option("--test-option", env="TEST_OPTION", cf=("test", "option"),
                   default="foo"),
            Option(cf=("test", "config_option"), default="bar"),
            PathOption("--test-path-option", env="TEST_PATH_OPTION",
                       cf=("test", "path"), default="/test")]

    def _test_options(self, options=None, env=None, config=None):
        """helper to test a set of options.

        returns the namespace from parsing the given CLI options with
        the given config and environment.
        """
        if config is not None:
            config = {"test": config}
        if options is None:
            options = []

        @make_config(config)
        def inner(config_file):
            """do the actual tests."""
            result = argparse.Namespace()
            parser = Parser(components=[self], namespace=result)
            parser.parse(argv=["-C", config_file] + options)
            return result

        with patch.dict(os.environ):
            for opt in self.options:
                if opt.env is not None:
                    os.environ.pop(opt.env, None)
            if env is not None:
                os.environ.update(env)
            return inner()

    def test_default(self):
        """use the default value of options."""
        options = self._test_options()
        self.assertTrue(options.test_true_boolean)
        self.assertFalse(options.test_false_boolean)
        self.assertTrue(options.true_config_boolean)
        self.assertEqual(options.test_option, "foo")
        self.assertEqual(options.config_option, "bar")
        self.assertEqual(options.test_path_option, "/test")

    def test_expand_path(self):
        """expand ~ in path option."""
        options = self._test_options(options=["--test-path-option",
                                              "~/test"])
        self.assertEqual(options.test_path_option,
                         os.path.expanduser("~/test"))

    def test_set_in_config(self):
        """set options in config file."""
        options = self._test_options(config={"true_boolean": "false",
                                             "false_boolean": "yes",
                                             "true_config_boolean": "no",
                                             "option": "baz",
                                             "config_option": "quux"})
        self.assertFalse(options.test_true_boolean)
        self.assertTrue(options.test_false_boolean)
        self.assertFalse(options.true_config_boolean)
        self.assertEqual(options.test_option, "baz")
        self.assertEqual(options.config_option, "quux")

    def test_set_in_env(self):
        """set options in the environment."""
        options = self._test_options(env={"TEST_TRUE_BOOLEAN": "off",
                                          "TEST_OPTION": "env"})
        self.assertFalse(options.test_true_boolean)
        self.assertEqual(options.test_option, "env")

    def test_precedence(self):
        """CLI beats environment, which beats the config file."""
        options = self._test_options(config={"option": "config"},
                                     env={"TEST_OPTION": "env"})
        self.assertEqual(options.test_option, "env")

        options = self._test_options(options=["--test-option", "cli"],
                                     config={"option": "config"},
                                     env={"TEST_OPTION": "env"})
        self.assertEqual(options.test_option, "cli")

    def test_set_boolean_on_cli(self):
        """flip booleans on the command line."""
        options = self._test_options(options=["--test-true-boolean",
                                              "--test-false-boolean"])
        self.assertFalse(options.test_true_boolean)
        self.assertTrue(options.test_false_boolean)

    def test_invalid_boolean(self):
        """exit 1 when a boolean is set to an invalid value."""
        for kwargs in [dict(config={"true_boolean": "you betcha"}),
                       dict(env={"TEST_TRUE_BOOLEAN": "hell no"})]:
            try:
                self._test_options(**kwargs)
            except SystemExit:
                self.assertEqual(sys.exc_info()[1].code, 1)
            else:
                self.fail("Invalid boolean %s did not exit" % kwargs)

    def test_unknown_option(self):
        """exit 1 on unknown options."""
        try:
            self._test_options(options=["--bogus"])
        except SystemExit:
            self.assertEqual(sys.exc_info()[1].code, 1)
        else:
            self.fail("Unknown option did not exit")

    def test_missing_config_file(self):
        """exit 1 when an explicit config file does not exist."""
        parser = Parser(components=[self], namespace=argparse.Namespace())
        try:
            parser.parse(argv=["-C", "/nonexistent/hdfs-perms.conf"])
        except SystemExit:
            self.assertEqual(sys.exc_info()[1].code, 1)
        else:
            self.fail("Missing config file did not exit")

    @make_config({"test": {"option": "from config"}})
    def test_reparse(self, config_file):
        """parsing again does not keep stale values."""
        result = argparse.Namespace()
        parser = Parser(components=[self], namespace=result)
        parser.parse(argv=["-C", config_file, "--test-option", "cli"])
        self.assertEqual(result.test_option, "cli")
        parser.parse(argv=["-C", config_file])
        self.assertEqual(result.test_option, "from config")

    def test_duplicate_cf(self):
        """refuse two options with the same config file setting."""
        parser = Parser(namespace=argparse.Namespace())
        parser.add_options([Option("--one", cf=("test", "dup"))])
        self.assertRaises(OptionParserException, parser.add_options,
                          [Option("--two", cf=("test", "dup"))])

    def test_duplicate_env(self):
        """refuse two options with the same environment variable."""
        parser = Parser(namespace=argparse.Namespace())
        parser.add_options([Option("--one", env="TEST_DUP")])
        self.assertRaises(OptionParserException, parser.add_options,
                          [Option("--two", env="TEST_DUP")])


class TestComponents(OptionTestCase):
    """test components, groups and positional arguments."""

    class Component(object):
        options = [
            PositionalArgument("rulefile", nargs='?'),
            OptionGroup(BooleanOption("-n", "--nochange", dest="dry_run"),
                        title="Run options")]
        hooked = False

        @classmethod
        def options_parsed_hook(cls):
            cls.hooked = True

    @make_config()
    def test_component(self, config_file):
        result = argparse.Namespace()
        parser = Parser(components=[self.Component], namespace=result)
        parser.parse(argv=["-C", config_file, "-n", "rules.txt"])
        self.assertEqual(result.rulefile, "rules.txt")
        self.assertTrue(result.dry_run)
        self.assertTrue(self.Component.hooked)

    @make_config()
    def test_no_positional(self, config_file):
        result = argparse.Namespace()
        parser = Parser(components=[self.Component], namespace=result)
        parser.parse(argv=["-C", config_file])
        self.assertIsNone(result.rulefile)
        self.assertFalse(result.dry_run)
