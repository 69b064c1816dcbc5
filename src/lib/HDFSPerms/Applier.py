""" Application of a parsed rule to one filesystem entry. """

import logging
from HDFSPerms.Rules import OwnershipModeRule
from HDFSPerms.Translate import translate_mode, translate_acl


class RuleApplier(object):
    """ Computes the effective mode and ACL of a rule for an entry and
    issues the ownership, mode and ACL calls.  Failed calls are logged
    and reflected in the return value of :func:`apply`, never
    raised. """

    def __init__(self, client, config):
        """
        :param client: The filesystem client
        :type client: HDFSPerms.Client.HDFSClient
        :param config: The run configuration
        :type config: HDFSPerms.Config.RunConfig
        """
        self.client = client
        self.config = config
        self.logger = logging.getLogger(__name__)

    def translates(self, rule, entry):
        """ Return True if execute bits should be inferred for this
        rule on this entry """
        return (entry.is_directory and
                not rule.notranslate and
                not self.config.notranslate)

    def effective_mode(self, rule, entry):
        """ Get the mode to set on the entry, or None if the rule does
        not set modes """
        if not isinstance(rule, OwnershipModeRule):
            return None
        if self.translates(rule, entry):
            return translate_mode(rule.mode)
        return rule.mode

    def effective_acl(self, rule, entry):
        """ Get the ACL spec to merge into the entry, or None if the
        rule has none """
        if not rule.acl:
            return None
        if self.translates(rule, entry):
            return translate_acl(rule.acl)
        return rule.acl

    def _check(self, result, action, path):
        """ Log a failed call.  Returns the success of the call. """
        if not result.success:
            self.logger.error("Failed to %s %s: %s" % (action, path,
                                                       result.error))
        return result.success

    def log_current(self, rule, entry):
        """ Log the current listing and ACL of the entry """
        self.logger.info("------- Current --------")
        if isinstance(rule, OwnershipModeRule):
            result = self.client.list(entry.path)
            for line in result.stdout.splitlines():
                self.logger.info(line)
        result = self.client.getfacl(entry.path)
        for line in result.stdout.splitlines():
            self.logger.info(line)
        self.logger.info("------- New --------")

    def apply(self, rule, entry):
        """ Apply a rule to a single entry.

        :param rule: The rule to apply
        :type rule: HDFSPerms.Rules.Rule
        :param entry: The entry to apply it to
        :type entry: HDFSPerms.Client.FilesystemEntry
        :returns: bool - True if every call that was made succeeded
        """
        mode = self.effective_mode(rule, entry)
        acl = self.effective_acl(rule, entry)
        if self.config.log_current:
            self.log_current(rule, entry)

        rv = True
        if mode is not None:
            self.logger.info("%s [%s] --hdfs--> %s:%s:%s" %
                             (entry.path, entry.permissions, rule.owner,
                              rule.group, mode))
            # chown before chmod
            rv &= self._check(
                self.client.chown(rule.owner, rule.group, entry.path,
                                  recursive=rule.recursive),
                "change ownership of", entry.path)
            rv &= self._check(
                self.client.chmod(mode, entry.path,
                                  recursive=rule.recursive),
                "change mode of", entry.path)

        if acl:
            if "default" in acl and not entry.is_directory:
                self.logger.debug("Not applying default ACL to "
                                  "non-directory %s" % entry.path)
            else:
                self.logger.info("%s [%s] --acl--> %s" %
                                 (entry.path, entry.permissions, acl))
                rv &= self._check(
                    self.client.setfacl(acl, entry.path,
                                        recursive=rule.recursive),
                    "set ACLs on", entry.path)
        return rv
