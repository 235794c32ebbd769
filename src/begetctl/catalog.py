"""Closed catalog of remote operations exposed by the CLI.

Each entry binds a ``group command`` pair to a Beget API ``section/method``
address together with its safety classification. The CLI looks commands up
here instead of spelling addresses inline, so the mutating and risky sets can
be inspected (and tested) in one place.
"""
from __future__ import annotations

from dataclasses import dataclass

from .config import FTP_PASSWORD_ENV_VAR, MAILBOX_PASSWORD_ENV_VAR, MYSQL_PASSWORD_ENV_VAR


@dataclass(frozen=True)
class SecretSpec:
    """Operation-level secret injected into the payload under ``field``."""

    field: str
    env_names: tuple[str, ...]
    prompt: str


@dataclass(frozen=True)
class OperationDescriptor:
    """Static description of one remote operation."""

    group: str
    name: str
    section: str
    method: str
    mutates: bool = False
    risky: bool = False
    risk_label: str | None = None
    secret: SecretSpec | None = None

    def __post_init__(self) -> None:
        if self.risky and not self.mutates:
            raise ValueError(f"{self.key}: risky operations must be mutating.")
        if self.risky and not self.risk_label:
            raise ValueError(f"{self.key}: risky operations need a risk label.")

    @property
    def key(self) -> str:
        """Return the ``group command`` lookup key."""
        return f"{self.group} {self.name}"

    @property
    def address(self) -> str:
        """Return the ``section/method`` API address."""
        return f"{self.section}/{self.method}"

    @property
    def action(self) -> str:
        """Return the dotted action name used in dry-run output."""
        return f"{self.section}.{self.method}"


def _ftp_secret(prompt: str) -> SecretSpec:
    return SecretSpec("password", (FTP_PASSWORD_ENV_VAR,), prompt)


def _mailbox_secret() -> SecretSpec:
    return SecretSpec("mailbox_password", (MAILBOX_PASSWORD_ENV_VAR,), "Mailbox password: ")


def _mysql_secret(prompt: str) -> SecretSpec:
    return SecretSpec("password", (MYSQL_PASSWORD_ENV_VAR,), prompt)


_D = OperationDescriptor

CATALOG: tuple[OperationDescriptor, ...] = (
    # account
    _D("account", "info", "user", "getAccountInfo"),
    _D("account", "toggle-ssh", "user", "toggleSsh", mutates=True),
    # domains
    _D("domains", "list", "domain", "getList"),
    _D("domains", "zone-list", "domain", "getZoneList"),
    _D("domains", "add-virtual", "domain", "addVirtual", mutates=True),
    _D("domains", "delete", "domain", "delete", mutates=True, risky=True, risk_label="Delete domain"),
    _D("domains", "subdomain-list", "domain", "getSubdomainList"),
    _D("domains", "add-subdomain-virtual", "domain", "addSubdomainVirtual", mutates=True),
    _D(
        "domains",
        "delete-subdomain",
        "domain",
        "deleteSubdomain",
        mutates=True,
        risky=True,
        risk_label="Delete subdomain",
    ),
    _D("domains", "check-to-register", "domain", "checkDomainToRegister"),
    _D("domains", "php-version-get", "domain", "getPhpVersion"),
    _D("domains", "php-version-change", "domain", "changePhpVersion", mutates=True),
    _D("domains", "directives-get", "domain", "getDirectives"),
    _D("domains", "directives-add", "domain", "addDirectives", mutates=True),
    _D("domains", "directives-remove", "domain", "removeDirectives", mutates=True),
    # dns
    _D("dns", "list", "dns", "getData"),
    _D("dns", "change-records", "dns", "changeRecords", mutates=True),
    _D("dns", "ns-get", "dns", "getData"),
    _D("dns", "ns-set", "dns", "changeRecords", mutates=True),
    # ftp
    _D("ftp", "list", "ftp", "getList"),
    _D("ftp", "add", "ftp", "add", mutates=True, secret=_ftp_secret("FTP account password: ")),
    _D(
        "ftp",
        "change-password",
        "ftp",
        "changePassword",
        mutates=True,
        secret=_ftp_secret("New FTP password: "),
    ),
    _D("ftp", "delete", "ftp", "delete", mutates=True, risky=True, risk_label="Delete FTP account"),
    # mail
    _D("mail", "mailbox-list", "mail", "getMailboxList"),
    _D(
        "mail",
        "mailbox-password-change",
        "mail",
        "changeMailboxPassword",
        mutates=True,
        secret=_mailbox_secret(),
    ),
    _D("mail", "mailbox-create", "mail", "createMailbox", mutates=True, secret=_mailbox_secret()),
    _D("mail", "mailbox-drop", "mail", "dropMailbox", mutates=True, risky=True, risk_label="Drop mailbox"),
    _D("mail", "mailbox-settings-change", "mail", "changeMailboxSettings", mutates=True),
    _D("mail", "forward-add", "mail", "forwardListAddMailbox", mutates=True),
    _D("mail", "forward-delete", "mail", "forwardListDeleteMailbox", mutates=True),
    _D("mail", "forward-show", "mail", "forwardListShow"),
    _D("mail", "domain-mail-set", "mail", "setDomainMail", mutates=True),
    _D("mail", "domain-mail-clear", "mail", "clearDomainMail", mutates=True),
    # mysql
    _D("mysql", "list", "mysql", "getList"),
    _D("mysql", "db-add", "mysql", "addDb", mutates=True, secret=_mysql_secret("MySQL password: ")),
    _D(
        "mysql",
        "access-add",
        "mysql",
        "addAccess",
        mutates=True,
        secret=_mysql_secret("MySQL access password: "),
    ),
    _D("mysql", "db-drop", "mysql", "dropDb", mutates=True, risky=True, risk_label="Drop MySQL database"),
    _D(
        "mysql",
        "access-drop",
        "mysql",
        "dropAccess",
        mutates=True,
        risky=True,
        risk_label="Drop MySQL access",
    ),
    _D(
        "mysql",
        "access-password-change",
        "mysql",
        "changeAccessPassword",
        mutates=True,
        secret=_mysql_secret("New MySQL password: "),
    ),
    # backup
    _D("backup", "file-backup-list", "backup", "getFileBackupList"),
    _D("backup", "mysql-backup-list", "backup", "getMysqlBackupList"),
    _D("backup", "file-list", "backup", "getFileList"),
    _D("backup", "mysql-list", "backup", "getMysqlList"),
    _D(
        "backup",
        "restore-file",
        "backup",
        "restoreFile",
        mutates=True,
        risky=True,
        risk_label="Restore files from backup",
    ),
    _D(
        "backup",
        "restore-mysql",
        "backup",
        "restoreMysql",
        mutates=True,
        risky=True,
        risk_label="Restore MySQL databases from backup",
    ),
    _D("backup", "download-file", "backup", "downloadFile", mutates=True),
    _D("backup", "download-mysql", "backup", "downloadMysql", mutates=True),
    _D("backup", "log", "backup", "getLog"),
    # cron
    _D("cron", "list", "cron", "getList"),
    _D("cron", "add", "cron", "add", mutates=True),
    _D("cron", "delete", "cron", "delete", mutates=True, risky=True, risk_label="Delete cron task"),
    _D("cron", "change-hidden-state", "cron", "changeHiddenState", mutates=True),
    _D("cron", "email-get", "cron", "getEmail"),
    _D("cron", "email-set", "cron", "setEmail", mutates=True),
    # sites
    _D("sites", "list", "site", "getList"),
    _D("sites", "add", "site", "add", mutates=True),
    _D("sites", "delete", "site", "delete", mutates=True, risky=True, risk_label="Delete site"),
    _D("sites", "link-domain", "site", "linkDomain", mutates=True),
    _D("sites", "unlink-domain", "site", "unlinkDomain", mutates=True),
    _D("sites", "freeze", "site", "freeze", mutates=True),
    _D("sites", "unfreeze", "site", "unfreeze", mutates=True),
    _D("sites", "is-frozen", "site", "isSiteFrozen"),
)

OPERATIONS: dict[str, OperationDescriptor] = {entry.key: entry for entry in CATALOG}

GROUP_HELP: dict[str, str] = {
    "account": "Account operations.",
    "domains": "Domain operations.",
    "dns": "DNS operations.",
    "ftp": "FTP operations.",
    "mail": "Mail operations.",
    "mysql": "MySQL operations.",
    "backup": "Backup operations.",
    "cron": "Cron operations.",
    "sites": "Site operations (API section: site).",
}


def get_operation(group: str, name: str) -> OperationDescriptor:
    """Return the descriptor for ``group name``; unknown pairs raise ``KeyError``."""
    return OPERATIONS[f"{group} {name}"]


__all__ = [
    "CATALOG",
    "GROUP_HELP",
    "OPERATIONS",
    "OperationDescriptor",
    "SecretSpec",
    "get_operation",
]
