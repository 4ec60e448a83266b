"""
Ledger collaborator
====================

The proof subsystem hands its verdict to a ledger that issues and transfers
tokens. Only the interface matters to the gate; ``TinyDBLedger`` is a local
development ledger kept in TinyDB tables.
"""

import abc
import logging
import secrets
import time

from tinydb import TinyDB, Query
from tinydb.storages import MemoryStorage

from zkmint.errors import LedgerError

logger = logging.getLogger(__name__)

Tokens = Query()
Accounts = Query()


def open_db(path):
    """TinyDB at ``path``; ``":memory:"`` keeps everything in memory."""
    if str(path) == ":memory:":
        return TinyDB(storage=MemoryStorage)
    return TinyDB(path)


class Ledger(abc.ABC):

    @abc.abstractmethod
    def check_balance(self):
        """Spendable balance of the issuing account."""

    @abc.abstractmethod
    def issue_token(self, metadata_uri):
        """Issue one token; returns its identifier."""

    @abc.abstractmethod
    def transfer_token(self, token_id, recipient):
        """Move a token to ``recipient``; returns True on success."""


class TinyDBLedger(Ledger):

    def __init__(self, db, owner="local"):
        self.owner = owner
        self.accounts = db.table("accounts")
        self.tokens = db.table("tokens")

    def check_balance(self):
        row = self.accounts.get(Accounts.owner == self.owner)
        return float(row["balance"]) if row else 0.0

    def deposit(self, amount):
        if amount <= 0:
            raise LedgerError("deposit must be positive")
        balance = self.check_balance() + amount
        self.accounts.upsert({"owner": self.owner, "balance": balance}, Accounts.owner == self.owner)
        return balance

    def issue_token(self, metadata_uri):
        token_id = secrets.token_hex(16)
        self.tokens.insert({
            "token_id": token_id,
            "owner": self.owner,
            "metadata_uri": metadata_uri,
            "issued_at": time.time(),
        })
        logger.info("token %s issued to %s", token_id, self.owner)
        return token_id

    def transfer_token(self, token_id, recipient):
        row = self.tokens.get(Tokens.token_id == token_id)
        if row is None:
            logger.warning("transfer of unknown token %s", token_id)
            return False
        if row["owner"] != self.owner:
            logger.warning("token %s is owned by %s, not %s", token_id, row["owner"], self.owner)
            return False
        self.tokens.update({"owner": recipient}, Tokens.token_id == token_id)
        logger.info("token %s transferred to %s", token_id, recipient)
        return True

    def owner_of(self, token_id):
        row = self.tokens.get(Tokens.token_id == token_id)
        return row["owner"] if row else None
