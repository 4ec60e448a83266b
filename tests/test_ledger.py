import pytest

from zkmint.errors import LedgerError
from zkmint.ledger import Ledger, TinyDBLedger, open_db


@pytest.fixture
def ledger():
    return TinyDBLedger(open_db(":memory:"))


class TestTinyDBLedger:
    def test_is_a_ledger(self, ledger):
        assert isinstance(ledger, Ledger)

    def test_empty_balance(self, ledger):
        assert ledger.check_balance() == 0.0

    def test_deposit(self, ledger):
        assert ledger.deposit(1.5) == 1.5
        assert ledger.deposit(0.5) == 2.0
        assert ledger.check_balance() == 2.0

    @pytest.mark.parametrize("amount", [0, -1])
    def test_deposit_must_be_positive(self, ledger, amount):
        with pytest.raises(LedgerError):
            ledger.deposit(amount)

    def test_issue_token(self, ledger):
        first = ledger.issue_token("ipfs://meta")
        second = ledger.issue_token("ipfs://meta")
        assert first != second
        assert ledger.owner_of(first) == "local"

    def test_transfer(self, ledger):
        token_id = ledger.issue_token("ipfs://meta")
        assert ledger.transfer_token(token_id, "0xabc") is True
        assert ledger.owner_of(token_id) == "0xabc"
        # no longer ours
        assert ledger.transfer_token(token_id, "0xdef") is False

    def test_transfer_unknown_token(self, ledger):
        assert ledger.transfer_token("missing", "0xabc") is False

    def test_file_backed(self, tmp_path):
        path = tmp_path / "ledger.json"
        TinyDBLedger(open_db(path)).deposit(3)
        assert TinyDBLedger(open_db(path)).check_balance() == 3.0
