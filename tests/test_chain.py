"""
Local Chain Test Suite

Coverage:
  ChainState    : accounts, storage, snapshot / revert / discard
  LocalChain    : funded signers, deployment addresses, receipts,
                  revert atomicity, eth_call, value transfers
  Client        : contract handles, factories, artifacts
"""

import sys
import os

import pytest

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from mytoken.chain import (
    ChainState,
    ContractFactory,
    LocalChain,
    Message,
    derive_account_address,
    get_contract_factory,
)
from mytoken.constants import DEFAULT_ACCOUNT_BALANCE, DEFAULT_ACCOUNT_SEED, ONE_ETHER
from mytoken.contracts import Contract, ERC1967Proxy, Revert, external, require
from mytoken.crypto import encode_function_call, generate_contract_address
from mytoken.exceptions import ContractNotFoundError, InvalidAddressError, TransactionReverted


# ══════════════════════════════════════════════════════════════════════
#  HELPERS
# ══════════════════════════════════════════════════════════════════════

ALICE = "0x" + "a1" * 20
BOB = "0x" + "b2" * 20


class Counter(Contract):
    """Minimal contract exercising storage, reverts and value."""

    __storage__ = ("_count",)

    def constructor(self, start: int = 0) -> None:
        self._sstore("_count", start)

    @external("count()", "uint256", view=True)
    def count(self) -> int:
        return self._sload("_count")

    @external("increment()", "uint256")
    def increment(self) -> int:
        self._sstore("_count", self.count() + 1)
        return self.count()

    @external("incrementAndFail()")
    def increment_and_fail(self) -> None:
        self.increment()
        raise Revert("Counter: failed")

    @external("add(uint256)")
    def add(self, amount: int) -> None:
        require(amount > 0, "Counter: zero amount")
        self._sstore("_count", self.count() + amount)

    @external("add(uint256,uint256)")
    def add_twice(self, first: int, second: int) -> None:
        self.add(first)
        self.add(second)

    @external("tip()", payable=True)
    def tip(self) -> None:
        require(self.msg.value >= 10, "Counter: tip too small")


@pytest.fixture
def chain():
    return LocalChain(accounts=3)


# ══════════════════════════════════════════════════════════════════════
#  CHAIN STATE
# ══════════════════════════════════════════════════════════════════════


class TestChainState:
    """Accounts, storage and snapshots."""

    def test_new_account_is_empty(self):
        state = ChainState()
        account = state.get_account(ALICE)
        assert account.is_empty
        assert not account.is_contract
        assert not state.account_exists(ALICE)

    def test_addresses_are_normalized(self):
        state = ChainState()
        state.set_balance(ALICE, 5)
        assert state.get_balance(ALICE.upper().replace("0X", "0x")) == 5

    def test_invalid_address_raises(self):
        with pytest.raises(InvalidAddressError):
            ChainState().get_balance("0x1234")

    def test_negative_balance_raises(self):
        with pytest.raises(ValueError, match="negative"):
            ChainState().set_balance(ALICE, -1)

    def test_increment_nonce_returns_previous(self):
        state = ChainState()
        assert state.increment_nonce(ALICE) == 0
        assert state.increment_nonce(ALICE) == 1
        assert state.get_nonce(ALICE) == 2

    def test_storage_none_deletes(self):
        state = ChainState()
        state.set_storage(ALICE, ("_balances", BOB), 7)
        assert state.get_storage(ALICE, ("_balances", BOB)) == 7
        assert state.storage_keys(ALICE) == [("_balances", BOB)]
        state.set_storage(ALICE, ("_balances", BOB), None)
        assert state.get_storage(ALICE, ("_balances", BOB), 0) == 0
        assert state.storage_keys(ALICE) == []

    def test_snapshot_revert(self):
        state = ChainState()
        state.set_balance(ALICE, 100)
        state.set_storage(ALICE, "x", 1)
        snapshot_id = state.snapshot()

        state.set_balance(ALICE, 50)
        state.set_balance(BOB, 50)
        state.set_storage(ALICE, "x", 2)
        state.increment_nonce(ALICE)
        state.revert(snapshot_id)

        assert state.get_balance(ALICE) == 100
        assert state.get_balance(BOB) == 0
        assert state.get_nonce(ALICE) == 0
        assert state.get_storage(ALICE, "x") == 1

    def test_revert_drops_newer_snapshots(self):
        state = ChainState()
        first = state.snapshot()
        second = state.snapshot()
        state.revert(first)
        with pytest.raises(ValueError, match="Invalid snapshot"):
            state.revert(second)

    def test_discard_keeps_changes(self):
        state = ChainState()
        snapshot_id = state.snapshot()
        state.set_balance(ALICE, 9)
        state.discard(snapshot_id)
        assert state.get_balance(ALICE) == 9
        with pytest.raises(ValueError):
            state.revert(snapshot_id)


# ══════════════════════════════════════════════════════════════════════
#  LOCAL CHAIN
# ══════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
class TestLocalChain:
    """Accounts, deployment and transaction execution."""

    async def test_signers_funded_and_deterministic(self, chain):
        signers = await chain.get_signers()
        assert len(signers) == 3
        assert [s.index for s in signers] == [0, 1, 2]
        assert signers[1].address == derive_account_address(DEFAULT_ACCOUNT_SEED, 1)
        for signer in signers:
            assert await chain.get_balance(signer) == DEFAULT_ACCOUNT_BALANCE
        assert LocalChain(accounts=3).signers == signers

    async def test_invalid_parameters(self):
        with pytest.raises(ValueError):
            LocalChain(accounts=0)
        with pytest.raises(ValueError):
            LocalChain(initial_balance=-1)

    async def test_deploy_address_follows_nonce(self, chain):
        deployer = chain.signers[0]
        expected = generate_contract_address(deployer.address, 0)
        receipt = await chain.deploy(Counter, deployer, 5)

        assert receipt.contract_address == expected
        assert await chain.get_code(expected) is Counter
        assert await chain.get_transaction_count(deployer) == 1
        assert receipt.block_number == 1

    async def test_transaction_receipts(self, chain):
        counter = await ContractFactory(chain, Counter, chain.signers[0]).deploy()
        receipt = await counter.increment()

        assert receipt.status == 1
        assert receipt.block_number == 2
        assert receipt.to == counter.address
        assert await chain.get_receipt(receipt.tx_hash) is receipt
        assert receipt.to_dict()["transactionHash"] == receipt.tx_hash

    async def test_revert_is_atomic(self, chain):
        sender = chain.signers[0]
        counter = await ContractFactory(chain, Counter, sender).deploy(1)
        nonce = await chain.get_transaction_count(sender)
        block = chain.block_number

        with pytest.raises(TransactionReverted) as exc_info:
            await counter.incrementAndFail()

        assert exc_info.value.reason == "Counter: failed"
        assert exc_info.value.tx_hash.startswith("0x")
        assert await counter.count() == 1
        assert await chain.get_transaction_count(sender) == nonce
        assert chain.block_number == block

    async def test_reverting_constructor_leaves_no_code(self, chain):
        class Broken(Contract):
            def constructor(self) -> None:
                raise Revert("Broken: no")

        deployer = chain.signers[0]
        address = generate_contract_address(deployer.address, 0)
        with pytest.raises(TransactionReverted, match="Broken: no"):
            await chain.deploy(Broken, deployer)
        assert await chain.get_code(address) is None

    async def test_failed_deploy_restores_nonce_and_code(self, chain):
        deployer = chain.signers[0]
        address = generate_contract_address(deployer.address, 0)
        snapshot_id = chain.snapshot()
        chain.revert(snapshot_id)

        with pytest.raises(InvalidAddressError):
            await chain.deploy(ERC1967Proxy, deployer, "0xdead")
        assert await chain.get_transaction_count(deployer) == 0
        assert await chain.get_code(address) is None
        assert chain.block_number == 0
        assert chain.snapshot() == snapshot_id

        counter = await ContractFactory(chain, Counter, deployer).deploy()
        assert counter.address == address

    async def test_static_frame_rejects_writes(self, chain):
        sender = chain.signers[0]
        counter = await ContractFactory(chain, Counter, sender).deploy()
        msg = Message(
            sender=sender.address,
            to=counter.address,
            data=encode_function_call("increment()"),
            static=True,
        )
        with pytest.raises(Revert, match="static call"):
            chain.execute_message(msg)
        assert await counter.count() == 0

        msg = Message(sender=sender.address, to=counter.address, data=encode_function_call("count()"), static=True)
        assert chain.execute_message(msg) == (0).to_bytes(32, "big")

    async def test_call_discards_state(self, chain):
        counter = await ContractFactory(chain, Counter, chain.signers[0]).deploy()
        assert await counter.increment.call_static() == 1
        assert await counter.count() == 0

    async def test_overloads_selected_by_arity(self, chain):
        counter = await ContractFactory(chain, Counter, chain.signers[0]).deploy()
        await counter.add(2)
        await counter.add(3, 4)
        assert await counter.count() == 9
        with pytest.raises(TypeError, match="No unique overload"):
            await counter.add()

    async def test_payable_function(self, chain):
        sender = chain.signers[1]
        counter = await ContractFactory(chain, Counter, chain.signers[0]).deploy()
        await counter.connect(sender).tip(value=10)
        assert await chain.get_balance(counter.address) == 10
        assert await chain.get_balance(sender) == DEFAULT_ACCOUNT_BALANCE - 10

        with pytest.raises(TransactionReverted, match="tip too small"):
            await counter.connect(sender).tip(value=9)
        assert await chain.get_balance(counter.address) == 10

    async def test_value_to_nonpayable_reverts(self, chain):
        sender = chain.signers[0]
        counter = await ContractFactory(chain, Counter, sender).deploy()
        data = encode_function_call("increment()")
        with pytest.raises(TransactionReverted, match="not payable"):
            await chain.send_transaction(sender, counter.address, data, value=1)

    async def test_unknown_selector_reverts(self, chain):
        sender = chain.signers[0]
        counter = await ContractFactory(chain, Counter, sender).deploy()
        with pytest.raises(TransactionReverted, match="selector was not recognized"):
            await chain.send_transaction(sender, counter.address, encode_function_call("missing()"))

    async def test_invalid_calldata_reverts(self, chain):
        sender = chain.signers[0]
        counter = await ContractFactory(chain, Counter, sender).deploy()
        selector = encode_function_call("add(uint256)", 1)[:4]
        with pytest.raises(TransactionReverted, match="invalid calldata"):
            await chain.send_transaction(sender, counter.address, selector + b"\x01")

    async def test_value_transfer_between_accounts(self, chain):
        alice, bob, _ = chain.signers
        receipt = await chain.send_transaction(alice, bob, value=ONE_ETHER)
        assert receipt.logs == []
        assert await chain.get_balance(alice) == DEFAULT_ACCOUNT_BALANCE - ONE_ETHER
        assert await chain.get_balance(bob) == DEFAULT_ACCOUNT_BALANCE + ONE_ETHER

    async def test_insufficient_funds_reverts(self, chain):
        alice, bob, _ = chain.signers
        with pytest.raises(TransactionReverted, match="enough funds"):
            await chain.send_transaction(alice, bob, value=DEFAULT_ACCOUNT_BALANCE + 1)
        assert await chain.get_balance(bob) == DEFAULT_ACCOUNT_BALANCE

    async def test_chain_snapshot_revert(self, chain):
        counter = await ContractFactory(chain, Counter, chain.signers[0]).deploy()
        snapshot_id = chain.snapshot()
        await counter.increment()
        await counter.increment()
        chain.revert(snapshot_id)
        assert await counter.count() == 0


# ══════════════════════════════════════════════════════════════════════
#  CLIENT
# ══════════════════════════════════════════════════════════════════════


class TestClient:
    """Factories, handles and artifacts."""

    def test_unknown_artifact(self, chain):
        with pytest.raises(ContractNotFoundError, match="NoSuchToken"):
            get_contract_factory(chain, "NoSuchToken")

    def test_factory_defaults_to_first_signer(self, chain):
        factory = get_contract_factory(chain, "MyToken")
        assert factory.signer == chain.signers[0]
        assert factory.name == "MyToken"
        assert factory.connect(chain.signers[1]).signer == chain.signers[1]

    def test_handle_unknown_function(self, chain):
        handle = get_contract_factory(chain, "MyToken").attach(chain.signers[2])
        with pytest.raises(AttributeError, match="rewardDistributions"):
            handle.rewardDistributions
        assert "deposit" in handle.functions

    def test_abi_entries(self):
        entries = {f.name: f.to_dict() for f in Counter.abi()}
        assert entries["count"]["stateMutability"] == "view"
        assert entries["tip"]["stateMutability"] == "payable"
        assert entries["increment"]["outputs"] == [{"type": "uint256"}]

    def test_require_contract(self, chain):
        with pytest.raises(ContractNotFoundError):
            chain.require_contract(chain.signers[0].address)
