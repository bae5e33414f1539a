"""
MyToken Test Suite

Coverage:
  Deployment    : proxy deployment, initializer, metadata, initial supply
  ETH custody   : deposit, getEthBalance, withdrawBalance, withdrawAll
  Token ops     : transfer, burn, mint, allowances, makeHolderRich
  Admin         : pause / unpause, ownership
"""

import sys
import os

import pytest

# ── Path setup ────────────────────────────────────────────────────────
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from mytoken.chain import LocalChain, get_contract_factory, load_fixture
from mytoken.constants import (
    INITIAL_SUPPLY,
    ONE_ETHER,
    TOKEN_DECIMALS,
    TOKEN_NAME,
    TOKEN_SYMBOL,
    ZERO_ADDRESS,
)
from mytoken.exceptions import TransactionReverted
from mytoken.upgrades import deploy_proxy


# ══════════════════════════════════════════════════════════════════════
#  HELPERS
# ══════════════════════════════════════════════════════════════════════

NOT_OWNER = "Ownable: caller is not the owner"


async def deploy_my_token(chain: LocalChain):
    """Deploy MyToken behind a proxy from the first account."""
    owner, addr1, addr2, *others = chain.signers
    factory = get_contract_factory(chain, "MyToken", owner)
    token = await deploy_proxy(chain, factory, initializer="initialize", kind="uups")
    return token, owner, addr1, addr2, others


@pytest.fixture
def chain():
    return LocalChain()


# ══════════════════════════════════════════════════════════════════════
#  DEPLOYMENT
# ══════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
class TestDeployment:
    """Proxy deployment and initialization."""

    async def test_owner_is_deployer(self, chain):
        token, owner, *_ = await load_fixture(chain, deploy_my_token)
        assert await token.owner() == owner.address

    async def test_initial_supply_minted_to_owner(self, chain):
        token, owner, *_ = await load_fixture(chain, deploy_my_token)
        assert await token.balanceOf(owner) == INITIAL_SUPPLY
        assert await token.totalSupply() == INITIAL_SUPPLY

    async def test_metadata(self, chain):
        token, *_ = await load_fixture(chain, deploy_my_token)
        assert await token.name() == TOKEN_NAME
        assert await token.symbol() == TOKEN_SYMBOL
        assert await token.decimals() == TOKEN_DECIMALS
        assert await token.version() == "1"

    async def test_not_paused_after_initialize(self, chain):
        token, *_ = await load_fixture(chain, deploy_my_token)
        assert await token.paused() is False

    async def test_initialize_twice_reverts(self, chain):
        token, *_ = await load_fixture(chain, deploy_my_token)
        with pytest.raises(TransactionReverted, match="already initialized"):
            await token.initialize()

    async def test_initialize_from_other_account_reverts(self, chain):
        token, _, addr1, *_ = await load_fixture(chain, deploy_my_token)
        with pytest.raises(TransactionReverted, match="already initialized"):
            await token.connect(addr1).initialize()
        assert await token.owner() != addr1.address

    async def test_deploy_receipt_events(self, chain):
        token, owner, *_ = await load_fixture(chain, deploy_my_token)
        receipt = token.deploy_receipt
        assert receipt.contract_address == token.address
        assert [e.version for e in receipt.events("Initialized")] == [1]
        (mint,) = receipt.events("Transfer")
        assert mint.sender == ZERO_ADDRESS
        assert mint.recipient == owner.address
        assert mint.amount == INITIAL_SUPPLY
        (ownership,) = receipt.events("OwnershipTransferred")
        assert ownership.new_owner == owner.address


# ══════════════════════════════════════════════════════════════════════
#  ETH CUSTODY
# ══════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
class TestEthCustody:
    """deposit / getEthBalance / withdrawBalance / withdrawAll."""

    async def test_zero_deposit_reverts(self, chain):
        token, _, addr1, *_ = await load_fixture(chain, deploy_my_token)
        with pytest.raises(TransactionReverted, match="greater than zero"):
            await token.connect(addr1).deposit(value=0)
        assert await token.getEthBalance(addr1) == 0

    async def test_deposit_records_balance(self, chain):
        token, _, addr1, *_ = await load_fixture(chain, deploy_my_token)
        receipt = await token.connect(addr1).deposit(value=ONE_ETHER)

        assert await token.getEthBalance(addr1) == ONE_ETHER
        assert await chain.get_balance(token.address) == ONE_ETHER
        (event,) = receipt.events("EthDeposited")
        assert event.account == addr1.address
        assert event.amount == ONE_ETHER

    async def test_deposits_accumulate(self, chain):
        token, _, addr1, *_ = await load_fixture(chain, deploy_my_token)
        await token.connect(addr1).deposit(value=ONE_ETHER)
        await token.connect(addr1).deposit(value=2 * ONE_ETHER)
        assert await token.getEthBalance(addr1) == 3 * ONE_ETHER

    async def test_deposit_then_withdraw_round_trip(self, chain):
        token, _, addr1, *_ = await load_fixture(chain, deploy_my_token)
        contract_before = await chain.get_balance(token.address)
        account_before = await chain.get_balance(addr1)

        await token.connect(addr1).deposit(value=ONE_ETHER)
        assert await chain.get_balance(token.address) == contract_before + ONE_ETHER

        receipt = await token.connect(addr1).withdrawBalance()
        assert await chain.get_balance(token.address) == contract_before
        assert await chain.get_balance(addr1) == account_before
        assert await token.getEthBalance(addr1) == 0
        (event,) = receipt.events("EthWithdrawn")
        assert event.recipient == addr1.address

    async def test_withdraw_only_returns_own_deposit(self, chain):
        token, _, addr1, addr2, _ = await load_fixture(chain, deploy_my_token)
        await token.connect(addr1).deposit(value=ONE_ETHER)
        await token.connect(addr2).deposit(value=2 * ONE_ETHER)

        await token.connect(addr1).withdrawBalance()
        assert await chain.get_balance(token.address) == 2 * ONE_ETHER
        assert await token.getEthBalance(addr2) == 2 * ONE_ETHER

    async def test_withdraw_without_deposit_reverts(self, chain):
        token, _, addr1, *_ = await load_fixture(chain, deploy_my_token)
        with pytest.raises(TransactionReverted, match="no ETH deposited"):
            await token.connect(addr1).withdrawBalance()

    async def test_withdraw_all_five_depositors(self, chain):
        token, owner, _, _, others = await load_fixture(chain, deploy_my_token)
        depositors = others[:5]
        start = await chain.get_balance(token.address)
        owner_before = await chain.get_balance(owner)

        for depositor in depositors:
            await token.connect(depositor).deposit(value=ONE_ETHER)
        assert await chain.get_balance(token.address) == start + 5 * ONE_ETHER

        await token.withdrawAll()
        assert await chain.get_balance(token.address) == start
        assert await chain.get_balance(owner) == owner_before + 5 * ONE_ETHER
        for depositor in depositors:
            assert await token.getEthBalance(depositor) == 0

    async def test_withdraw_all_non_owner_reverts(self, chain):
        token, _, addr1, addr2, others = await load_fixture(chain, deploy_my_token)
        await token.connect(addr1).deposit(value=ONE_ETHER)
        for caller in (addr1, addr2, *others[:3]):
            with pytest.raises(TransactionReverted, match=NOT_OWNER):
                await token.connect(caller).withdrawAll()
        assert await chain.get_balance(token.address) == ONE_ETHER

    async def test_withdraw_all_empty_reverts(self, chain):
        token, *_ = await load_fixture(chain, deploy_my_token)
        with pytest.raises(TransactionReverted, match="nothing to withdraw"):
            await token.withdrawAll()

    async def test_withdraw_after_withdraw_all_reverts(self, chain):
        token, _, addr1, *_ = await load_fixture(chain, deploy_my_token)
        await token.connect(addr1).deposit(value=ONE_ETHER)
        await token.withdrawAll()
        with pytest.raises(TransactionReverted, match="no ETH deposited"):
            await token.connect(addr1).withdrawBalance()

    async def test_plain_value_transfer_rejected(self, chain):
        token, _, addr1, *_ = await load_fixture(chain, deploy_my_token)
        balance_before = await chain.get_balance(addr1)
        with pytest.raises(TransactionReverted):
            await chain.send_transaction(addr1, token.address, value=ONE_ETHER)
        assert await chain.get_balance(addr1) == balance_before
        assert await chain.get_balance(token.address) == 0

    async def test_value_on_nonpayable_function_rejected(self, chain):
        token, _, addr1, *_ = await load_fixture(chain, deploy_my_token)
        with pytest.raises(TypeError, match="not payable"):
            await token.connect(addr1).withdrawBalance(value=1)


# ══════════════════════════════════════════════════════════════════════
#  TOKEN OPERATIONS
# ══════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
class TestTokenOperations:
    """ERC-20 transfer, burn, mint and allowances."""

    async def test_transfer(self, chain):
        token, owner, addr1, *_ = await load_fixture(chain, deploy_my_token)
        receipt = await token.transfer(addr1, 50)

        assert await token.balanceOf(owner) == INITIAL_SUPPLY - 50
        assert await token.balanceOf(addr1) == 50
        assert await token.totalSupply() == INITIAL_SUPPLY
        (event,) = receipt.events("Transfer")
        assert (event.sender, event.recipient, event.amount) == (owner.address, addr1.address, 50)

    async def test_transfer_exceeding_balance_reverts(self, chain):
        token, owner, addr1, addr2, _ = await load_fixture(chain, deploy_my_token)
        await token.transfer(addr1, 10)
        with pytest.raises(TransactionReverted, match="exceeds balance"):
            await token.connect(addr1).transfer(addr2, 11)
        assert await token.balanceOf(addr1) == 10
        assert await token.balanceOf(addr2) == 0

    async def test_transfer_to_zero_address_reverts(self, chain):
        token, *_ = await load_fixture(chain, deploy_my_token)
        with pytest.raises(TransactionReverted, match="transfer to the zero address"):
            await token.transfer(ZERO_ADDRESS, 1)

    async def test_burn(self, chain):
        token, owner, *_ = await load_fixture(chain, deploy_my_token)
        await token.burn(50)
        assert await token.balanceOf(owner) == INITIAL_SUPPLY - 50
        assert await token.totalSupply() == INITIAL_SUPPLY - 50

    async def test_burn_exceeding_balance_reverts(self, chain):
        token, _, addr1, *_ = await load_fixture(chain, deploy_my_token)
        with pytest.raises(TransactionReverted, match="burn amount exceeds balance"):
            await token.connect(addr1).burn(1)

    async def test_mint_by_owner(self, chain):
        token, _, addr1, *_ = await load_fixture(chain, deploy_my_token)
        await token.mint(addr1, 100)
        assert await token.balanceOf(addr1) == 100
        assert await token.totalSupply() == INITIAL_SUPPLY + 100

    async def test_mint_by_non_owner_reverts(self, chain):
        token, _, addr1, *_ = await load_fixture(chain, deploy_my_token)
        with pytest.raises(TransactionReverted, match=NOT_OWNER):
            await token.connect(addr1).mint(addr1, 100)
        assert await token.totalSupply() == INITIAL_SUPPLY

    async def test_increase_allowance_and_transfer_from(self, chain):
        token, owner, addr1, addr2, _ = await load_fixture(chain, deploy_my_token)
        await token.increaseAllowance(addr1, 100)
        assert await token.allowance(owner, addr1) == 100

        await token.connect(addr1).transferFrom(owner, addr2, 60)
        assert await token.balanceOf(addr2) == 60
        assert await token.allowance(owner, addr1) == 40

    async def test_transfer_from_exceeding_allowance_reverts(self, chain):
        token, owner, addr1, addr2, _ = await load_fixture(chain, deploy_my_token)
        await token.approve(addr1, 10)
        with pytest.raises(TransactionReverted, match="insufficient allowance"):
            await token.connect(addr1).transferFrom(owner, addr2, 11)
        assert await token.allowance(owner, addr1) == 10

    async def test_decrease_allowance_below_zero_reverts(self, chain):
        token, _, addr1, *_ = await load_fixture(chain, deploy_my_token)
        await token.increaseAllowance(addr1, 5)
        await token.decreaseAllowance(addr1, 3)
        with pytest.raises(TransactionReverted, match="below zero"):
            await token.decreaseAllowance(addr1, 3)

    async def test_burn_from(self, chain):
        token, owner, addr1, *_ = await load_fixture(chain, deploy_my_token)
        await token.approve(addr1, 30)
        await token.connect(addr1).burnFrom(owner, 30)
        assert await token.totalSupply() == INITIAL_SUPPLY - 30
        assert await token.allowance(owner, addr1) == 0

    async def test_make_holder_rich_mints_total_supply(self, chain):
        token, _, addr1, *_ = await load_fixture(chain, deploy_my_token)
        await token.makeHolderRich(addr1)
        assert await token.balanceOf(addr1) == INITIAL_SUPPLY
        assert await token.totalSupply() == 2 * INITIAL_SUPPLY

    async def test_make_holder_rich_non_owner_reverts(self, chain):
        token, _, addr1, *_ = await load_fixture(chain, deploy_my_token)
        with pytest.raises(TransactionReverted, match=NOT_OWNER):
            await token.connect(addr1).makeHolderRich(addr1)

    async def test_balances_sum_to_total_supply(self, chain):
        token, owner, addr1, addr2, others = await load_fixture(chain, deploy_my_token)
        await token.transfer(addr1, 1000)
        await token.connect(addr1).transfer(addr2, 400)
        await token.mint(others[0], 77)
        await token.connect(addr2).burn(100)
        await token.makeHolderRich(addr2)

        holders = (owner, addr1, addr2, others[0])
        total = 0
        for holder in holders:
            total += await token.balanceOf(holder)
        assert total == await token.totalSupply()


# ══════════════════════════════════════════════════════════════════════
#  ADMIN: PAUSE & OWNERSHIP
# ══════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
class TestPause:
    """pause / unpause / paused."""

    async def test_pause_and_unpause(self, chain):
        token, owner, *_ = await load_fixture(chain, deploy_my_token)
        receipt = await token.pause()
        assert await token.paused() is True
        assert receipt.events("Paused")[0].account == owner.address

        await token.unpause()
        assert await token.paused() is False

    async def test_pause_non_owner_reverts(self, chain):
        token, _, addr1, *_ = await load_fixture(chain, deploy_my_token)
        with pytest.raises(TransactionReverted, match=NOT_OWNER):
            await token.connect(addr1).pause()

    async def test_pause_twice_reverts(self, chain):
        token, *_ = await load_fixture(chain, deploy_my_token)
        await token.pause()
        with pytest.raises(TransactionReverted, match="Pausable: paused"):
            await token.pause()

    async def test_unpause_when_not_paused_reverts(self, chain):
        token, *_ = await load_fixture(chain, deploy_my_token)
        with pytest.raises(TransactionReverted, match="Pausable: not paused"):
            await token.unpause()

    async def test_paused_blocks_token_movements(self, chain):
        token, _, addr1, *_ = await load_fixture(chain, deploy_my_token)
        await token.pause()
        with pytest.raises(TransactionReverted, match="Pausable: paused"):
            await token.transfer(addr1, 1)
        with pytest.raises(TransactionReverted, match="Pausable: paused"):
            await token.mint(addr1, 1)
        with pytest.raises(TransactionReverted, match="Pausable: paused"):
            await token.burn(1)
        with pytest.raises(TransactionReverted, match="Pausable: paused"):
            await token.makeHolderRich(addr1)

    async def test_paused_blocks_deposit_not_withdrawal(self, chain):
        token, _, addr1, *_ = await load_fixture(chain, deploy_my_token)
        await token.connect(addr1).deposit(value=ONE_ETHER)
        await token.pause()

        with pytest.raises(TransactionReverted, match="Pausable: paused"):
            await token.connect(addr1).deposit(value=ONE_ETHER)
        await token.connect(addr1).withdrawBalance()
        assert await token.getEthBalance(addr1) == 0


@pytest.mark.asyncio
class TestOwnership:
    """transferOwnership / renounceOwnership."""

    async def test_transfer_ownership(self, chain):
        token, owner, addr1, *_ = await load_fixture(chain, deploy_my_token)
        receipt = await token.transferOwnership(addr1)
        assert await token.owner() == addr1.address
        (event,) = receipt.events("OwnershipTransferred")
        assert (event.previous_owner, event.new_owner) == (owner.address, addr1.address)

        with pytest.raises(TransactionReverted, match=NOT_OWNER):
            await token.pause()
        await token.connect(addr1).pause()

    async def test_transfer_ownership_to_zero_reverts(self, chain):
        token, *_ = await load_fixture(chain, deploy_my_token)
        with pytest.raises(TransactionReverted, match="zero address"):
            await token.transferOwnership(ZERO_ADDRESS)

    async def test_renounce_ownership(self, chain):
        token, *_ = await load_fixture(chain, deploy_my_token)
        await token.renounceOwnership()
        assert await token.owner() == ZERO_ADDRESS
        with pytest.raises(TransactionReverted, match=NOT_OWNER):
            await token.mint(ZERO_ADDRESS, 1)
