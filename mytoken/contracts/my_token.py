"""
MyToken: upgradeable ERC-20 with ETH custody, owner controls and a
holder reward, deployed behind a UUPS proxy.

MyToken2 is the upgrade target: same storage layout plus a reward counter.
"""

from ..constants import INITIAL_SUPPLY, TOKEN_NAME, TOKEN_SYMBOL
from .access import OwnableUpgradeable, only_owner
from .base import external, require
from .erc20 import ERC20BurnableUpgradeable
from .events import EthDepositedEvent, EthWithdrawnEvent
from .proxy import UUPSUpgradeable, initializer, reinitializer
from .security import PausableUpgradeable, when_not_paused


class MyToken(
    ERC20BurnableUpgradeable,
    PausableUpgradeable,
    OwnableUpgradeable,
    UUPSUpgradeable,
):
    """
    ETH custody: ``deposit`` records the value sent against the caller in a
    ledger kept separately from the contract balance. ``withdrawBalance``
    pays a caller back their own deposit; ``withdrawAll`` lets the owner sweep
    the whole balance and clears the ledger, so recorded deposits never
    exceed what the contract holds.

    While paused, token movements and deposits revert; withdrawals do not.
    """

    __storage__ = ("_eth_balances", "_depositors")

    def constructor(self) -> None:
        self._disable_initializers()

    @external("initialize()")
    @initializer
    def initialize(self) -> None:
        self._erc20_init(TOKEN_NAME, TOKEN_SYMBOL)
        self._pausable_init()
        self._ownable_init()
        self._mint(self.msg.sender, INITIAL_SUPPLY)

    @external("version()", "string", view=True)
    def version(self) -> str:
        return "1"

    # ── Admin ─────────────────────────────────────────────────────────

    @external("pause()")
    @only_owner
    def pause(self) -> None:
        self._pause()

    @external("unpause()")
    @only_owner
    def unpause(self) -> None:
        self._unpause()

    def _authorize_upgrade(self, new_implementation: str) -> None:
        self._check_owner()

    # ── Tokens ────────────────────────────────────────────────────────

    @external("mint(address,uint256)")
    @only_owner
    def mint(self, to: str, amount: int) -> None:
        self._mint(to, amount)

    @external("makeHolderRich(address)")
    @only_owner
    def make_holder_rich(self, holder: str) -> None:
        """Lottery payout: mints the current total supply to *holder*."""
        reward = self.total_supply()
        self._mint(holder, reward)

    def _before_token_transfer(self, sender: str, recipient: str, amount: int) -> None:
        super()._before_token_transfer(sender, recipient, amount)
        self._require_not_paused()

    # ── ETH custody ───────────────────────────────────────────────────

    @external("deposit()", payable=True)
    @when_not_paused
    def deposit(self) -> None:
        amount = self.msg.value
        require(amount > 0, "MyToken: deposit value must be greater than zero")

        depositor = self.msg.sender
        depositors = self._sload("_depositors", ())
        if depositor not in depositors:
            self._sstore("_depositors", depositors + (depositor,))
        self._sstore(("_eth_balances", depositor), self.get_eth_balance(depositor) + amount)
        self._emit(EthDepositedEvent(depositor, amount))

    @external("getEthBalance(address)", "uint256", view=True)
    def get_eth_balance(self, account: str) -> int:
        return self._sload(("_eth_balances", account))

    @external("withdrawBalance()")
    def withdraw_balance(self) -> None:
        recipient = self.msg.sender
        amount = self.get_eth_balance(recipient)
        require(amount > 0, "MyToken: no ETH deposited")

        self._sstore(("_eth_balances", recipient), 0)
        self._send_value(recipient, amount)
        self._emit(EthWithdrawnEvent(recipient, amount))

    @external("withdrawAll()")
    @only_owner
    def withdraw_all(self) -> None:
        amount = self._self_balance()
        require(amount > 0, "MyToken: nothing to withdraw")

        for depositor in self._sload("_depositors", ()):
            self._sstore(("_eth_balances", depositor), 0)
        self._sstore("_depositors", ())

        owner = self.owner()
        self._send_value(owner, amount)
        self._emit(EthWithdrawnEvent(owner, amount))


class MyToken2(MyToken):
    """Second version: counts holder rewards."""

    __storage__ = ("_reward_distributions",)

    @external("initializeV2()")
    @reinitializer(2)
    def initialize_v2(self) -> None:
        self._sstore("_reward_distributions", 0)

    @external("version()", "string", view=True)
    def version(self) -> str:
        return "2"

    @external("rewardDistributions()", "uint256", view=True)
    def reward_distributions(self) -> int:
        return self._sload("_reward_distributions")

    def make_holder_rich(self, holder: str) -> None:
        super().make_holder_rich(holder)
        self._sstore("_reward_distributions", self.reward_distributions() + 1)
