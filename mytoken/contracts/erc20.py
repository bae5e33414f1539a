"""
ERC-20 fungible token with allowance helpers and burn extension.

Balances and allowances are kept as storage mappings keyed by
("_balances", account) and ("_allowances", owner, spender).
"""

from ..constants import MAX_UINT256, TOKEN_DECIMALS, ZERO_ADDRESS
from .base import external, require
from .events import ApprovalEvent, TransferEvent
from .proxy import Initializable


class ERC20Upgradeable(Initializable):
    """
    Mirrors ERC-20 semantics:
        - balanceOf(address) → uint256
        - transfer(to, amount) / transferFrom(from, to, amount)
        - approve / increaseAllowance / decreaseAllowance
        - totalSupply → uint256

    Token movements go through ``_before_token_transfer`` so extensions can
    veto them (e.g. while paused).
    """

    __storage__ = ("_balances", "_allowances", "_total_supply", "_name", "_symbol")

    def _erc20_init(self, name: str, symbol: str) -> None:
        self._only_initializing()
        self._sstore("_name", name)
        self._sstore("_symbol", symbol)

    # ── Read-only views ───────────────────────────────────────────────

    @external("name()", "string", view=True)
    def name(self) -> str:
        return self._sload("_name", "")

    @external("symbol()", "string", view=True)
    def symbol(self) -> str:
        return self._sload("_symbol", "")

    @external("decimals()", "uint8", view=True)
    def decimals(self) -> int:
        return TOKEN_DECIMALS

    @external("totalSupply()", "uint256", view=True)
    def total_supply(self) -> int:
        return self._sload("_total_supply")

    @external("balanceOf(address)", "uint256", view=True)
    def balance_of(self, account: str) -> int:
        return self._sload(("_balances", account))

    @external("allowance(address,address)", "uint256", view=True)
    def allowance(self, owner: str, spender: str) -> int:
        return self._sload(("_allowances", owner, spender))

    # ── Core ERC-20 operations ────────────────────────────────────────

    @external("transfer(address,uint256)", "bool")
    def transfer(self, to: str, amount: int) -> bool:
        self._transfer(self.msg.sender, to, amount)
        return True

    @external("approve(address,uint256)", "bool")
    def approve(self, spender: str, amount: int) -> bool:
        self._approve(self.msg.sender, spender, amount)
        return True

    @external("transferFrom(address,address,uint256)", "bool")
    def transfer_from(self, sender: str, to: str, amount: int) -> bool:
        self._spend_allowance(sender, self.msg.sender, amount)
        self._transfer(sender, to, amount)
        return True

    @external("increaseAllowance(address,uint256)", "bool")
    def increase_allowance(self, spender: str, added_value: int) -> bool:
        owner = self.msg.sender
        current = self.allowance(owner, spender)
        require(current + added_value <= MAX_UINT256, "ERC20: allowance overflow")
        self._approve(owner, spender, current + added_value)
        return True

    @external("decreaseAllowance(address,uint256)", "bool")
    def decrease_allowance(self, spender: str, subtracted_value: int) -> bool:
        owner = self.msg.sender
        current = self.allowance(owner, spender)
        require(current >= subtracted_value, "ERC20: decreased allowance below zero")
        self._approve(owner, spender, current - subtracted_value)
        return True

    # ── Internal accounting ───────────────────────────────────────────

    def _before_token_transfer(self, sender: str, recipient: str, amount: int) -> None:
        """Hook run before every transfer, mint and burn."""

    def _transfer(self, sender: str, recipient: str, amount: int) -> None:
        require(sender != ZERO_ADDRESS, "ERC20: transfer from the zero address")
        require(recipient != ZERO_ADDRESS, "ERC20: transfer to the zero address")
        self._before_token_transfer(sender, recipient, amount)

        sender_balance = self.balance_of(sender)
        require(sender_balance >= amount, "ERC20: transfer amount exceeds balance")
        self._sstore(("_balances", sender), sender_balance - amount)
        self._sstore(("_balances", recipient), self.balance_of(recipient) + amount)
        self._emit(TransferEvent(sender, recipient, amount))

    def _mint(self, account: str, amount: int) -> None:
        require(account != ZERO_ADDRESS, "ERC20: mint to the zero address")
        self._before_token_transfer(ZERO_ADDRESS, account, amount)

        new_supply = self.total_supply() + amount
        require(new_supply <= MAX_UINT256, "ERC20: total supply overflow")
        self._sstore("_total_supply", new_supply)
        self._sstore(("_balances", account), self.balance_of(account) + amount)
        self._emit(TransferEvent(ZERO_ADDRESS, account, amount))

    def _burn(self, account: str, amount: int) -> None:
        require(account != ZERO_ADDRESS, "ERC20: burn from the zero address")
        self._before_token_transfer(account, ZERO_ADDRESS, amount)

        account_balance = self.balance_of(account)
        require(account_balance >= amount, "ERC20: burn amount exceeds balance")
        self._sstore(("_balances", account), account_balance - amount)
        self._sstore("_total_supply", self.total_supply() - amount)
        self._emit(TransferEvent(account, ZERO_ADDRESS, amount))

    def _approve(self, owner: str, spender: str, amount: int) -> None:
        require(owner != ZERO_ADDRESS, "ERC20: approve from the zero address")
        require(spender != ZERO_ADDRESS, "ERC20: approve to the zero address")
        self._sstore(("_allowances", owner, spender), amount)
        self._emit(ApprovalEvent(owner, spender, amount))

    def _spend_allowance(self, owner: str, spender: str, amount: int) -> None:
        current = self.allowance(owner, spender)
        if current == MAX_UINT256:
            return
        require(current >= amount, "ERC20: insufficient allowance")
        self._approve(owner, spender, current - amount)


class ERC20BurnableUpgradeable(ERC20Upgradeable):
    """Lets holders destroy their own tokens, or tokens they have an allowance for."""

    @external("burn(uint256)")
    def burn(self, amount: int) -> None:
        self._burn(self.msg.sender, amount)

    @external("burnFrom(address,uint256)")
    def burn_from(self, account: str, amount: int) -> None:
        self._spend_allowance(account, self.msg.sender, amount)
        self._burn(account, amount)
