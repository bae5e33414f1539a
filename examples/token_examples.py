"""
MyToken Integration Example

Demonstrates how to deploy MyToken behind a UUPS proxy on the local chain,
use it, and upgrade it in place to MyToken2.
"""

import asyncio

from mytoken.chain import LocalChain, get_contract_factory
from mytoken.constants import ONE_ETHER
from mytoken.crypto import encode_function_call
from mytoken.upgrades import deploy_proxy, get_implementation_address, upgrade_proxy


async def example_deploy(chain):
    """Example: Deploy the first version behind a proxy."""

    owner = chain.signers[0]
    token = await deploy_proxy(chain, get_contract_factory(chain, "MyToken", owner))

    print(f"Proxy address: {token.address}")
    print(f"Implementation: {get_implementation_address(chain, token)}")
    print(f"Owner: {await token.owner()}")
    print(f"Total supply: {await token.totalSupply()}")

    return token


async def example_eth_custody(chain, token):
    """Example: Deposit ETH from several accounts and sweep it."""

    for depositor in chain.signers[1:4]:
        await token.connect(depositor).deposit(value=ONE_ETHER)
        print(f"{depositor.address} deposited {await token.getEthBalance(depositor)} wei")

    print(f"Contract balance: {await chain.get_balance(token.address)} wei")

    # one depositor takes their own ETH back, the owner sweeps the rest
    await token.connect(chain.signers[1]).withdrawBalance()
    receipt = await token.withdrawAll()
    for log in receipt.logs:
        print(f"Log: {log.to_dict()}")
    print(f"Contract balance after withdrawAll: {await chain.get_balance(token.address)} wei")


async def example_raw_call(chain, token):
    """Example: Send hand-encoded calldata straight to the proxy."""

    holder = chain.signers[5]
    data = encode_function_call('makeHolderRich(address)', holder.address)
    receipt = await chain.send_transaction(chain.signers[0], token.address, data)

    print(f"Transaction hash: {receipt.tx_hash}")
    print(f"Function selector: 0x{data[:4].hex()}")
    print(f"Holder balance: {await token.balanceOf(holder)}")


async def example_upgrade(chain, token):
    """Example: Upgrade to MyToken2 and run its reinitializer."""

    factory = get_contract_factory(chain, "MyToken2", chain.signers[0])
    token = await upgrade_proxy(chain, token, factory, call="initializeV2")

    await token.makeHolderRich(chain.signers[6])
    print(f"Version: {await token.version()}")
    print(f"Reward distributions: {await token.rewardDistributions()}")
    print(f"Implementation: {get_implementation_address(chain, token)}")

    return token


async def main():
    """Run all examples."""

    print("=" * 70)
    print("MyToken Examples")
    print("=" * 70)
    print()

    chain = LocalChain()

    print("1. Deploying proxy...")
    token = await example_deploy(chain)
    print()

    print("2. Depositing and withdrawing ETH...")
    await example_eth_custody(chain, token)
    print()

    print("3. Sending raw calldata...")
    await example_raw_call(chain, token)
    print()

    print("4. Upgrading to MyToken2...")
    await example_upgrade(chain, token)
    print()

    print("=" * 70)
    print("Examples complete!")
    print("=" * 70)


if __name__ == '__main__':
    asyncio.run(main())
