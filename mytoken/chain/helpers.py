"""
Test-network helpers.
"""

import weakref
from typing import Any, Awaitable, Callable, List, Tuple

from ..logger import get_logger
from .local import LocalChain

logger = get_logger(__name__)

Fixture = Callable[[LocalChain], Awaitable[Any]]

# chain -> [(fixture, snapshot_id, result)]
_fixture_cache: "weakref.WeakKeyDictionary[LocalChain, List[Tuple[Fixture, int, Any]]]" = (
    weakref.WeakKeyDictionary()
)


async def load_fixture(chain: LocalChain, fixture: Fixture) -> Any:
    """
    Run *fixture* once per chain and snapshot the result.

    Later calls with the same fixture revert the chain to that snapshot and
    return the cached result, so every caller starts from identical state.
    Reverting to an earlier fixture's snapshot discards later fixtures.
    """
    entries = _fixture_cache.setdefault(chain, [])
    for index, (cached, snapshot_id, result) in enumerate(entries):
        if cached is fixture:
            chain.revert(snapshot_id)
            entries[index] = (fixture, chain.snapshot(), result)
            del entries[index + 1:]
            return result

    result = await fixture(chain)
    entries.append((fixture, chain.snapshot(), result))
    logger.debug(f"Fixture {getattr(fixture, '__name__', fixture)} cached on {chain!r}")
    return result


def forget_fixtures(chain: LocalChain) -> None:
    _fixture_cache.pop(chain, None)
