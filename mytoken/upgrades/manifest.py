"""
Deployment manifest

Per-chain record of implementation contracts and the proxies pointing at
them, so repeated deployments of the same contract reuse one implementation.
"""

import time
import weakref
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..chain.local import LocalChain


@dataclass
class ImplementationRecord:
    contract_name: str
    address: str
    tx_hash: str
    layout: Tuple[str, ...]
    deployed_at: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "contract": self.contract_name,
            "address": self.address,
            "txHash": self.tx_hash,
            "layout": list(self.layout),
            "deployedAt": self.deployed_at,
        }


@dataclass
class ProxyRecord:
    address: str
    kind: str
    tx_hash: str

    def to_dict(self) -> Dict[str, Any]:
        return {"address": self.address, "kind": self.kind, "txHash": self.tx_hash}


class UpgradesManifest:
    """Implementations (by contract name) and proxies deployed on one chain."""

    def __init__(self, chain_id: int):
        self.chain_id = chain_id
        self._implementations: Dict[str, ImplementationRecord] = {}
        self._proxies: List[ProxyRecord] = []

    def get_implementation(self, contract_name: str) -> Optional[ImplementationRecord]:
        return self._implementations.get(contract_name)

    def add_implementation(self, record: ImplementationRecord) -> None:
        self._implementations[record.contract_name] = record

    def add_proxy(self, record: ProxyRecord) -> None:
        self._proxies.append(record)

    @property
    def proxies(self) -> List[ProxyRecord]:
        return list(self._proxies)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chainId": self.chain_id,
            "impls": {name: r.to_dict() for name, r in self._implementations.items()},
            "proxies": [p.to_dict() for p in self._proxies],
        }

    def __repr__(self) -> str:
        return f"<UpgradesManifest chain={self.chain_id} impls={len(self._implementations)} proxies={len(self._proxies)}>"


_manifests: "weakref.WeakKeyDictionary[LocalChain, UpgradesManifest]" = weakref.WeakKeyDictionary()


def get_manifest(chain: LocalChain) -> UpgradesManifest:
    manifest = _manifests.get(chain)
    if manifest is None:
        manifest = UpgradesManifest(chain.chain_id)
        _manifests[chain] = manifest
    return manifest
