"""All constants for the project"""

import os
from dataclasses import dataclass
from typing import Dict, Optional

from dotenv import load_dotenv

from raffle_toolkit.shared.exceptions import ConfigurationException

load_dotenv()

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Marker used in the network table for contracts that are not deployed yet
PLACEHOLDER_ADDRESS = "0x..."


@dataclass(frozen=True)
class NetworkConfig:
    """Static deployment information for one chain."""

    name: str
    rpc_url: str
    explorer: str
    raffle_manager: str = PLACEHOLDER_ADDRESS
    raffle_deployer: str = PLACEHOLDER_ADDRESS

    @property
    def has_raffle_contracts(self) -> bool:
        return _is_deployed(self.raffle_manager) and _is_deployed(
            self.raffle_deployer
        )


def _is_deployed(address: Optional[str]) -> bool:
    return bool(address) and address != PLACEHOLDER_ADDRESS


NETWORKS: Dict[int, NetworkConfig] = {
    1: NetworkConfig(
        name="Ethereum Mainnet",
        rpc_url="https://ethereum-rpc.publicnode.com",
        explorer="https://etherscan.io",
    ),
    10: NetworkConfig(
        name="OP Mainnet",
        rpc_url="https://mainnet.optimism.io",
        explorer="https://optimistic.etherscan.io",
    ),
    56: NetworkConfig(
        name="BNB Smart Chain",
        rpc_url="https://bsc.blockrazor.xyz",
        explorer="https://bscscan.com",
    ),
    97: NetworkConfig(
        name="BNB Smart Chain Testnet",
        rpc_url="https://bsc-testnet-rpc.publicnode.com",
        explorer="https://testnet.bscscan.com",
    ),
    2020: NetworkConfig(
        name="Ronin Mainnet",
        rpc_url="https://ronin.drpc.org",
        explorer="https://app.roninchain.com/",
    ),
    2021: NetworkConfig(
        name="Ronin Saigon Testnet",
        rpc_url="https://saigon-testnet.roninchain.com/rpc",
        explorer="https://saigon-app.roninchain.com/explorer",
    ),
    8453: NetworkConfig(
        name="Base Mainnet",
        rpc_url="https://base.drpc.org",
        explorer="https://basescan.org",
    ),
    42161: NetworkConfig(
        name="Arbitrum One",
        rpc_url="https://arbitrum.drpc.org",
        explorer="https://arbiscan.io",
    ),
    43113: NetworkConfig(
        name="Avalanche Fuji Testnet",
        rpc_url="https://avalanche-fuji.drpc.org",
        explorer="https://testnet.snowscan.xyz",
        raffle_manager="0x16271DE93576784a5467c06ec1D9405DE4195D36",
        raffle_deployer="0x7daD9Dfd20e57cb845251Ed94E78408bB0185232",
    ),
    43114: NetworkConfig(
        name="Avalanche C-Chain",
        rpc_url="https://avalanche.drpc.org",
        explorer="https://snowscan.xyz",
    ),
    84532: NetworkConfig(
        name="Base Sepolia",
        rpc_url="https://base-sepolia-rpc.publicnode.com",
        explorer="https://sepolia.basescan.org",
        raffle_manager="0xe17B16Ad42e7dd542b18D28BAb4b1017D26250E8",
        raffle_deployer="0x1f9EF185846626fDCcf7474a87e092a2D96c8437",
    ),
    421614: NetworkConfig(
        name="Arbitrum Sepolia",
        rpc_url="https://endpoints.omniatech.io/v1/arbitrum/sepolia/public",
        explorer="https://sepolia.arbiscan.io",
        raffle_manager="0x38FfF955929fc3F47cA2D4E1d59FF70CBDB97Dc6",
        raffle_deployer="0xf98d8f491Ab29D7C17b7E53785f498e81370FF58",
    ),
    11155111: NetworkConfig(
        name="Ethereum Sepolia",
        rpc_url="https://sepolia.infura.io",
        explorer="https://sepolia.etherscan.io",
        raffle_manager="0x3394D9363097733804F7A5B8FB098d1f25E3C89a",
        raffle_deployer="0xbD40F4375Bb2d198C8C28662f1bbF41F0F439eA3",
    ),
    11155420: NetworkConfig(
        name="OP Sepolia Testnet",
        rpc_url="https://sepolia.optimism.io",
        explorer="https://sepolia-optimism.etherscan.io",
        raffle_manager="0xC57B06780E9195e95E777b0BA1230C0225E2e98C",
        raffle_deployer="0x95cA4cba9630932dC70d8363FE53DfC38B982B48",
    ),
}


class GlobalConstants:
    """Global class constants for the project"""

    # Collection and address-list cache lifetime, in seconds
    CACHE_TTL = int(os.getenv("RAFFLE_CACHE_TTL", "300"))

    @staticmethod
    def get_network(chain_id: int) -> Optional[NetworkConfig]:
        """Get the network entry for a chain, or None if unsupported"""
        return NETWORKS.get(int(chain_id))

    @staticmethod
    def get_rpc_url(chain_id: int) -> str:
        """Get RPC URL for specified chain.

        RPC_URL_<CHAIN_ID> in the environment overrides the default endpoint.
        """
        chain_id = int(chain_id)
        if chain_id not in NETWORKS:
            raise ValueError(f"Chain ID {chain_id} not supported")

        rpc_url = os.getenv(f"RPC_URL_{chain_id}") or NETWORKS[chain_id].rpc_url
        if not rpc_url:
            raise ConfigurationException(f"RPC URL not set for chain {chain_id}")

        return rpc_url

    @staticmethod
    def get_raffle_manager(chain_id: int) -> Optional[str]:
        """Registry address for a chain, None when not deployed"""
        network = NETWORKS.get(int(chain_id))
        if network is None or not network.has_raffle_contracts:
            return None
        return network.raffle_manager
