"""
Hardhat Toolchain
Resolves compiled contract artifacts and hands out contract factories
"""

import os
import json
import glob
from typing import Dict, List, Optional
from web3 import Web3
from loguru import logger

from .config import NetworkConfig, load_network_config, get_artifacts_dir
from .errors import ToolchainError, NetworkError
from .factory import ContractFactory
from .wallet import DeployerWallet


class ContractArtifact:
    """ABI and creation bytecode of a compiled contract"""

    def __init__(self, name: str, abi: List[Dict], bytecode: str, path: Optional[str] = None):
        self.name = name
        self.abi = abi
        self.bytecode = bytecode
        self.path = path


def find_artifact_path(name: str, artifacts_dir: str) -> Optional[str]:
    """
    Locate <name>.sol/<name>.json under the Hardhat artifacts tree

    Args:
        name: Contract name
        artifacts_dir: Root artifacts directory

    Returns:
        Artifact path or None
    """
    direct = os.path.join(artifacts_dir, "contracts", f"{name}.sol", f"{name}.json")
    if os.path.exists(direct):
        return direct

    # Contracts in subfolders, e.g. contracts/exchange/Foo.sol/Foo.json
    pattern = os.path.join(artifacts_dir, "contracts", "**", f"{name}.sol", f"{name}.json")
    matches = sorted(glob.glob(pattern, recursive=True))

    if len(matches) > 1:
        logger.warning(f"Multiple artifacts for {name}, using {matches[0]}")

    return matches[0] if matches else None


def validate_bytecode(bytecode) -> bool:
    """Deployable bytecode is a 0x-prefixed, non-empty hex string"""
    if not isinstance(bytecode, str) or not bytecode.startswith('0x') or len(bytecode) <= 2:
        return False

    try:
        bytes.fromhex(bytecode[2:])
    except ValueError:
        return False

    return True


def unlinked_libraries(artifact: Dict) -> List[str]:
    """Library names from Hardhat linkReferences, as source:Library"""
    libraries = []

    for source, libs in (artifact.get('linkReferences') or {}).items():
        for lib in libs:
            libraries.append(f"{source}:{lib}")

    return sorted(libraries)


def load_artifact(name: str, artifacts_dir: str) -> ContractArtifact:
    """
    Load ABI and bytecode from a Hardhat JSON artifact

    Args:
        name: Contract name
        artifacts_dir: Root artifacts directory

    Returns:
        ContractArtifact
    """
    artifact_path = find_artifact_path(name, artifacts_dir)

    if artifact_path is None:
        raise ToolchainError(
            f"Artifact for contract '{name}' not found in {artifacts_dir}. "
            f"Run 'npx hardhat compile' first"
        )

    try:
        with open(artifact_path, 'r') as f:
            artifact = json.load(f)
    except json.JSONDecodeError as e:
        raise ToolchainError(f"Error parsing artifact {artifact_path}: {e}") from e

    if not isinstance(artifact, dict):
        raise ToolchainError(f"Artifact {artifact_path} is not a JSON object")

    abi = artifact.get('abi')
    bytecode = artifact.get('bytecode')

    if abi is None:
        raise ToolchainError(f"ABI not found in artifact: {artifact_path}")

    if isinstance(bytecode, str) and '__$' in bytecode:
        libraries = unlinked_libraries(artifact)
        raise ToolchainError(
            f"Contract '{name}' needs library linking before deployment "
            f"(unlinked: {', '.join(libraries) or 'unknown'}): {artifact_path}"
        )

    if not validate_bytecode(bytecode):
        # Interfaces and abstract contracts compile to "0x"
        raise ToolchainError(f"Contract '{name}' has no deployable bytecode: {artifact_path}")

    logger.debug(f"Loaded artifact {artifact_path}")
    return ContractArtifact(artifact.get('contractName', name), abi, bytecode, artifact_path)


class HardhatToolchain:
    """
    Provides contract factories bound to one network and signer
    """

    def __init__(
        self,
        network: NetworkConfig,
        artifacts_dir: str,
        wallet: Optional[DeployerWallet] = None
    ):
        """
        Initialize toolchain

        Args:
            network: Target network settings
            artifacts_dir: Hardhat artifacts directory
            wallet: Local signer (None = node's unlocked account)
        """
        self.network = network
        self.artifacts_dir = artifacts_dir
        self.wallet = wallet
        self.w3 = None

    @classmethod
    def from_env(cls) -> 'HardhatToolchain':
        """Build toolchain from .env and config/networks.json"""
        return cls(
            network=load_network_config(),
            artifacts_dir=get_artifacts_dir(),
            wallet=DeployerWallet.from_env()
        )

    def connect(self) -> Web3:
        """Connect to the configured RPC endpoint (once)"""
        if self.w3 is not None:
            return self.w3

        logger.info(f"Connecting to {self.network.name} ({self.network.rpc_url})")

        w3 = Web3(Web3.HTTPProvider(
            self.network.rpc_url,
            request_kwargs={'timeout': self.network.request_timeout}
        ))

        if not w3.is_connected():
            raise NetworkError(f"Failed to connect to {self.network.name} at {self.network.rpc_url}")

        self.w3 = w3
        return w3

    def get_contract_factory(self, name: str) -> ContractFactory:
        """
        Get a factory for a compiled contract

        Args:
            name: Contract name

        Returns:
            ContractFactory ready to deploy
        """
        artifact = load_artifact(name, self.artifacts_dir)
        w3 = self.connect()

        return ContractFactory(
            w3,
            artifact,
            wallet=self.wallet,
            chain_id=self.network.chain_id,
            confirmation_timeout=self.network.confirmation_timeout
        )
