"""
ChainVaultExchange Deployer
Hardhat-artifact deployment over web3
"""

from .errors import (
    DeploymentError,
    ToolchainError,
    NetworkError,
    TransactionError,
    ConfirmationTimeoutError
)
from .factory import ContractFactory, DeployedContract
from .toolchain import HardhatToolchain, ContractArtifact, load_artifact
from .wallet import DeployerWallet
from .runner import run_deployment, main

__all__ = [
    'DeploymentError',
    'ToolchainError',
    'NetworkError',
    'TransactionError',
    'ConfirmationTimeoutError',
    'ContractFactory',
    'DeployedContract',
    'HardhatToolchain',
    'ContractArtifact',
    'load_artifact',
    'DeployerWallet',
    'run_deployment',
    'main'
]
