"""
Network Configuration
Resolves the target network from config/networks.json and the environment
"""

import os
import json
from typing import Dict, Optional
from loguru import logger
from dotenv import load_dotenv

from .errors import ToolchainError

load_dotenv()

DEFAULT_CONFIG_PATH = "config/networks.json"
DEFAULT_ARTIFACTS_DIR = "artifacts"
DEFAULT_CONFIRMATION_TIMEOUT = 120
DEFAULT_REQUEST_TIMEOUT = 30


class NetworkConfig:
    """
    Settings for a single deployment target
    """

    def __init__(
        self,
        key: str,
        name: str,
        rpc_url: str,
        chain_id: Optional[int] = None,
        confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    ):
        self.key = key
        self.name = name
        self.rpc_url = rpc_url
        self.chain_id = chain_id
        self.confirmation_timeout = confirmation_timeout
        self.request_timeout = request_timeout

    def __repr__(self):
        return f"NetworkConfig(key={self.key!r}, rpc_url={self.rpc_url!r}, chain_id={self.chain_id})"


def _read_config(path: str) -> Dict:
    try:
        with open(path, 'r') as f:
            return json.load(f)
    except FileNotFoundError:
        raise ToolchainError(f"Network config not found: {path}")
    except json.JSONDecodeError as e:
        raise ToolchainError(f"Invalid network config {path}: {e}") from e


def load_network_config(name: Optional[str] = None, path: Optional[str] = None) -> NetworkConfig:
    """
    Resolve network settings

    Args:
        name: Network key (None = DEPLOY_NETWORK or the config default)
        path: Path to networks JSON (None = NETWORKS_CONFIG or config/networks.json)

    Returns:
        NetworkConfig for the selected network
    """
    path = path or os.getenv('NETWORKS_CONFIG', DEFAULT_CONFIG_PATH)
    config = _read_config(path)

    if not isinstance(config, dict) or not isinstance(config.get('networks', {}), dict):
        raise ToolchainError(f"Network config {path} must map network names to settings")

    name = name or os.getenv('DEPLOY_NETWORK') or config.get('default_network', 'localhost')
    networks = config.get('networks', {})

    if name not in networks:
        available = ', '.join(sorted(networks)) or 'none'
        raise ToolchainError(f"Unknown network '{name}' (available: {available})")

    net = networks[name]

    if not isinstance(net, dict):
        raise ToolchainError(f"Settings for network '{name}' in {path} must be an object")

    rpc_url = os.getenv(net.get('rpc_url_env', '')) if net.get('rpc_url_env') else None
    rpc_url = rpc_url or net.get('default_rpc_url')

    if not rpc_url:
        raise ToolchainError(f"{net.get('rpc_url_env', 'RPC URL')} must be set to deploy to '{name}'")

    network = NetworkConfig(
        key=name,
        name=net.get('name', name),
        rpc_url=rpc_url,
        chain_id=net.get('chain_id'),
        confirmation_timeout=net.get('confirmation_timeout', DEFAULT_CONFIRMATION_TIMEOUT),
        request_timeout=net.get('request_timeout', DEFAULT_REQUEST_TIMEOUT)
    )

    logger.debug(f"Resolved network: {network}")
    return network


def get_artifacts_dir() -> str:
    """Artifacts directory from ARTIFACTS_DIR (defaults to ./artifacts)"""
    return os.getenv('ARTIFACTS_DIR', DEFAULT_ARTIFACTS_DIR)
