"""
Deployment Runner
Deploys ChainVaultExchange and reports the address
"""

import os
import sys
import asyncio
from loguru import logger

from .toolchain import HardhatToolchain

CONTRACT_NAME = "ChainVaultExchange"


def configure_logging(level: str = None):
    """Send log output to stderr, keeping stdout for the result line"""
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        level=level or os.getenv('LOG_LEVEL', 'INFO')
    )


async def run_deployment(toolchain=None):
    """
    Deploy one ChainVaultExchange instance

    Args:
        toolchain: Object providing get_contract_factory (None = HardhatToolchain from env)

    Returns:
        Confirmed deployed contract
    """
    if toolchain is None:
        toolchain = HardhatToolchain.from_env()

    factory = toolchain.get_contract_factory(CONTRACT_NAME)
    contract = await factory.deploy()
    await contract.deployed()

    print(f"{CONTRACT_NAME} contract deployed to: {contract.address}")
    return contract


async def main(toolchain=None) -> int:
    """Run a deployment, returning the process exit code"""
    try:
        await run_deployment(toolchain)
        return 0
    except Exception as e:
        print(e, file=sys.stderr)
        logger.opt(exception=e).debug("Deployment failed")
        return 1


def cli():
    """Console entry point"""
    configure_logging()
    sys.exit(asyncio.run(main()))
