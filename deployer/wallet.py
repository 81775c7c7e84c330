"""
Deployer Wallet
Local signing key for deployment transactions
"""

import os
from typing import Dict, Optional
from eth_account import Account
from loguru import logger
from dotenv import load_dotenv

from .errors import ToolchainError

load_dotenv()


class DeployerWallet:
    """
    Wraps the deployer account loaded from DEPLOYER_PRIVATE_KEY
    """

    def __init__(self, private_key: str):
        """
        Initialize deployer wallet

        Args:
            private_key: Hex-encoded private key
        """
        try:
            self.account = Account.from_key(private_key)
        except Exception as e:
            # Never echo the key itself
            raise ToolchainError(f"Invalid deployer private key: {type(e).__name__}") from None

        self.address = self.account.address
        logger.info(f"Deployer wallet: {self.address}")

    @classmethod
    def from_env(cls) -> Optional['DeployerWallet']:
        """Build from DEPLOYER_PRIVATE_KEY, or None to use the node's unlocked account"""
        private_key = os.getenv('DEPLOYER_PRIVATE_KEY')

        if not private_key:
            logger.debug("DEPLOYER_PRIVATE_KEY not set - using node account")
            return None

        return cls(private_key)

    def sign_transaction(self, transaction: Dict):
        """
        Sign a deployment transaction

        Args:
            transaction: Transaction dict

        Returns:
            Signed transaction
        """
        try:
            return self.account.sign_transaction(transaction)
        except Exception as e:
            logger.error(f"Error signing transaction: {e}")
            raise
