"""
Contract Factory
Builds, submits and confirms contract deployment transactions
"""

import asyncio
from typing import Dict, Optional
from web3 import Web3
from web3.exceptions import TimeExhausted, Web3Exception
from loguru import logger

from .errors import (
    DeploymentError,
    NetworkError,
    TransactionError,
    ConfirmationTimeoutError
)

DEFAULT_GAS_LIMIT = 3000000
GAS_BUFFER = 1.2


def buffered_gas(gas_estimate: int, buffer: float = GAS_BUFFER) -> int:
    """Gas estimate with safety buffer (20% by default)"""
    return int(gas_estimate * buffer)


class DeployedContract:
    """
    Handle for a submitted deployment
    Address is only known once the receipt is in
    """

    def __init__(self, w3: Web3, artifact, tx_hash, confirmation_timeout: float):
        self.w3 = w3
        self.artifact = artifact
        self.name = artifact.name
        self.tx_hash = tx_hash
        self.deploy_transaction = Web3.to_hex(tx_hash)
        self.confirmation_timeout = confirmation_timeout
        self.receipt = None
        self.address = None

    async def deployed(self) -> 'DeployedContract':
        """
        Wait until the deployment transaction is mined

        Returns:
            Self, with address and receipt populated
        """
        if self.receipt is not None:
            return self

        logger.info(f"Waiting for confirmation of {self.deploy_transaction}...")

        try:
            receipt = await asyncio.to_thread(
                self.w3.eth.wait_for_transaction_receipt,
                self.tx_hash,
                timeout=self.confirmation_timeout
            )
        except TimeExhausted as e:
            raise ConfirmationTimeoutError(
                f"{self.name} deployment {self.deploy_transaction} not confirmed "
                f"after {self.confirmation_timeout}s"
            ) from e
        except Exception as e:
            raise ConfirmationTimeoutError(
                f"Error waiting for {self.name} deployment {self.deploy_transaction}: {e}"
            ) from e

        if receipt['status'] != 1:
            raise TransactionError(
                f"{self.name} deployment reverted (tx: {self.deploy_transaction}, "
                f"gas used: {receipt.get('gasUsed')})"
            )

        self.receipt = receipt
        self.address = receipt['contractAddress']

        logger.success(f"{self.name} confirmed in block {receipt.get('blockNumber')}")
        logger.debug(f"Gas used: {receipt.get('gasUsed')}")
        return self

    def instance(self):
        """Web3 contract bound to the deployed address"""
        if self.address is None:
            raise TransactionError(f"{self.name} is not confirmed yet")

        return self.w3.eth.contract(address=self.address, abi=self.artifact.abi)


class ContractFactory:
    """
    Deploys new instances of one compiled contract
    """

    def __init__(
        self,
        w3: Web3,
        artifact,
        wallet=None,
        chain_id: Optional[int] = None,
        confirmation_timeout: float = 120
    ):
        """
        Initialize Contract Factory

        Args:
            w3: Web3 instance
            artifact: ContractArtifact with ABI and bytecode
            wallet: DeployerWallet for local signing (None = node account)
            chain_id: Expected chain id (None = ask the node)
            confirmation_timeout: Receipt wait timeout in seconds
        """
        self.w3 = w3
        self.artifact = artifact
        self.wallet = wallet
        self.chain_id = chain_id
        self.confirmation_timeout = confirmation_timeout

    def _sender(self) -> str:
        if self.wallet is not None:
            return self.wallet.address

        accounts = self.w3.eth.accounts
        if not accounts:
            raise TransactionError("No unlocked node account and DEPLOYER_PRIVATE_KEY not set")

        return accounts[0]

    def _estimate_gas(self, constructor, sender: str) -> int:
        try:
            gas_estimate = constructor.estimate_gas({'from': sender})
            return buffered_gas(gas_estimate)
        except OSError:
            raise
        except Exception as e:
            logger.warning(f"Gas estimation failed: {e}, using default")
            return DEFAULT_GAS_LIMIT

    def _submit(self, constructor, sender: str, overrides: Dict):
        gas_limit = self._estimate_gas(constructor, sender)
        logger.info(f"Gas limit: {gas_limit}")

        if self.wallet is None:
            return constructor.transact({'from': sender, 'gas': gas_limit, **overrides})

        transaction = constructor.build_transaction({
            'from': sender,
            'nonce': self.w3.eth.get_transaction_count(sender, 'pending'),
            'gas': gas_limit,
            'gasPrice': self.w3.eth.gas_price,
            'chainId': self.chain_id or self.w3.eth.chain_id,
            **overrides
        })

        signed_tx = self.wallet.sign_transaction(transaction)
        return self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)

    async def deploy(self, *args, **overrides) -> DeployedContract:
        """
        Submit a deployment transaction

        Args:
            *args: Constructor arguments
            **overrides: Transaction fields (gas, gasPrice, value, ...)

        Returns:
            Pending DeployedContract
        """
        logger.info(f"Deploying {self.artifact.name}...")

        try:
            contract = self.w3.eth.contract(abi=self.artifact.abi, bytecode=self.artifact.bytecode)
            constructor = contract.constructor(*args)

            sender = self._sender()
            logger.info(f"Deploying from: {sender}")

            tx_hash = self._submit(constructor, sender, overrides)

        except DeploymentError:
            raise
        except OSError as e:
            raise NetworkError(f"Network error deploying {self.artifact.name}: {e}") from e
        except (ValueError, TypeError, Web3Exception) as e:
            raise TransactionError(f"{self.artifact.name} deployment rejected: {e}") from e

        deployment = DeployedContract(self.w3, self.artifact, tx_hash, self.confirmation_timeout)
        logger.info(f"Transaction sent: {deployment.deploy_transaction}")
        return deployment
