"""
Contract Factory Tests
Deployment submission and confirmation against a mocked Web3
"""

import pytest
from unittest.mock import Mock
from web3.exceptions import TimeExhausted

from deployer.errors import NetworkError, TransactionError, ConfirmationTimeoutError
from deployer.factory import ContractFactory, DeployedContract, DEFAULT_GAS_LIMIT
from deployer.toolchain import ContractArtifact


TX_HASH = b'\x12' * 32


@pytest.fixture
def artifact():
    """Minimal compiled contract"""
    return ContractArtifact(
        name="ChainVaultExchange",
        abi=[{"inputs": [], "stateMutability": "nonpayable", "type": "constructor"}],
        bytecode="0x6080604052"
    )


@pytest.fixture
def w3():
    """Mock Web3 instance"""
    w3 = Mock()
    w3.eth.gas_price = 1000000000
    w3.eth.chain_id = 31337
    w3.eth.accounts = ['0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266']
    w3.eth.get_transaction_count.return_value = 7
    w3.eth.send_raw_transaction.return_value = TX_HASH

    constructor = w3.eth.contract.return_value.constructor.return_value
    constructor.estimate_gas.return_value = 100000
    constructor.build_transaction.side_effect = lambda tx: dict(tx, data='0x6080604052')
    constructor.transact.return_value = TX_HASH

    return w3


@pytest.fixture
def wallet():
    """Mock local signer"""
    wallet = Mock()
    wallet.address = '0x70997970C51812dc3A010C7d01b50e0d17dc79C8'
    wallet.sign_transaction.return_value = Mock(raw_transaction=b'signed')
    return wallet


def constructor_of(w3):
    return w3.eth.contract.return_value.constructor.return_value


class TestDeploy:
    """Test deployment submission"""

    @pytest.mark.asyncio
    async def test_signed_deployment(self, w3, artifact, wallet):
        factory = ContractFactory(w3, artifact, wallet=wallet, chain_id=31337)

        deployment = await factory.deploy()

        assert isinstance(deployment, DeployedContract)
        assert deployment.deploy_transaction == '0x' + '12' * 32
        assert deployment.address is None

        tx = wallet.sign_transaction.call_args[0][0]
        assert tx['from'] == wallet.address
        assert tx['nonce'] == 7
        assert tx['gas'] == 120000
        assert tx['chainId'] == 31337
        w3.eth.send_raw_transaction.assert_called_once_with(b'signed')
        w3.eth.get_transaction_count.assert_called_once_with(wallet.address, 'pending')

    @pytest.mark.asyncio
    async def test_node_account_deployment(self, w3, artifact):
        factory = ContractFactory(w3, artifact)

        await factory.deploy()

        constructor_of(w3).transact.assert_called_once_with({
            'from': '0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266',
            'gas': 120000
        })
        w3.eth.send_raw_transaction.assert_not_called()

    @pytest.mark.asyncio
    async def test_constructor_args_and_overrides(self, w3, artifact, wallet):
        factory = ContractFactory(w3, artifact, wallet=wallet)

        await factory.deploy('0x0000000000000000000000000000000000000001', gas=500000)

        w3.eth.contract.return_value.constructor.assert_called_once_with(
            '0x0000000000000000000000000000000000000001'
        )
        tx = wallet.sign_transaction.call_args[0][0]
        assert tx['gas'] == 500000
        assert tx['chainId'] == 31337

    @pytest.mark.asyncio
    async def test_gas_estimation_fallback(self, w3, artifact):
        constructor_of(w3).estimate_gas.side_effect = ValueError("execution reverted")
        factory = ContractFactory(w3, artifact)

        await factory.deploy()

        sent = constructor_of(w3).transact.call_args[0][0]
        assert sent['gas'] == DEFAULT_GAS_LIMIT

    @pytest.mark.asyncio
    async def test_connection_refused(self, w3, artifact, wallet):
        w3.eth.send_raw_transaction.side_effect = ConnectionError("connection refused")
        factory = ContractFactory(w3, artifact, wallet=wallet)

        with pytest.raises(NetworkError):
            await factory.deploy()

    @pytest.mark.asyncio
    async def test_rejected_by_node(self, w3, artifact, wallet):
        w3.eth.send_raw_transaction.side_effect = ValueError(
            {'code': -32000, 'message': 'insufficient funds for gas * price + value'}
        )
        factory = ContractFactory(w3, artifact, wallet=wallet)

        with pytest.raises(TransactionError, match="insufficient funds"):
            await factory.deploy()

    @pytest.mark.asyncio
    async def test_no_signer_available(self, w3, artifact):
        w3.eth.accounts = []
        factory = ContractFactory(w3, artifact)

        with pytest.raises(TransactionError, match="DEPLOYER_PRIVATE_KEY"):
            await factory.deploy()


class TestDeployed:
    """Test confirmation wait"""

    @pytest.mark.asyncio
    async def test_confirmed(self, w3, artifact):
        w3.eth.wait_for_transaction_receipt.return_value = {
            'status': 1,
            'contractAddress': '0xMOCKADDRESS',
            'blockNumber': 12,
            'gasUsed': 845000
        }
        deployment = DeployedContract(w3, artifact, TX_HASH, confirmation_timeout=5)

        result = await deployment.deployed()

        assert result is deployment
        assert deployment.address == '0xMOCKADDRESS'
        w3.eth.wait_for_transaction_receipt.assert_called_once_with(TX_HASH, timeout=5)

    @pytest.mark.asyncio
    async def test_deployed_twice_waits_once(self, w3, artifact):
        w3.eth.wait_for_transaction_receipt.return_value = {
            'status': 1,
            'contractAddress': '0xMOCKADDRESS'
        }
        deployment = DeployedContract(w3, artifact, TX_HASH, confirmation_timeout=5)

        await deployment.deployed()
        await deployment.deployed()

        assert w3.eth.wait_for_transaction_receipt.call_count == 1

    @pytest.mark.asyncio
    async def test_timeout(self, w3, artifact):
        w3.eth.wait_for_transaction_receipt.side_effect = TimeExhausted("not in chain after 5 seconds")
        deployment = DeployedContract(w3, artifact, TX_HASH, confirmation_timeout=5)

        with pytest.raises(ConfirmationTimeoutError):
            await deployment.deployed()

        assert deployment.address is None

    @pytest.mark.asyncio
    async def test_wait_error(self, w3, artifact):
        w3.eth.wait_for_transaction_receipt.side_effect = ConnectionError("reset by peer")
        deployment = DeployedContract(w3, artifact, TX_HASH, confirmation_timeout=5)

        with pytest.raises(ConfirmationTimeoutError, match="reset by peer"):
            await deployment.deployed()

    @pytest.mark.asyncio
    async def test_reverted(self, w3, artifact):
        w3.eth.wait_for_transaction_receipt.return_value = {
            'status': 0,
            'contractAddress': None,
            'gasUsed': 21000
        }
        deployment = DeployedContract(w3, artifact, TX_HASH, confirmation_timeout=5)

        with pytest.raises(TransactionError, match="reverted"):
            await deployment.deployed()

    def test_instance_requires_confirmation(self, w3, artifact):
        deployment = DeployedContract(w3, artifact, TX_HASH, confirmation_timeout=5)

        with pytest.raises(TransactionError):
            deployment.instance()
