"""
Deployment Errors
Flat error taxonomy raised by the toolchain layer
"""


class DeploymentError(Exception):
    """Base class for every failure during a deployment run"""


class ToolchainError(DeploymentError):
    """Contract artifact or toolchain configuration could not be resolved"""


class NetworkError(DeploymentError):
    """RPC endpoint unreachable or transport failure"""


class TransactionError(DeploymentError):
    """Deployment transaction rejected or reverted"""


class ConfirmationTimeoutError(DeploymentError):
    """Waiting for the deployment receipt failed"""
