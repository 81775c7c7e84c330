"""
Contract Deployment Entry Point
Deploys ChainVaultExchange to the network selected by DEPLOY_NETWORK
"""

from deployer.runner import cli

if __name__ == "__main__":
    cli()
