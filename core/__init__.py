"""
Core module for the Novastro testnet bot.

This package contains configuration, logging, wallet loading, the on-chain
client and the task orchestration that drive the daily run.

Submodules:
    config: Application settings (``BotSettings``) and ``RunConfig`` via Pydantic.
    logging_setup: Compressed rotating file + safe console logging.
    wallet_manager: ``PRIVATE_KEY_<n>`` loader producing ``Wallet`` signers.
    chain: ``ChainClient`` for faucet claims and purchase transactions.
    results: ``ActionResult`` and ``ErrorType`` shared by all clients.
    orchestrator: ``TaskRunner`` and the 24h ``DailyScheduler``.
    monitoring: Run statistics, summary table and countdown (Rich).
"""
