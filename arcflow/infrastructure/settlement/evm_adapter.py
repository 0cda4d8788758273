"""EVM settlement adapter: ERC-20 USDC transfer via web3, one confirmation awaited."""

import asyncio
import logging
from decimal import Decimal
from typing import Any

from web3 import Web3
from web3.exceptions import TimeExhausted

from arcflow.application.exceptions import ExecutionError
from arcflow.domain.models.outcome import TransactionReceipt
from arcflow.scalability.bulkhead import BulkheadExecutor, BulkheadFullError

logger = logging.getLogger(__name__)

ERC20_TRANSFER_ABI: list[dict[str, Any]] = [
    {
        "name": "transfer",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    }
]


def to_base_units(amount: Decimal, decimals: int) -> int:
    """Whole-unit amount -> integer token units. Rejects precision the token cannot represent."""
    scaled = amount.scaleb(decimals)
    if scaled != scaled.to_integral_value():
        raise ExecutionError(f"Amount {amount} exceeds token precision of {decimals} decimals")
    return int(scaled)


class EvmSettlementAdapter:
    """
    Owns the signing key and the RPC connection. Build-sign-send runs through a
    single-slot bulkhead so nonces from this identity are assigned in order;
    waiting for the confirmation happens outside that slot.
    """

    def __init__(
        self,
        w3: Web3,
        private_key: str,
        token_address: str,
        *,
        decimals: int = 6,
        confirmation_timeout_seconds: float = 180.0,
        explorer_tx_url: str | None = None,
        submission_queue: BulkheadExecutor | None = None,
    ) -> None:
        self._w3 = w3
        self._account = w3.eth.account.from_key(private_key)
        self._contract = w3.eth.contract(
            address=Web3.to_checksum_address(token_address),
            abi=ERC20_TRANSFER_ABI,
        )
        self._decimals = decimals
        self._confirmation_timeout = confirmation_timeout_seconds
        self._explorer_tx_url = explorer_tx_url
        self._queue = submission_queue or BulkheadExecutor(max_concurrent=1)

    @classmethod
    def from_rpc_url(cls, rpc_url: str, private_key: str, token_address: str, **kwargs: Any) -> "EvmSettlementAdapter":
        w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": 30}))
        return cls(w3, private_key, token_address, **kwargs)

    @property
    def address(self) -> str:
        return self._account.address

    def _send(self, recipient: str, units: int) -> str:
        w3 = self._w3
        sender = self._account.address
        tx = self._contract.functions.transfer(recipient, units).build_transaction(
            {"from": sender, "nonce": w3.eth.get_transaction_count(sender, "pending")}
        )
        signed = self._account.sign_transaction(tx)
        return Web3.to_hex(w3.eth.send_raw_transaction(signed.raw_transaction))

    async def submit(self, recipient: str, amount: Decimal) -> TransactionReceipt:
        units = to_base_units(amount, self._decimals)
        try:
            checksum_recipient = Web3.to_checksum_address(recipient)
        except ValueError as e:
            raise ExecutionError(f"Invalid recipient address: {recipient}") from e

        try:
            tx_hash = await self._queue.submit(asyncio.to_thread, self._send, checksum_recipient, units)
        except BulkheadFullError as e:
            raise ExecutionError("Settlement queue is full; transfer not submitted") from e
        except Exception as e:
            raise ExecutionError(str(e)) from e
        logger.info("transaction_sent", extra={"transaction_id": tx_hash, "recipient": recipient})

        try:
            receipt = await asyncio.to_thread(
                self._w3.eth.wait_for_transaction_receipt, tx_hash, timeout=self._confirmation_timeout
            )
        except TimeExhausted as e:
            # Sent but unconfirmed: the caller must treat this as unknown, not failed.
            raise asyncio.TimeoutError(f"Transaction {tx_hash} not confirmed in time") from e
        except Exception as e:
            raise ExecutionError(f"Transaction {tx_hash} not confirmed: {e}") from e
        if receipt.get("status") == 0:
            raise ExecutionError(f"Transaction {tx_hash} reverted")

        explorer_url = self._explorer_tx_url.format(tx_hash=tx_hash) if self._explorer_tx_url else None
        return TransactionReceipt(transaction_id=tx_hash, explorer_url=explorer_url)
