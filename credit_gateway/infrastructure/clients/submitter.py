"""Signing relay client that broadcasts vault transfers"""

import logging
from typing import Any, Dict

import httpx

from credit_gateway.config import settings
from credit_gateway.domain.exceptions import TransactionSubmissionError
from credit_gateway.infrastructure.observability.metrics import (
    submission_failure_counter,
    submission_latency_histogram,
)


class RelayTransactionSubmitter:
    """Client for the wallet signing relay"""

    def __init__(
        self,
        signer_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.signer_url = signer_url or settings.signer_url
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def submit(self, to_address: str, value: int, chain_metadata: Dict[str, Any]) -> str:
        """
        Sign and broadcast a transfer, returning its transaction hash.

        Not retried: a resend could broadcast the transfer twice.

        Args:
            to_address: Recipient (the credit vault)
            value: Amount in wei
            chain_metadata: chainId and optional signing `from` address

        Raises:
            TransactionSubmissionError: On timeout, HTTP errors, or a response without a hash
        """
        payload = {"to": to_address, "value": str(value), **chain_metadata}

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                with submission_latency_histogram.time():
                    response = await client.post(self.signer_url, json=payload)
                    response.raise_for_status()
                    data = response.json()

                tx_hash = data.get("transactionHash") or data.get("hash")
                if not tx_hash:
                    raise TransactionSubmissionError("Relay response did not include a transaction hash")

                logging.info("Transaction broadcast", extra={"tx_hash": tx_hash, "to": to_address})
                return tx_hash

            except httpx.TimeoutException as e:
                submission_failure_counter.inc()
                raise TransactionSubmissionError(f"Signing relay timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                submission_failure_counter.inc()
                raise TransactionSubmissionError(f"Signing relay error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                submission_failure_counter.inc()
                raise TransactionSubmissionError(f"Signing relay unreachable: {e}") from e
            except (ValueError, AttributeError) as e:
                submission_failure_counter.inc()
                raise TransactionSubmissionError(f"Invalid relay response: {e}") from e
            except TransactionSubmissionError:
                submission_failure_counter.inc()
                raise
