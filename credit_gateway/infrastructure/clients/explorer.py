"""Block explorer HTTP client for fetching wallet transaction history"""

import logging
from decimal import Decimal
from typing import Any, Dict, List

import httpx

from credit_gateway.config import settings
from credit_gateway.domain.exceptions import HistoryFetchError, InvalidTransactionDataError
from credit_gateway.domain.models import TransactionRecord
from credit_gateway.infrastructure.observability.metrics import history_fetch_failures_counter

WEI_PER_NATIVE = Decimal(10) ** 18


def parse_transaction(txn: Dict[str, Any]) -> TransactionRecord:
    """Convert an explorer `txlist` entry; value arrives as a wei string"""
    try:
        return TransactionRecord(
            hash=txn["hash"],
            from_address=txn["from"] or "",
            to_address=txn["to"] or "",  # empty for contract creation
            value=float(Decimal(txn["value"]) / WEI_PER_NATIVE),
            timestamp=int(txn["timeStamp"]),
            block_number=int(txn["blockNumber"]),
        )
    except (KeyError, ValueError, TypeError, ArithmeticError) as e:
        raise InvalidTransactionDataError(f"Invalid transaction data from explorer: {e}") from e


class ExplorerClient:
    """Client for a BscScan-compatible `account/txlist` API"""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.explorer_api_base
        self.api_key = api_key or settings.explorer_api_key
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def get_transactions(self, address: str, page_size: int = 50) -> List[TransactionRecord]:
        """
        Fetch the most recent transactions for an address, newest first.

        Raises:
            HistoryFetchError: On timeout, HTTP errors, or an invalid response envelope
            InvalidTransactionDataError: If a returned record cannot be parsed
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(
                    self.base_url,
                    params={
                        "module": "account",
                        "action": "txlist",
                        "address": address,
                        "startblock": 0,
                        "endblock": 99999999,
                        "sort": "desc",
                        "apikey": self.api_key,
                    },
                )
                response.raise_for_status()
                data = response.json()

                if data.get("status") != "1":
                    # Explorer reports an empty account as status 0
                    if data.get("message") == "No transactions found":
                        return []
                    raise HistoryFetchError(f"Explorer error: {data.get('message')} {data.get('result')}")

                return [parse_transaction(txn) for txn in data["result"][:page_size]]

            except httpx.TimeoutException as e:
                raise HistoryFetchError(f"Explorer timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise HistoryFetchError(f"Explorer API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise HistoryFetchError(f"Explorer unreachable: {e}") from e
            except (KeyError, ValueError, TypeError) as e:
                raise HistoryFetchError(f"Invalid response from explorer: {e}") from e

    async def fetch(self, address: str, page_size: int = 50) -> List[TransactionRecord]:
        """History provider contract: fetch failures become an empty list, malformed records still raise"""
        try:
            return await self.get_transactions(address, page_size)
        except HistoryFetchError as e:
            history_fetch_failures_counter.inc()
            logging.error(f"Error fetching transactions: {e}", extra={"address": address})
            return []
