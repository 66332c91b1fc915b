#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (C) 2022-2022 Riku Block
# All rights reserved.
#
# This file is part of XScan.

from typing import (
    Any,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Union,
)

import contextlib
import logging
from concurrent.futures import ThreadPoolExecutor

from eth_utils import to_int
from requests.exceptions import (
    ConnectionError as RequestsConnectionError,
    HTTPError,
    Timeout,
)

from web3 import Web3
from web3.exceptions import (
    BadFunctionCallOutput,
    BlockNotFound,
    ContractLogicError,
    TransactionNotFound,
    Web3Exception,
)

from xscan.contract import erc20
from xscan.exceptions import (
    ContractCallError,
    LedgerError,
    TransientFetchFailure,
    UpstreamUnavailable,
)
from xscan.types import (
    Block,
    Log,
    Receipt,
    ReceiptStatus,
    Transaction,
)
from .base import LedgerReader

log = logging.getLogger(__name__)


def _hex(value: Union[None, bytes, str]) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        return Web3.to_hex(value)
    return str(value)


def _int(value: Union[None, int, str]) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, str):
        return to_int(hexstr=value)
    return int(value)


def to_transaction(data: Mapping) -> Transaction:
    """
    Convert a raw transaction (``eth_getTransactionByHash`` or full block entry)

    :param data: web3 transaction data
    :return:
    """
    return Transaction(
        hash=_hex(data.get("hash")),
        from_=data.get("from"),
        to=data.get("to"),
        value=_int(data.get("value")),
        gas_price=_int(data.get("gasPrice")),
        gas_limit=_int(data.get("gas")),
        input=_hex(data.get("input", data.get("data"))) or "0x",
        block_number=_int(data.get("blockNumber")),
    )


def to_receipt(data: Mapping) -> Receipt:
    """
    Convert a raw ``eth_getTransactionReceipt`` result

    :param data: web3 receipt data
    :return:
    """
    status = data.get("status")
    if status is None:
        status = ReceiptStatus.UNKNOWN
    else:
        status = ReceiptStatus.SUCCESS if _int(status) == 1 else ReceiptStatus.FAILED

    logs = [
        Log(
            address=entry.get("address"),
            log_index=_int(entry.get("logIndex")),
            topics=[_hex(t) for t in entry.get("topics", [])],
        )
        for entry in data.get("logs") or []
    ]

    return Receipt(
        transaction_hash=_hex(data.get("transactionHash")),
        status=status,
        gas_used=_int(data.get("gasUsed")),
        contract_address=data.get("contractAddress"),
        logs=logs,
    )


class LedgerReader_Rpc(LedgerReader):
    """
    Ledger reader backed by a web3 JSON-RPC provider

    Blocks that only list transaction hashes are resolved with up to ``num_workers``
    concurrent ``eth_getTransactionByHash`` requests.
    """

    def __init__(self, w3: Web3, num_workers: int = 4) -> None:
        """
        Create reader

        :param w3: web3 provider
        :param num_workers: max number of concurrent transaction lookups per block
        """
        assert num_workers > 0

        self._w3 = w3
        self._num_workers = num_workers
        self._executor: Optional[ThreadPoolExecutor] = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    @contextlib.contextmanager
    def _upstream(self, what: str) -> Iterator[None]:
        """
        Translate provider errors into the reader error contract

        :param what: description of the request (used in the error message)
        :return:
        """
        try:
            yield
        except (RequestsConnectionError, Timeout, HTTPError) as e:
            raise UpstreamUnavailable(f"Failed to fetch {what}: {e}") from e
        except (Web3Exception, ValueError) as e:
            raise TransientFetchFailure(f"Failed to fetch {what}: {e}") from e

    def latest_height(self) -> int:
        with self._upstream("latest block number"):
            return int(self._w3.eth.block_number)

    def _map(self, func, items: Sequence) -> List:
        if self._num_workers == 1 or len(items) <= 1:
            return [func(item) for item in items]

        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=self._num_workers, thread_name_prefix="Ledger")

        # Note: map() returns results in submission order
        return list(self._executor.map(func, items))

    def _resolve_transactions(self, height: int, entries: Sequence) -> List[Transaction]:
        """
        Turn the transaction list of a block into ``Transaction`` objects

        :param height: block height (used for logging)
        :param entries: full transaction objects, transaction hashes or a mix of both
        :return:
        """
        def load(entry: Any) -> Optional[Transaction]:
            if isinstance(entry, Mapping):
                return to_transaction(entry)

            tx_hash = _hex(entry)
            try:
                tx = self.get_transaction(tx_hash)
            except LedgerError as e:
                log.warning(f"Dropping transaction '{tx_hash}' of block {height}: {e}")
                return None

            if tx is None:
                log.warning(f"Dropping transaction '{tx_hash}' of block {height}: not found")
            return tx

        return [tx for tx in self._map(load, list(entries)) if tx is not None]

    def get_block(self, height: int, include_transactions: bool = True) -> Optional[Block]:
        log.debug(f"Getting block {height}")

        with self._upstream(f"block {height}"):
            try:
                data = self._w3.eth.get_block(height, full_transactions=include_transactions)
            except BlockNotFound:
                return None

        if data is None:
            return None

        number = _int(data.get("number"))
        number = height if number is None else number
        timestamp = _int(data.get("timestamp"))

        transactions = []
        if include_transactions:
            transactions = [
                tx.backfill(number, timestamp)
                for tx in self._resolve_transactions(number, data.get("transactions") or [])
            ]

        return Block(
            number=number,
            hash=_hex(data.get("hash")),
            timestamp=timestamp,
            transactions=transactions,
        )

    def get_transaction(self, tx_hash: str) -> Optional[Transaction]:
        with self._upstream(f"transaction '{tx_hash}'"):
            try:
                data = self._w3.eth.get_transaction(tx_hash)
            except TransactionNotFound:
                return None

        return to_transaction(data) if data is not None else None

    def get_receipt(self, tx_hash: str) -> Optional[Receipt]:
        with self._upstream(f"receipt '{tx_hash}'"):
            try:
                data = self._w3.eth.get_transaction_receipt(tx_hash)
            except TransactionNotFound:
                return None

        return to_receipt(data) if data is not None else None

    def has_code(self, address: str) -> bool:
        with self._upstream(f"code of '{address}'"):
            code = self._w3.eth.get_code(Web3.to_checksum_address(address))
        return len(code) > 0

    def call(self, address: str, function: str, *args: Any) -> Any:
        with self._upstream(f"{function}() of '{address}'"):
            contract = self._w3.eth.contract(address=Web3.to_checksum_address(address), abi=erc20.abi)
            try:
                return getattr(contract.functions, function)(*args).call()
            except (BadFunctionCallOutput, ContractLogicError, OverflowError) as e:
                raise ContractCallError(f"Call {function}() on '{address}' failed: {e}") from e
