#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (C) 2022-2022 Riku Block
# All rights reserved.
#
# This file is part of XScan.

from typing import (
    Any,
    Dict,
    Optional,
)

import time

import xscan.db.orm as orm
from xscan.types import (
    Receipt,
    ReceiptStatus,
    TokenDetection,
    Transaction,
)


def _str(value: Optional[int], default: str = "0") -> str:
    return str(value) if value is not None else default


def format_transaction(
    tx: Transaction,
    receipt: Optional[Receipt],
    block_number: int,
    block_timestamp: Optional[int] = None,
    transaction_type: orm.TransactionType = orm.TransactionType.CONTRACT_INTERACTION,
) -> Dict[str, Any]:
    """
    Build the normalized storage record of a transaction with explicit fallbacks for absent fields.

    Fallbacks:
    - from: 'Unknown'
    - to: 'Contract Creation'
    - value, gasPrice, gasUsed: '0' (gasUsed prefers the receipt, then the gas limit)
    - status: 'unknown' without a receipt
    - timestamp: block timestamp, then the current time

    Example record:
    {
        'hash': '0x250f403ba38cc46bef098b8cbcd85e2af3b57db71e8603112419a66f006a21a2',
        'blockNumber': 990,
        'timestamp': 1612814799,
        'addressFrom': '0xE54Ca86531e17Ef3616d22Ca28b0D458b6C89106',
        'addressTo': '0xd7538cABBf8605BdE1f4901B47B8D42c61DE0367',
        'value': '1000000000000000000',
        'gasUsed': '21000',
        'gasPrice': '25000000000',
        'data': '0x',
        'status': 'success',
        'transactionType': 'contract_interaction',
    }

    :param tx: transaction
    :param receipt: receipt of the transaction (best effort, may be None)
    :param block_number: height of the block being scanned
    :param block_timestamp: timestamp of the block being scanned
    :param transaction_type: record tag
    :return:
    """
    if receipt is not None and receipt.gas_used is not None:
        gas_used = str(receipt.gas_used)
    else:
        gas_used = _str(tx.gas_limit)

    timestamp = tx.timestamp if tx.timestamp is not None else block_timestamp
    if timestamp is None:
        timestamp = int(time.time())

    return {
        "hash": tx.hash,
        "blockNumber": tx.block_number if tx.block_number is not None else block_number,
        "timestamp": timestamp,
        "addressFrom": tx.from_ or orm.SENTINEL_UNKNOWN,
        "addressTo": tx.to or orm.SENTINEL_CONTRACT_CREATION,
        "value": _str(tx.value),
        "gasUsed": gas_used,
        "gasPrice": _str(tx.gas_price),
        "data": tx.input or "0x",
        "status": receipt.status.value if receipt is not None else ReceiptStatus.UNKNOWN.value,
        "transactionType": transaction_type.value,
    }


def format_token_transaction(detection: TokenDetection, block_number: int, block_timestamp: Optional[int] = None) -> Dict[str, Any]:
    record = format_transaction(
        tx=detection.transaction,
        receipt=detection.receipt,
        block_number=block_number,
        block_timestamp=block_timestamp,
        transaction_type=orm.TransactionType.TOKEN_CREATION,
    )
    record["contractAddress"] = detection.token.address
    record["isSonicXToken"] = detection.affiliated
    return record


def format_token(detection: TokenDetection) -> Dict[str, Any]:
    token = detection.token
    return {
        "address": token.address.lower(),
        "name": token.name[:256],
        "symbol": token.symbol[:64],
        "decimals": token.decimals,
        "creationTx": detection.transaction.hash,
        "creator": detection.transaction.from_ or orm.SENTINEL_UNKNOWN,
        "isSonicXToken": detection.affiliated,
    }
