#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# Copyright (C) 2022-2022 Riku Block
# All rights reserved.
#
# This file is part of XScan.

from typing import cast

import orjson

from web3 import (
    HTTPProvider,
    Web3,
)
from web3.middleware import ExtraDataToPOAMiddleware
from web3.types import RPCResponse


class OrjsonHTTPProvider(HTTPProvider):
    """
    HTTP provider with faster JSON-RPC response decoding

    See: https://web3py.readthedocs.io/en/stable/troubleshooting.html#making-ethereum-json-rpc-api-access-faster
    """

    @staticmethod
    def decode_rpc_response(raw_response: bytes) -> RPCResponse:
        """
        Decode a (possibly batched) JSON-RPC response

        :param raw_response: byte encoded rpc response
        :return:
        """
        decoded = orjson.loads(raw_response)
        return cast(RPCResponse, decoded)


def build_web3(endpoint_uri: str, poa: bool = False, timeout: int = 30) -> Web3:
    """
    Create a web3 instance for the scanner.

    Note: provider level retries are disabled, a failed request fails the single unit of work
    (transaction, receipt, block) it belongs to.

    :param endpoint_uri: RPC url
    :param poa: inject the extra-data PoA middleware (required for geth clique chains)
    :param timeout: request timeout in seconds
    :return:
    """
    provider = OrjsonHTTPProvider(
        endpoint_uri=endpoint_uri,
        request_kwargs={"timeout": timeout},
        exception_retry_configuration=None,
    )
    w3 = Web3(provider)
    if poa:
        w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)
    return w3
