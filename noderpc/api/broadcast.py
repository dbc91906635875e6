# noderpc/api/broadcast.py

"""
Broadcast error enrichment.

``broadcast_transaction_synchronous`` is the only generated method whose
failure path does extra work: the error is decorated with the digest and id of
the transaction that was rejected, and with a readable copy of it, so the
caller can correlate the failure with what was actually signed.
"""

import hashlib
import logging
from abc import ABC, abstractmethod
from typing import Any, Mapping

import msgspec

from ..core.logging import NodeRpcLogger, log_with_context

BROADCAST_SYNCHRONOUS = "broadcast_transaction_synchronous"

# Transaction ids are the first 20 bytes of the digest.
TRANSACTION_ID_LENGTH = 40


class TransactionSerializer(ABC):
    """Canonical serialization of a signed transaction."""

    @abstractmethod
    def to_buffer(self, trx: Any) -> bytes:
        """Binary form the digest and transaction id are computed over."""
        pass

    @abstractmethod
    def to_object(self, trx: Any) -> Any:
        """Plain builtin form, suitable for JSON."""
        pass


class MsgpackTransactionSerializer(TransactionSerializer):
    """Sorted-key msgpack as the canonical binary form."""

    def to_buffer(self, trx: Any) -> bytes:
        return msgspec.msgpack.encode(trx, order="sorted")

    def to_object(self, trx: Any) -> Any:
        return msgspec.to_builtins(trx, order="sorted")


def transaction_digest(buffer: bytes) -> str:
    return hashlib.sha256(buffer).hexdigest()


def transaction_id(buffer: bytes) -> str:
    return transaction_digest(buffer)[:TRANSACTION_ID_LENGTH]


class BroadcastErrorEnricher:
    """Error hook attaching ``digest``, ``transaction_id`` and ``transaction``."""

    def __init__(self, serializer: TransactionSerializer = None):
        self.serializer = serializer or MsgpackTransactionSerializer()
        self.logger = NodeRpcLogger.get_logger('api.broadcast')

    def __call__(self, err: BaseException, options: Mapping[str, Any]) -> BaseException:
        trx = options.get("trx")
        try:
            buffer = self.serializer.to_buffer(trx)
            trx_object = self.serializer.to_object(trx)
        except (TypeError, ValueError, msgspec.EncodeError) as e:
            log_with_context(self.logger, logging.ERROR, "Could not serialize rejected transaction",
                             method=BROADCAST_SYNCHRONOUS, error=str(e))
            return err

        err.digest = transaction_digest(buffer)
        err.transaction_id = transaction_id(buffer)
        err.transaction = msgspec.json.encode(trx_object).decode()

        log_with_context(self.logger, logging.WARNING, "Synchronous broadcast rejected",
                         method=BROADCAST_SYNCHRONOUS,
                         transaction_id=err.transaction_id,
                         error=str(err))
        return err
