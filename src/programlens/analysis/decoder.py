"""
Transaction Decoder: turns one getTransaction response into a record.

Handles both RPC encodings:

- "jsonParsed": accountKeys are objects carrying their own writable flag
- "json": accountKeys are plain strings and writability follows from the
  message header layout

Missing optional fields degrade per field. A response that has no usable
message structure at all raises TransactionDecodeError so the caller can
skip that one transaction.
"""

from typing import Any, Dict, List, Optional, Tuple

from .cpi import estimate_cpi_depth
from .models import TransactionRecord


class TransactionDecodeError(ValueError):
    """A transaction-detail response could not be decoded."""


def parse_compute_units(value: Any) -> Optional[int]:
    """
    Parse computeUnitsConsumed from transaction metadata.

    Returns None for an absent or unparseable value. Zero is only returned
    when the metadata actually reported zero.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, str) and value.strip().isdecimal():
        return int(value.strip())
    return None


def _header_writable_flags(keys: List[str], header: Any) -> Optional[List[bool]]:
    """Derive writable flags from the legacy message header layout."""
    if not isinstance(header, dict):
        return None
    try:
        num_signers = int(header["numRequiredSignatures"])
        readonly_signed = int(header["numReadonlySignedAccounts"])
        readonly_unsigned = int(header["numReadonlyUnsignedAccounts"])
    except (KeyError, TypeError, ValueError):
        return None

    total = len(keys)
    flags = []
    for i in range(total):
        if i < num_signers:
            flags.append(i < num_signers - readonly_signed)
        else:
            flags.append(i < total - readonly_unsigned)
    return flags


def _loaded_keys(loaded: Dict[str, Any], kind: str) -> List[str]:
    keys = loaded.get(kind)
    if keys is None:
        return []
    if not isinstance(keys, list):
        raise TransactionDecodeError(f"meta.loadedAddresses.{kind} is not a list")
    return [key for key in keys if isinstance(key, str)]


def extract_accounts(transaction: Dict[str, Any], meta: Dict[str, Any]) -> Tuple[List[str], List[str]]:
    """
    Partition a transaction's accounts into accessed and writable lists.

    Falls back to treating every account as read-only when no locking
    information is available, which can only undercount contention.

    Raises:
        TransactionDecodeError: If the message or its account keys are malformed
    """
    message = transaction.get("message")
    if not isinstance(message, dict):
        raise TransactionDecodeError("transaction has no message")

    raw_keys = message.get("accountKeys")
    if not isinstance(raw_keys, list):
        raise TransactionDecodeError("message.accountKeys is missing or not a list")

    keys: List[str] = []
    flags: List[Optional[bool]] = []
    for entry in raw_keys:
        if isinstance(entry, str):
            keys.append(entry)
            flags.append(None)
        elif isinstance(entry, dict) and isinstance(entry.get("pubkey"), str):
            keys.append(entry["pubkey"])
            writable = entry.get("writable")
            flags.append(writable if isinstance(writable, bool) else None)
        else:
            raise TransactionDecodeError(f"unrecognized account key entry: {entry!r}")

    if any(flag is None for flag in flags):
        header_flags = _header_writable_flags(keys, message.get("header"))
        if header_flags is not None:
            flags = [flag if flag is not None else header_flags[i] for i, flag in enumerate(flags)]

    accessed = list(keys)
    writable = [key for key, flag in zip(keys, flags) if flag]

    # Address lookup table entries for versioned transactions
    loaded = meta.get("loadedAddresses")
    if isinstance(loaded, dict):
        for key in _loaded_keys(loaded, "writable"):
            accessed.append(key)
            writable.append(key)
        accessed.extend(_loaded_keys(loaded, "readonly"))

    return accessed, writable


def decode_transaction(signature: str, response: Any) -> TransactionRecord:
    """
    Decode one getTransaction result into a TransactionRecord.

    Args:
        signature: Signature the response was requested for
        response: The JSON-RPC "result" member

    Returns:
        TransactionRecord with cpi_depth already estimated

    Raises:
        TransactionDecodeError: If the response cannot be decoded at all
    """
    if not isinstance(response, dict):
        raise TransactionDecodeError(f"expected an object, got {type(response).__name__}")

    transaction = response.get("transaction")
    if not isinstance(transaction, dict):
        raise TransactionDecodeError("response has no decoded transaction body")

    meta = response.get("meta")
    if not isinstance(meta, dict):
        meta = {}

    accessed, writable = extract_accounts(transaction, meta)

    instructions = transaction["message"].get("instructions")
    instruction_count = len(instructions) if isinstance(instructions, list) else 0

    logs = meta.get("logMessages")
    log_lines = tuple(line for line in logs if isinstance(line, str)) if isinstance(logs, list) else ()

    return TransactionRecord(
        signature=signature,
        compute_units_consumed=parse_compute_units(meta.get("computeUnitsConsumed")),
        accessed_accounts=frozenset(accessed),
        writable_accounts=frozenset(writable),
        instruction_count=instruction_count,
        log_lines=log_lines,
        cpi_depth=estimate_cpi_depth(log_lines),
    )
