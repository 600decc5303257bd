"""JSON memos for IBC transfers that land on the Hub and forward onward.

Two envelopes exist, depending on how the source reaches the Hub:

- incentivized (rollapp) sources: ``{"eibc": {"fee", "dym_on_completion"}}``
- plain relayed sources: ``{"on_completion": ...}``

In both, the completion value is base64 of an encoded CompletionHookCall
wrapping a pre-encoded ForwardToDirectChain or ForwardToIndirectChain.
"""
from __future__ import annotations

import base64
import json
from enum import Enum
from typing import Any, Optional

from ..exceptions import InvalidFormatError
from .forwarding import CompletionHookCall, ForwardInstruction, ForwardToDirectChain


class HookName(str, Enum):
    """Completion hooks registered on the Hub."""
    ROLL_TO_HL = "dym-fwd-roll-hl"
    ROLL_TO_IBC = "dym-fwd-roll-ibc"


def hook_for(instruction: ForwardInstruction) -> HookName:
    if isinstance(instruction, ForwardToDirectChain):
        return HookName.ROLL_TO_HL
    return HookName.ROLL_TO_IBC


def encode_completion(instruction: ForwardInstruction) -> str:
    call = CompletionHookCall(name=hook_for(instruction).value, data=instruction.encode())
    return base64.b64encode(call.encode()).decode("ascii")


def incentivized_memo(eibc_fee: int, instruction: ForwardInstruction) -> str:
    """Memo for a rollapp withdrawal that forwards after EIBC fulfilment."""
    return json.dumps(
        {
            "eibc": {
                "fee": str(eibc_fee),
                "dym_on_completion": encode_completion(instruction),
            }
        },
        separators=(",", ":"),
    )


def eibc_fee_memo(eibc_fee: int) -> str:
    """Memo for a rollapp withdrawal that stops on the Hub."""
    return json.dumps({"eibc": {"fee": str(eibc_fee)}}, separators=(",", ":"))


def relay_memo(instruction: ForwardInstruction) -> str:
    """Memo for a plain IBC transfer that forwards on arrival."""
    return json.dumps(
        {"on_completion": encode_completion(instruction)},
        separators=(",", ":"),
    )


def parse_memo(memo: str) -> tuple[Optional[int], CompletionHookCall]:
    """Decode either memo envelope.

    Returns:
        ``(eibc_fee, hook_call)``; the fee is None for relay memos.
    """
    try:
        payload: Any = json.loads(memo)
    except json.JSONDecodeError as e:
        raise InvalidFormatError(f"Memo is not JSON: {e}", expected="JSON memo") from e
    if not isinstance(payload, dict):
        raise InvalidFormatError("Memo must be a JSON object", expected="JSON object")

    fee: Optional[int] = None
    if "eibc" in payload:
        eibc = payload["eibc"]
        encoded = eibc.get("dym_on_completion")
        fee = int(eibc.get("fee", "0"))
    else:
        encoded = payload.get("on_completion")
    if not encoded:
        raise InvalidFormatError(
            "Memo has no completion hook", expected="eibc or on_completion memo"
        )
    return fee, CompletionHookCall.decode(base64.b64decode(encoded))


__all__ = [
    "HookName",
    "hook_for",
    "encode_completion",
    "incentivized_memo",
    "eibc_fee_memo",
    "relay_memo",
    "parse_memo",
]
