"""Chain-native call descriptors, left unsigned for a wallet to broadcast."""
from .evm import EvmCall, transfer_remote_call, transfer_remote_memo_call
from .hub import HubRemoteTransferMsg, IbcTransferMsg
from .kaspa import KaspaDeposit, build_kaspa_deposit, kaspa_escrow_address
from .solana import SolanaInstruction, transfer_remote_instruction, transfer_remote_memo_instruction

__all__ = [
    "EvmCall",
    "transfer_remote_call",
    "transfer_remote_memo_call",
    "HubRemoteTransferMsg",
    "IbcTransferMsg",
    "KaspaDeposit",
    "build_kaspa_deposit",
    "kaspa_escrow_address",
    "SolanaInstruction",
    "transfer_remote_instruction",
    "transfer_remote_memo_instruction",
]
