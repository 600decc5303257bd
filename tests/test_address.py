"""Unit tests for the address codec."""
from __future__ import annotations

import pytest

from dymension_bridge.address import (
    CanonicalAddress,
    bech32_to_canonical,
    canonical_to_bech32,
    canonical_to_evm,
    canonical_to_hex,
    canonical_to_solana,
    evm_to_canonical,
    is_canonical,
    is_valid_bech32_address,
    is_valid_evm_address,
    is_valid_kaspa_address,
    kaspa_to_canonical,
    solana_to_canonical,
    to_canonical,
)
from dymension_bridge.chains import AddressFormat
from dymension_bridge.exceptions import InvalidFormatError

EVM_CANONICAL = "0x000000000000000000000000742d35cc6634c0532925a3b844bc9e7595f0beb2"
KASPA_TESTNET_PUBKEY = "0x17c152c021d699694b267bbc23f9e74e84bc81c3d41c48c53b2545d3eb53c95e"


class TestCanonicalAddress:
    """Test the 32-byte identifier type."""

    def test_rejects_wrong_length(self):
        """Test that anything other than 32 bytes is refused."""
        with pytest.raises(InvalidFormatError):
            CanonicalAddress(b"\x01" * 20)

    def test_from_bytes_left_pads(self):
        """Test that short payloads are left-padded with zeros."""
        address = CanonicalAddress.from_bytes(b"\xff" * 20)
        assert address.value == b"\x00" * 12 + b"\xff" * 20

    def test_from_bytes_rejects_oversized(self):
        """Test that payloads over 32 bytes do not fit."""
        with pytest.raises(InvalidFormatError):
            CanonicalAddress.from_bytes(b"\x01" * 33)

    def test_hex_round_trip(self):
        """Test hex rendering and parsing."""
        address = CanonicalAddress.from_hex(EVM_CANONICAL)
        assert address.hex() == EVM_CANONICAL
        assert str(address) == EVM_CANONICAL
        assert CanonicalAddress.from_hex(EVM_CANONICAL[2:]) == address

    def test_zero(self):
        """Test the all-zero address."""
        assert CanonicalAddress.zero().value == bytes(32)

    def test_is_canonical(self):
        """Test canonical hex detection."""
        assert is_canonical(EVM_CANONICAL)
        assert is_canonical(EVM_CANONICAL[2:])
        assert not is_canonical("0x123")
        assert not is_canonical("invalid")
        assert not is_canonical("0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb2")


class TestEvmAddresses:
    """Test EVM address conversion."""

    def test_to_canonical(self, evm_address):
        """Test left-padding a checksummed address."""
        assert evm_to_canonical(evm_address).hex() == EVM_CANONICAL

    def test_without_prefix_and_any_case(self, evm_address):
        """Test that the 0x prefix and letter case do not matter."""
        assert evm_to_canonical(evm_address[2:]).hex() == EVM_CANONICAL
        assert evm_to_canonical(evm_address.lower()).hex() == EVM_CANONICAL
        assert evm_to_canonical("0x" + evm_address[2:].upper()).hex() == EVM_CANONICAL

    def test_invalid(self):
        """Test malformed EVM addresses."""
        for bad in ("invalid", "0x123", "0xZZZZ35Cc6634C0532925a3b844Bc9e7595f0bEb2", ""):
            assert not is_valid_evm_address(bad)
            with pytest.raises(InvalidFormatError):
                evm_to_canonical(bad)

    def test_from_canonical_is_lowercase(self, evm_address):
        """Test extracting the low 20 bytes."""
        assert canonical_to_evm(EVM_CANONICAL) == evm_address.lower()
        assert canonical_to_evm(evm_to_canonical(evm_address)) == evm_address.lower()

    def test_from_canonical_truncates_high_bytes(self):
        """Test that non-zero high bytes are discarded."""
        canonical = CanonicalAddress(b"\xaa" * 12 + b"\x11" * 20)
        assert canonical_to_evm(canonical) == "0x" + "11" * 20


class TestBech32Addresses:
    """Test Cosmos bech32 conversion."""

    def test_to_canonical(self, hub_address):
        """Test that a 20-byte account is padded to 32 bytes."""
        canonical = bech32_to_canonical(hub_address)
        assert len(canonical.hex()) == 66
        assert canonical.value[:12] == bytes(12)

    def test_round_trip_same_prefix(self, hub_address):
        """Test decoding and re-encoding with the original prefix."""
        assert canonical_to_bech32(bech32_to_canonical(hub_address), "dym") == hub_address

    def test_prefix_conversion(self, hub_address):
        """Test that the same account data re-encodes under other prefixes."""
        canonical = bech32_to_canonical(hub_address)
        osmo = canonical_to_bech32(canonical, "osmo")
        assert osmo.startswith("osmo1")
        assert bech32_to_canonical(osmo) == canonical

    def test_expected_prefix(self, hub_address):
        """Test prefix enforcement."""
        bech32_to_canonical(hub_address, expected_prefix="dym")
        with pytest.raises(InvalidFormatError):
            bech32_to_canonical(hub_address, expected_prefix="osmo")

    def test_validity(self, hub_address, evm_address):
        """Test bech32 validation with and without a prefix."""
        assert is_valid_bech32_address(hub_address)
        assert is_valid_bech32_address(hub_address, "dym")
        assert not is_valid_bech32_address(hub_address, "osmo")
        assert not is_valid_bech32_address("invalid")
        assert not is_valid_bech32_address("dym1invalid")
        assert not is_valid_bech32_address(evm_address)
        assert not is_valid_bech32_address("")

    def test_bad_checksum(self, hub_address):
        """Test that a corrupted checksum is rejected."""
        corrupted = hub_address[:-1] + ("q" if hub_address[-1] != "q" else "p")
        with pytest.raises(InvalidFormatError):
            bech32_to_canonical(corrupted)


class TestSolanaAddresses:
    """Test base58 public keys."""

    def test_to_canonical(self, solana_address):
        """Test that a public key is already 32 bytes."""
        canonical = solana_to_canonical(solana_address)
        assert len(canonical.value) == 32
        assert canonical_to_solana(canonical) == solana_address

    def test_invalid_characters(self):
        """Test that characters outside the base58 alphabet fail."""
        with pytest.raises(InvalidFormatError):
            solana_to_canonical("invalid!!!")

    def test_wrong_length(self):
        """Test that short keys fail."""
        with pytest.raises(InvalidFormatError):
            solana_to_canonical("111111111")


class TestKaspaAddresses:
    """Test Kaspa public-key extraction."""

    def test_testnet_address(self, kaspa_testnet_address):
        """Test a testnet address decodes to its known public key."""
        address = kaspa_testnet_address
        assert kaspa_to_canonical(address).hex() == KASPA_TESTNET_PUBKEY
        assert is_valid_kaspa_address(address)

    def test_prefix_does_not_change_payload(self, kaspa_testnet_address):
        """Test the network prefix is not part of the canonical form."""
        payload = kaspa_testnet_address.split(":", 1)[1]
        assert kaspa_to_canonical(f"kaspa:{payload}").hex() == KASPA_TESTNET_PUBKEY

    def test_mainnet_escrow(self, kaspa_address):
        """Test the mainnet escrow address."""
        address = kaspa_address
        assert len(kaspa_to_canonical(address).hex()) == 66

    def test_invalid_prefix(self):
        """Test that other prefixes are rejected."""
        with pytest.raises(InvalidFormatError, match="prefix"):
            kaspa_to_canonical("bitcoin:abc123")

    def test_malformed(self):
        """Test addresses without a prefix separator."""
        for bad in ("kaspa", "invalid", ""):
            assert not is_valid_kaspa_address(bad)
            with pytest.raises(InvalidFormatError):
                kaspa_to_canonical(bad)

    def test_short_payload(self):
        """Test that a payload not wrapping 32 bytes fails."""
        with pytest.raises(InvalidFormatError, match="32-byte"):
            kaspa_to_canonical("kaspa:qzqqqqqqqqqqqq")

    def test_character_outside_alphabet(self):
        """Test that 'b', 'i', 'o' and '1' are not in the alphabet."""
        with pytest.raises(InvalidFormatError):
            kaspa_to_canonical("kaspa:qzbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbbb")


class TestToCanonical:
    """Test format dispatch."""

    def test_dispatch(self, evm_address, hub_address, solana_address):
        """Test each format routes to its decoder."""
        assert to_canonical(evm_address, AddressFormat.EVM).hex() == EVM_CANONICAL
        assert to_canonical(hub_address, AddressFormat.BECH32) == bech32_to_canonical(hub_address)
        assert to_canonical(solana_address, AddressFormat.BASE58) == solana_to_canonical(solana_address)

    def test_canonical_to_hex(self):
        """Test hex normalization of both input kinds."""
        assert canonical_to_hex(EVM_CANONICAL[2:]) == EVM_CANONICAL
        assert canonical_to_hex(CanonicalAddress.from_hex(EVM_CANONICAL)) == EVM_CANONICAL
