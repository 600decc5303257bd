"""Live fee data from the Hub REST API.

The fee engine never performs I/O; this provider fetches the scalar inputs
it needs (IGP quotes, bridging-fee rates, delayed-ack params) and caches
them in an explicit ``FeeCache`` with a fixed TTL. The one source-chain
input, the IGP payment an EVM warp router charges on ``transferRemote``,
comes from a JSON-RPC ``eth_call`` and shares the same cache.
"""
from __future__ import annotations

import hashlib
import logging
import time
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Dict, Hashable, Optional

import httpx

from ..adapters.evm import quote_gas_payment_call
from ..chains import HUB_REST_ENDPOINTS, Network
from ..exceptions import FeeQuoteError, UnknownEntityError
from ..wire.forwarding import Coin

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_SECONDS = 60.0

DELAYED_ACK_PARAMS_PATH = "/dymensionxyz/dymension/delayedack/params"
FEE_HOOKS_PATH = "/dymensionxyz/dymension/bridgingfee/fee_hooks"
FEE_HOOK_PATH = "/dymensionxyz/dymension/bridgingfee/fee_hook/{hook_id}"
QUOTE_FEE_PAYMENT_PATH = "/dymensionxyz/dymension/bridgingfee/quote_fee_payment/{hook_id}/{token_id}/{amount}"
IGP_QUOTE_PATH = "/hyperlane/v1/igps/{hook_id}/quote_gas_payment"


def igp_cache_key(destination_domain: int, gas_limit: int, hook_id: str) -> str:
    """Stable key for an IGP quote: sha256 over domain, gas limit and hook."""
    raw = f"{destination_domain}:{gas_limit}:{hook_id.lower()}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


@dataclass
class CachedValue:
    value: Any
    timestamp: float


@dataclass
class FeeCache:
    """Key to timestamped value map with a fixed TTL.

    An entry is fresh while ``now - timestamp < ttl``. Writes overwrite, so
    two racing fetches for the same key are harmless.
    """
    ttl: float = DEFAULT_CACHE_TTL_SECONDS
    clock: Callable[[], float] = time.monotonic
    _entries: Dict[Hashable, CachedValue] = field(default_factory=dict)

    def get(self, key: Hashable) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.clock() - entry.timestamp < self.ttl:
            return entry.value
        return None

    def set(self, key: Hashable, value: Any) -> None:
        self._entries[key] = CachedValue(value=value, timestamp=self.clock())

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


@dataclass(frozen=True, slots=True)
class AssetFee:
    token_id: str
    inbound_fee: Decimal
    outbound_fee: Decimal


@dataclass(frozen=True, slots=True)
class FeeHook:
    """A bridging-fee hook (x/bridgingfee) and its per-token rates."""
    id: str
    owner: str
    fees: tuple[AssetFee, ...]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FeeHook":
        return cls(
            id=data.get("id", ""),
            owner=data.get("owner", ""),
            fees=tuple(
                AssetFee(
                    token_id=fee.get("token_id", ""),
                    inbound_fee=Decimal(str(fee.get("inbound_fee", "0"))),
                    outbound_fee=Decimal(str(fee.get("outbound_fee", "0"))),
                )
                for fee in data.get("fees", [])
            ),
        )

    def fee_for(self, token_id: str) -> Optional[AssetFee]:
        for fee in self.fees:
            if fee.token_id.lower() == token_id.lower():
                return fee
        return None


class FeeProvider:
    """Fetches fee values from the Hub over REST.

    Example:
        async with FeeProvider(network=Network.MAINNET) as provider:
            rate = await provider.get_bridging_fee_rate(token_id, "outbound")
            igp = await provider.quote_igp_payment(1, 200_000, hook_id)
    """

    def __init__(
        self,
        network: Network = Network.MAINNET,
        hub_rest_url: Optional[str] = None,
        cache: Optional[FeeCache] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ) -> None:
        self._base_url = (hub_rest_url or HUB_REST_ENDPOINTS[Network(network)]).rstrip("/")
        self.cache = cache if cache is not None else FeeCache()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def base_url(self) -> str:
        return self._base_url

    async def __aenter__(self) -> "FeeProvider":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Low-level HTTP
    # ------------------------------------------------------------------

    async def _get(self, path: str, params: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as e:
            logger.warning(f"Hub REST request failed: {url}: {e}")
            raise FeeQuoteError(f"Request to {path} failed: {e}", endpoint=path) from e
        if response.status_code != 200:
            raise FeeQuoteError(
                f"Hub REST request to {path} failed: HTTP {response.status_code}",
                endpoint=path,
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise FeeQuoteError(f"Invalid JSON from {path}", endpoint=path) from e

    # ------------------------------------------------------------------
    # Delayed ack (rollapp bridging fee)
    # ------------------------------------------------------------------

    async def fetch_delayed_ack_params(self) -> dict[str, Any]:
        cached = self.cache.get("delayedack_params")
        if cached is not None:
            return cached
        data = await self._get(DELAYED_ACK_PARAMS_PATH)
        params = data.get("params") or {}
        self.cache.set("delayedack_params", params)
        return params

    async def get_delayed_ack_bridging_fee(self) -> Decimal:
        """Bridging fee charged on rollapp withdrawals, as a fraction."""
        params = await self.fetch_delayed_ack_params()
        if "bridging_fee" not in params:
            raise FeeQuoteError("delayedack params have no bridging_fee", endpoint=DELAYED_ACK_PARAMS_PATH)
        return Decimal(str(params["bridging_fee"]))

    # ------------------------------------------------------------------
    # Bridging fee hooks
    # ------------------------------------------------------------------

    async def fetch_all_fee_hooks(self) -> list[FeeHook]:
        cached = self.cache.get("fee_hooks")
        if cached is not None:
            return cached
        data = await self._get(FEE_HOOKS_PATH)
        hooks = [FeeHook.from_dict(hook) for hook in data.get("fee_hooks") or []]
        self.cache.set("fee_hooks", hooks)
        return hooks

    async def fetch_fee_hook(self, hook_id: str) -> Optional[FeeHook]:
        """A single fee hook, or None if the Hub does not know it."""
        key = ("fee_hook", hook_id.lower())
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        path = FEE_HOOK_PATH.format(hook_id=hook_id)
        try:
            data = await self._get(path)
        except FeeQuoteError as e:
            if e.status_code == 404:
                return None
            raise
        hook = FeeHook.from_dict(data.get("fee_hook") or {})
        self.cache.set(key, hook)
        return hook

    async def get_bridging_fee_rate(self, token_id: str, direction: str) -> Decimal:
        """Inbound (to Hub) or outbound (from Hub) rate for a warp token.

        Raises:
            UnknownEntityError: If no hook configures the token
        """
        if direction not in ("inbound", "outbound"):
            raise ValueError(f"direction must be 'inbound' or 'outbound', got {direction!r}")
        for hook in await self.fetch_all_fee_hooks():
            fee = hook.fee_for(token_id)
            if fee is not None:
                return fee.inbound_fee if direction == "inbound" else fee.outbound_fee
        raise UnknownEntityError(
            "fee_config", token_id, f"No fee configuration found for token: {token_id}"
        )

    async def quote_bridging_fee(self, hook_id: str, token_id: str, amount: int) -> list[Coin]:
        path = QUOTE_FEE_PAYMENT_PATH.format(hook_id=hook_id, token_id=token_id, amount=amount)
        data = await self._get(path)
        return [
            Coin(denom=coin["denom"], amount=int(coin["amount"]))
            for coin in data.get("fee_coins") or []
        ]

    # ------------------------------------------------------------------
    # Interchain gas paymaster
    # ------------------------------------------------------------------

    async def quote_igp_payment(self, destination_domain: int, gas_limit: int, hook_id: str) -> int:
        """IGP fee for delivering to ``destination_domain``, in the hook's denom."""
        key = igp_cache_key(destination_domain, gas_limit, hook_id)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        path = IGP_QUOTE_PATH.format(hook_id=hook_id)
        data = await self._get(
            path,
            params={"destination_domain": destination_domain, "gas_limit": gas_limit},
        )
        payments = data.get("gas_payment") or []
        if not payments:
            raise FeeQuoteError(
                f"IGP quote returned empty response for domain {destination_domain}",
                endpoint=path,
            )
        fee = int(payments[0]["amount"])
        self.cache.set(key, fee)
        logger.debug(f"IGP quote domain={destination_domain} gas={gas_limit}: {fee}")
        return fee

    async def quote_evm_gas_payment(
        self,
        rpc_url: str,
        warp_contract: str,
        destination_domain: int,
    ) -> int:
        """
        Native-currency IGP payment a warp router asks for on ``transferRemote``.

        Runs ``quoteGasPayment(uint32)`` as an ``eth_call`` against the source
        chain's JSON-RPC endpoint.

        Args:
            rpc_url: Source chain JSON-RPC endpoint
            warp_contract: HypERC20 / HypNative router on the source chain
            destination_domain: Hyperlane domain the transfer is dispatched to

        Returns:
            Payment in wei, to attach as the call's ``value``

        Raises:
            FeeQuoteError: On transport errors, non-200 responses, JSON-RPC
                errors or a malformed result
        """
        call = quote_gas_payment_call("", warp_contract, destination_domain)
        key = ("evm_igp", rpc_url, call.to.lower(), destination_domain)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        payload = {
            "jsonrpc": "2.0",
            "id": 1,
            "method": "eth_call",
            "params": [{"to": call.to, "data": call.encode_calldata()}, "latest"],
        }
        try:
            response = await self._client.post(rpc_url, json=payload)
        except httpx.HTTPError as e:
            logger.warning(f"EVM IGP quote request failed: {rpc_url}: {e}")
            raise FeeQuoteError(f"EVM IGP quote request failed: {e}", endpoint=rpc_url) from e
        if response.status_code != 200:
            raise FeeQuoteError(
                f"EVM IGP quote failed: HTTP {response.status_code}",
                endpoint=rpc_url,
                status_code=response.status_code,
            )
        try:
            data = response.json()
        except ValueError as e:
            raise FeeQuoteError("Invalid JSON from EVM RPC", endpoint=rpc_url) from e

        if not isinstance(data, dict):
            raise FeeQuoteError("Unexpected JSON-RPC response shape", endpoint=rpc_url)
        error = data.get("error")
        if error:
            message = error.get("message", "unknown error") if isinstance(error, dict) else str(error)
            raise FeeQuoteError(f"EVM IGP quote failed: {message}", endpoint=rpc_url)
        try:
            fee = int(data["result"], 16)
        except (KeyError, TypeError, ValueError) as e:
            raise FeeQuoteError(
                f"EVM IGP quote returned no usable result: {data.get('result')!r}",
                endpoint=rpc_url,
            ) from e

        self.cache.set(key, fee)
        logger.debug(f"EVM IGP quote {call.to} domain={destination_domain}: {fee}")
        return fee

    def clear_cache(self) -> None:
        self.cache.clear()


__all__ = [
    "DEFAULT_CACHE_TTL_SECONDS",
    "igp_cache_key",
    "CachedValue",
    "FeeCache",
    "AssetFee",
    "FeeHook",
    "FeeProvider",
]
