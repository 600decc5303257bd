"""Async facade over the router and the Hub fee provider.

Example:
    async with BridgeClient() as client:
        result = await client.transfer(
            TransferRequest(
                source="ethereum",
                destination="solana",
                token="ETH",
                amount=10**18,
                recipient="HN7cABqLq46Es1jh92dQQisAq662SmxELLLsHHe4YWrH",
                sender="0x742d35Cc6634C0532925a3b844Bc9e7595f0bEb2",
                fallback_recipient="dym1g8sf7w4cz5gtupa6y62h3q6a4gjv37pgefnpt5",
            )
        )
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Mapping, Optional, Union

from .chains import CHAINS, AddressFormat, ChainDescriptor, DirectChain, IndirectChain
from .config import BridgeSettings, load_settings
from .exceptions import UnknownEntityError
from .fees.bridging import DEFAULT_BRIDGING_FEE_RATE, DEFAULT_EIBC_FEE_PERCENT, Rate
from .fees.breakdown import FeeBreakdown
from .fees.forwarding import ForwardingPlan
from .fees.provider import FeeCache, FeeProvider
from .logging_config import clear_context, generate_quote_id, set_quote_id, set_route_context
from .router import FeeQuote, TransferRequest, TransferResult, TransferRouter, classify_route
from .tokens import TOKENS, TokenDescriptor, get_igp_hook_id

logger = logging.getLogger(__name__)


class BridgeClient:
    """Resolves live fees and builds transfers.

    Args:
        settings: Defaults to ``load_settings()``
        fee_provider: Injected provider; one is created (and owned) otherwise
        chains: Chain registry
        tokens: Token registry
    """

    def __init__(
        self,
        settings: Optional[BridgeSettings] = None,
        fee_provider: Optional[FeeProvider] = None,
        chains: Mapping[str, ChainDescriptor] = CHAINS,
        tokens: Mapping[str, TokenDescriptor] = TOKENS,
    ) -> None:
        self.settings = settings or load_settings()
        if self.settings.configure_logging:
            self.settings.apply_logging()
        network = self.settings.network_enum
        self._owns_provider = fee_provider is None
        self.fee_provider = fee_provider or FeeProvider(
            network=network,
            hub_rest_url=self.settings.resolved_hub_rest_url(),
            cache=FeeCache(ttl=self.settings.fee_cache_ttl_seconds),
            timeout=self.settings.request_timeout_seconds,
        )
        self.router = TransferRouter(
            network=network,
            chains=chains,
            tokens=tokens,
            ibc_timeout_hours=self.settings.ibc_timeout_hours,
            igp_hook_overrides=self.settings.igp_hooks,
            warp_program_overrides=self.settings.solana_warp_programs,
        )

    async def __aenter__(self) -> "BridgeClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_provider:
            await self.fee_provider.aclose()

    async def _bridging_rate(self, token: TokenDescriptor, direction: str) -> Decimal:
        if not token.is_configured_on_hub:
            return DEFAULT_BRIDGING_FEE_RATE
        try:
            return await self.fee_provider.get_bridging_fee_rate(token.hub_token_id, direction)
        except UnknownEntityError:
            logger.warning(
                f"No {direction} fee hook for {token.symbol}, using default rate {DEFAULT_BRIDGING_FEE_RATE}"
            )
            return DEFAULT_BRIDGING_FEE_RATE

    async def _source_gas_payment(self, source: DirectChain, token: TokenDescriptor) -> int:
        rpc_url = self.settings.rpc_url(source.name)
        if not rpc_url:
            logger.warning(f"No RPC URL for {source.name}; quoting zero source gas payment")
            return 0
        contract = token.address_on(source.name, self.router.network)
        return await self.fee_provider.quote_evm_gas_payment(
            rpc_url, contract, self.router.hub.domain(self.router.network)
        )

    async def resolve_fee_quote(
        self,
        request: TransferRequest,
        eibc_percent: Optional[Rate] = None,
        source_gas_payment: Optional[int] = None,
    ) -> FeeQuote:
        """Fetch every fee input the route needs, and nothing more.

        EVM sources quote the warp router's IGP payment over JSON-RPC unless
        ``source_gas_payment`` is given.

        Raises:
            FeeQuoteError: If the Hub REST API or a source-chain RPC fails
            UnknownEntityError / InvalidFormatError / UnsupportedRouteError:
                If the request itself is invalid
        """
        source, destination, token = self.router.validate(request)
        classify_route(source, destination)

        gas_limit = self.settings.default_gas_limit
        inbound_rate: Rate = 0
        outbound_rate: Rate = 0
        delayed_ack_rate: Rate = 0
        igp_fee = 0
        hook_id: Optional[str] = None

        if isinstance(source, DirectChain):
            inbound_rate = await self._bridging_rate(token, "inbound")
            if source_gas_payment is None and source.address_format == AddressFormat.EVM:
                source_gas_payment = await self._source_gas_payment(source, token)
        elif isinstance(source, IndirectChain) and source.incentivized:
            delayed_ack_rate = await self.fee_provider.get_delayed_ack_bridging_fee()

        # Every route ending on a direct chain leaves the Hub over Hyperlane
        if isinstance(destination, DirectChain):
            outbound_rate = await self._bridging_rate(token, "outbound")
            hook_id = get_igp_hook_id(token.symbol, self.router.tokens, self.settings.igp_hooks)
            if hook_id:
                igp_fee = await self.fee_provider.quote_igp_payment(
                    destination.domain(self.router.network), gas_limit, hook_id
                )
            else:
                logger.warning(f"No IGP hook configured for {token.symbol}; quoting zero IGP fee")

        return FeeQuote(
            igp_fee=igp_fee,
            inbound_rate=inbound_rate,
            outbound_rate=outbound_rate,
            eibc_percent=DEFAULT_EIBC_FEE_PERCENT if eibc_percent is None else eibc_percent,
            delayed_ack_rate=delayed_ack_rate,
            source_gas_payment=source_gas_payment or 0,
            gas_limit=gas_limit,
            igp_hook_id=hook_id,
        )

    async def transfer(
        self,
        request: TransferRequest,
        eibc_percent: Optional[Rate] = None,
        source_gas_payment: Optional[int] = None,
    ) -> TransferResult:
        """Quote fees and build the unsigned transfer call."""
        set_quote_id(generate_quote_id())
        set_route_context(request.source, request.destination, request.token)
        try:
            quote = await self.resolve_fee_quote(request, eibc_percent, source_gas_payment)
            result = self.router.transfer(request, quote)
            logger.info(
                "Built transfer",
                extra={"mode": result.route.mode.value, "amount": str(request.amount)},
            )
            return result
        finally:
            clear_context()

    async def estimate_fees(
        self,
        request: TransferRequest,
        eibc_percent: Optional[Rate] = None,
    ) -> Union[ForwardingPlan, FeeBreakdown]:
        """Fee split for ``request``: a ForwardingPlan for routes through the
        Hub, a FeeBreakdown for single-hop routes."""
        result = await self.transfer(request, eibc_percent)
        if result.plan is not None:
            return result.plan
        return result.fees


__all__ = ["BridgeClient"]
