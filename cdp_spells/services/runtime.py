"""Wiring of chain clients, protocol adapters and services from config."""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Mapping

from ..chains.evm import EvmClient
from ..config import AppConfig
from ..interfaces.hints import HintLookup
from ..interfaces.position_source import PositionSource
from ..protocols.liquity import LiquityAdapter
from ..protocols.reflexer import ReflexerAdapter
from ..strategies import get_strategy
from .position_service import PositionService
from .session import StrategySession

logger = logging.getLogger(__name__)

# Registry of protocol adapter factories keyed by protocol name.
_PROTOCOL_FACTORIES: dict[str, Any] = {
    "reflexer": lambda client, cfg: ReflexerAdapter(client, cfg),
    "liquity": lambda client, cfg: LiquityAdapter(client, cfg),
}


class Runtime:
    """Builds one adapter and position service per configured protocol."""

    def __init__(self, config: AppConfig) -> None:
        self._config = config
        self._tokens = config.token_registry()

        self._chain_clients: dict[str, EvmClient] = {}
        for chain_name, chain_cfg in config.chains.items():
            self._chain_clients[chain_name] = EvmClient(chain_cfg)

        self._adapters: dict[str, PositionSource] = {}
        for proto_name, proto_cfg in config.protocols.items():
            chain_client = self._chain_clients[proto_cfg.chain]
            factory = _PROTOCOL_FACTORIES.get(proto_name)
            if factory:
                self._adapters[proto_name] = factory(chain_client, proto_cfg)
            else:
                logger.warning("No adapter factory for protocol '%s'", proto_name)

        self._services = {
            name: PositionService(adapter) for name, adapter in self._adapters.items()
        }

    @property
    def services(self) -> dict[str, PositionService]:
        return dict(self._services)

    def service(self, protocol: str) -> PositionService:
        if protocol not in self._services:
            raise KeyError(f"Protocol '{protocol}' is not configured")
        return self._services[protocol]

    def hints(self, protocol: str) -> HintLookup | None:
        adapter = self._adapters.get(protocol)
        if adapter is not None and hasattr(adapter, "get_position_hints"):
            return adapter  # type: ignore[return-value]
        return None

    def session(
        self, strategy_key: str, balances: Mapping[str, Decimal] | None = None
    ) -> StrategySession:
        """Build a session; ``balances`` maps token keys to wallet amounts."""
        strategy = get_strategy(strategy_key)
        return StrategySession(
            strategy,
            self.service(strategy.protocol),
            tokens=self._tokens,
            limits=self._config.protocols[strategy.protocol].limits,
            hints=self.hints(strategy.protocol),
            balances=balances,
        )
