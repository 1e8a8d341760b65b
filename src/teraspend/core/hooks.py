"""
Capability interface the host calls into.

The host resolves a module and function name to ``UTXOModule.apply_record``
and passes the record it already holds. Registering the module with the host
is left to the host.
"""

import logging
from typing import Any, MutableMapping, Optional, Sequence

from teraspend.core import dispatch
from teraspend.core.config import TeraspendConfig, config as default_config
from teraspend.core.result import Result

logger = logging.getLogger(__name__)


class UTXOModule:
    """Native UTXO record module."""

    def __init__(self, config: Optional[TeraspendConfig] = None):
        self.config = config or default_config
        dispatch.configure(self.config)

    def configure(self, config: TeraspendConfig):
        """Handle the host's configure event."""
        self.config = config
        dispatch.configure(config)
        logger.info(
            f"UTXO module configured: server_mode={config.server_mode}, "
            f"block_height_retention={config.block_height_retention}"
        )

    def validate(self, filename: str, content: Optional[str] = None) -> None:
        """Native module: there is no source to validate."""
        logger.debug(f"validate({filename}) accepted")

    def functions(self):
        return dispatch.function_names()

    def apply_record(
        self,
        function_name: Optional[str],
        record: MutableMapping[str, Any],
        args: Optional[Sequence[Any]] = None,
    ) -> Result:
        return dispatch.apply(function_name, record, args)
