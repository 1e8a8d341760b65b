"""
UTXO state machine: per-call validation and mutation of one record.
"""
from teraspend.core.machine.state_machine import UTXOStateMachine

__all__ = ["UTXOStateMachine"]
