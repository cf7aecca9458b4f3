"""Die source adapters."""

from crucible.infrastructure.adapters.dice.system_die_source import SystemDieSource

__all__ = ["SystemDieSource"]
