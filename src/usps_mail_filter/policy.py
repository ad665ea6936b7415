"""Disposition policy: what to do with a message once it has been read."""

from .models import Disposition, MessageOutcome


def decide(outcome: MessageOutcome) -> Disposition:
    """Keep messages that mention a target name, discard the rest."""
    if outcome.found:
        return Disposition.KEEP
    return Disposition.DISCARD
