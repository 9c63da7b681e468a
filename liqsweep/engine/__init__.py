"""
LiqSweep Engine Module
======================
Signal sequencing from sweep detections to trade decisions.
"""

from .signal_sequencer import (
    TradeState,
    SequencerAction,
    SequencerDecision,
    ActiveTrade,
    SignalSequencer
)

__all__ = [
    'TradeState',
    'SequencerAction',
    'SequencerDecision',
    'ActiveTrade',
    'SignalSequencer'
]
