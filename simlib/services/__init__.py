"""
Services package - challenge scoring.
"""

from simlib.services.challenge_service import (
    SettleEvaluator, ResultLog, TuningChallengeSession, FilterChallengeEvaluator,
)

__all__ = ['SettleEvaluator', 'ResultLog', 'TuningChallengeSession', 'FilterChallengeEvaluator']
