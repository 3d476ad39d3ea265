"""
Outcome Tracker

Habit and outcome tracking: recurring outputs, daily action logs, and
skill confidence logs feeding a prioritized practice queue.
"""

__version__ = "1.0.0"
