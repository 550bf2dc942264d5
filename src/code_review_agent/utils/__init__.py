"""Utility modules for the Code Review Agent."""

from code_review_agent.utils.clock import Clock, MockClock, SystemClock

__all__ = ["Clock", "MockClock", "SystemClock"]
