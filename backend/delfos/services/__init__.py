"""Quiz domain services: question bank, sampling, sessions, scoring, winners.

This package holds the core logic that HTTP routes and socket handlers
import, keeping transport concerns separated from the quiz mechanics.
"""
