"""Core pipeline package — session model, state table, orchestrator.

state.py holds the processing states and the transition table,
session.py the upload session, transcript and voice-over types plus the
acceptance gate, and orchestrator.py the stage sequencing.
"""
