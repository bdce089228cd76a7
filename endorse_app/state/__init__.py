"""
Tap state, resume state machine and payload models.
"""
