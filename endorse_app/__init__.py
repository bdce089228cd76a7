"""
Endorse App - Card endorsement capture and resubmission

Lets visitors tap positive traits ("signals") on a card with a 1-3 intensity,
submit them as an endorsement, and carries an unsent endorsement across a
login redirect so it is resubmitted exactly once after authentication.
"""

__version__ = "0.1.0"
__author__ = "Endorse Team"
