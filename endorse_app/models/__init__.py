"""
Server-owned aggregate models displayed on a card.
"""
