"""
Signal catalog consumed from the card page load.
"""
