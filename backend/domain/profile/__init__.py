"""
Profile Domain - student profiles.
"""
