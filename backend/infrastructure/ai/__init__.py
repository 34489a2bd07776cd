"""
Language-model integrations.
"""
