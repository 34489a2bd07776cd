"""
Applications Domain - students applying to published projects.
"""
