"""
Crease - ball-by-ball T20 match simulation engine
"""
__version__ = "0.1.0"
