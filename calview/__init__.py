"""
calview - calendar range resolution and event layout.
"""

__version__ = "0.1.0"
