"""
FILE: wetodo/__init__.py
PURPOSE: WeToDo - collaborative to-do lists rebuilt from an append-only log
"""

__version__ = "0.1.0"
