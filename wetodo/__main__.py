"""
FILE: wetodo/__main__.py
PURPOSE: Allow "python -m wetodo"
"""

from .cli.main import main

main()
