"""
FILE: wetodo/core/__init__.py
PURPOSE: Event-sourced list core (registry, models, replay, storage, service)
"""
