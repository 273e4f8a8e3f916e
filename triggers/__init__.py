"""
Triggers Package.

Azure Functions HTTP blueprints, one per component group.

Blueprints:
    checkins_bp:     /api/checkins/*
    headcount_bp:    /api/headcount/*
    preferences_bp:  /api/preferences/*
    audit_bp:        /api/audit/* (Admin role)
    diagnostics_bp:  /api/livez, /api/test/*

Exports:
    BaseHttpTrigger, HttpResult, extract_principal for handler code and tests
"""

# Only import the base module; blueprints are imported by function_app.py
from .http_base import BaseHttpTrigger, HttpResult, extract_principal

__all__ = [
    'BaseHttpTrigger',
    'HttpResult',
    'extract_principal',
]
