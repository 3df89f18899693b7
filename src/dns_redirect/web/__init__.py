"""
Redirect Service Web Module

This module provides the HTTP front end for the redirect service including:
- The redirect middleware applied to intercepted requests
- REST API endpoints for monitoring and cache control
"""

from .server import WebServer, decision_to_response, is_excluded_path

__all__ = ["WebServer", "decision_to_response", "is_excluded_path"]
