"""
DNS Redirect Service

Redirects HTTP requests to the hostname published in a `_redirect.<domain>`
TXT record (`destination=<target-domain>`).
"""

__version__ = "1.0.0"
