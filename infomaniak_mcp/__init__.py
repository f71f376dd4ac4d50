"""
Infomaniak MCP server package.

Exposes validated tools backed by the Infomaniak REST API over stdio or
HTTP. See DESIGN.md for full details.
"""

__version__ = "1.0.0"

__all__ = ["__version__", "config"]
