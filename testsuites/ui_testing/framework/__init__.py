"""
================================================================================
UI Testing Framework
================================================================================

Playwright adapter providing plain and pre-authenticated pages.

Author: Automation Team
License: MIT
================================================================================
"""

from .browser_manager import BrowserManager

__all__ = [
    "BrowserManager",
]
