"""
                Bistro Ordering Backend

Cookie-session authentication plus menu and order API for a single
restaurant, served next to the bundled frontend.

Author: Your Name
Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
__author__ = "Your Name"
