"""
                Order Desk

Live order and table state for restaurant staff screens, plus the
time-boxed walk-in customer session and cart, with a hybrid Mock/Real
integration architecture.

Author: Khalil Bannouri
Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
__author__ = "Khalil Bannouri"
