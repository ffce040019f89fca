"""
slotbooking - booking-slot eligibility and search for a single-crew shop.
"""

__version__ = "0.1.0"
