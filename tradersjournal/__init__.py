"""
Trader's Journal

Backend API for a forex trading journal: authenticated trade logging,
performance statistics, direct messaging, AI trade summaries and
administrator dashboards, on top of Supabase.
"""

__version__ = "0.1.0"
__author__ = "Trader's Journal Team"
