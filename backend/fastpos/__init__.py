"""
FastPOS - single-terminal point-of-sale backend

Order lifecycle, dual-currency (USD/VES) valuation, cash cut and
offline-first synchronization with Supabase.
"""
__version__ = "1.0.0"
