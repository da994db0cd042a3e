"""
Core modules for CostOf.Life.

This package contains expense parsing, lifetimes and the per diem
calculations.
"""
