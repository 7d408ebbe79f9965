"""
Moni - Personal Finance Tracker Core

Records income/expense transactions and recurring subscriptions,
persists them to a single local slot, and derives monthly summaries,
category breakdowns and billing reminders.

DESIGN PRINCIPLES:
1. The Data Store is the single source of truth
2. Derived views are pure functions of the stored data
3. Every mutation is persisted immediately
4. No failure is fatal: the last known good state always survives
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Moni Team"
