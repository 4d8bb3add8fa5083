"""
jeffy_shared — configuration, clients, models and business maths for the Jeffy platform.

Usage:
    from jeffy_shared.config import settings
    from jeffy_shared.db import get_supabase_client
    from jeffy_shared.pricing import CostBreakdownInput, calculate_cost_breakdown
    from jeffy_shared.models import OrderCreate, ShipmentCreate
"""

__version__ = "0.1.0"
