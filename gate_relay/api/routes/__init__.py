"""
API Routes
"""
from gate_relay.api.routes import gate, public_keys, table

__all__ = ["gate", "public_keys", "table"]
