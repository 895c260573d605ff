"""
API Endpoints for AgentFit
"""

from agentfit.api.endpoints import activity, cache, scoring, tailoring

__all__ = ["scoring", "tailoring", "cache", "activity"]
