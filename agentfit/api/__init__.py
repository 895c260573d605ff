"""
API Layer for AgentFit

FastAPI routers:
- scoring: candidate/job scoring
- tailoring: document tailoring and edits
- cache: cached profile, current job and maintenance
- activity: per-call usage log
"""

from agentfit.api.router import api_router

__all__ = ["api_router"]
