"""
AgentFit - Multi-Agent Candidate Scoring and Document Tailoring

Scores a candidate document against job postings with a roster of
specialised model agents and rewrites the document for a target job.
"""

__version__ = "0.1.0"
__author__ = "AgentFit Team"
