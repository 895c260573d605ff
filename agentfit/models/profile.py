"""
Input models for AgentFit

The candidate document and the job posting are owned by callers; the
engine only reads them.
"""

import hashlib
import json

from pydantic import BaseModel, Field


def content_hash(content: str) -> str:
    """SHA-256 hex digest truncated to 16 characters."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()[:16]


class CandidateProfile(BaseModel):
    """A candidate document (resume) as plain or markdown text."""

    resume: str = Field(..., min_length=1, description="Resume text")
    name: str | None = None

    @property
    def content_hash(self) -> str:
        return content_hash(self.resume)


class JobPosting(BaseModel):
    """A job posting the candidate is evaluated against."""

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    company: str = ""
    description: str = Field(..., min_length=1)
    location: str | None = None

    def to_prompt_json(self) -> str:
        """Serialize the posting the way agents receive it."""
        return json.dumps(
            {
                "title": self.title,
                "company": self.company,
                "description": self.description,
                "location": self.location,
                "requirements": self.description,
            },
            indent=2,
        )
