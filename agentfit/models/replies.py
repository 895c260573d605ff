"""
Reply schemas for AgentFit

Each structured prompt declares one of these models. The model's reply
is parsed to JSON and validated against it; anything that does not
conform is treated as a failed attempt. Replies use camelCase keys and
are stored in snake_case after validation.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from agentfit.models.scoring import Severity


class ReplyModel(BaseModel):
    """Base for model replies: camelCase on the wire, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ============================================================================
# SCORING AGENTS
# ============================================================================

class ScoringAgentReply(ReplyModel):
    category_score: float = Field(..., ge=0, le=100)
    reasoning: str = Field(..., min_length=1)
    recommendations: list[str] = Field(default_factory=list)


class TechnicalSkillsReply(ScoringAgentReply):
    skills_matched: list[str] = Field(default_factory=list)
    skills_missing: list[str] = Field(default_factory=list)
    skills_related: list[str] = Field(default_factory=list)
    proficiency_gaps: list[str] = Field(default_factory=list)


class ExperienceDepthReply(ScoringAgentReply):
    years_relevant: float | None = None
    years_total: float | None = None
    industry_match: bool | None = None
    role_complexity_match: bool | None = None
    leadership_experience: bool | None = None
    experience_gaps: list[str] = Field(default_factory=list)


class AchievementsReply(ScoringAgentReply):
    quantified_results: list[str] = Field(default_factory=list)
    business_impact: list[str] = Field(default_factory=list)
    leadership_achievements: list[str] = Field(default_factory=list)
    innovation_examples: list[str] = Field(default_factory=list)
    achievement_gaps: list[str] = Field(default_factory=list)


class EducationReply(ScoringAgentReply):
    degree_match: bool | None = None
    relevant_certifications: list[str] = Field(default_factory=list)
    expired_certifications: list[str] = Field(default_factory=list)
    continuous_learning: bool | None = None
    education_gaps: list[str] = Field(default_factory=list)


class SoftSkillsReply(ScoringAgentReply):
    communication_evidence: str = ""
    leadership_evidence: list[str] = Field(default_factory=list)
    adaptability_evidence: list[str] = Field(default_factory=list)
    cultural_fit_indicators: list[str] = Field(default_factory=list)
    soft_skill_gaps: list[str] = Field(default_factory=list)


class CareerProgressionReply(ScoringAgentReply):
    progression_pattern: str = ""
    job_stability: str = ""
    responsibility_growth: bool | None = None
    career_focus: bool | None = None
    progression_concerns: list[str] = Field(default_factory=list)


# ============================================================================
# ANALYSIS AGENTS
# ============================================================================

class StrengthsReply(ReplyModel):
    top_strengths: list[str]
    reasoning: str = Field(..., min_length=1)
    differentiators: list[str] = Field(default_factory=list)
    role_relevance: str = ""


class ImprovementPlanReply(ReplyModel):
    short_term: str
    mid_term: str
    long_term: str


class WeaknessItemReply(ReplyModel):
    weakness: str = Field(..., min_length=1)
    impact: str
    severity: Severity
    improvement_plan: ImprovementPlanReply


class WeaknessesReply(ReplyModel):
    top_weaknesses: list[WeaknessItemReply]
    reasoning: str = Field(..., min_length=1)
    risk_assessment: str = ""
    prioritization: str = ""


# ============================================================================
# SCORING ORCHESTRATION
# ============================================================================

class InterviewFocusReply(ReplyModel):
    category: str
    areas: list[str]
    questions: list[str]
    red_flags: list[str]


class ScoringOrchestrationReply(ReplyModel):
    overall_score: float = Field(..., ge=0, le=100)
    category: str
    breakdown: dict[str, dict]
    key_strengths: list[str] = Field(default_factory=list)
    key_weaknesses: list[str | WeaknessItemReply] = Field(default_factory=list)
    red_flags: list[str] = Field(default_factory=list)
    positive_indicators: list[str] = Field(default_factory=list)
    hiring_recommendation: str = Field(..., min_length=1)
    interview_focus: list[InterviewFocusReply] = Field(default_factory=list)


# ============================================================================
# TAILORING AGENTS
# ============================================================================

class SkillsOptimizationReply(ReplyModel):
    optimized_skills_section: str
    changes_made: list[str]
    ats_keywords_added: list[str] = Field(default_factory=list)
    skills_reordered: list[str] = Field(default_factory=list)
    skills_added: list[str] = Field(default_factory=list)
    skills_removed: list[str] = Field(default_factory=list)
    gaps_addressed: list[str] = Field(default_factory=list)


class ExperienceReframingReply(ReplyModel):
    enhanced_experience_section: str
    relevance_improvements: list[str]
    quantification_added: list[str] = Field(default_factory=list)
    transferable_skills_highlighted: list[str] = Field(default_factory=list)
    action_verbs_improved: list[str] = Field(default_factory=list)
    gaps_addressed: list[str] = Field(default_factory=list)


class AchievementAmplificationReply(ReplyModel):
    amplified_achievements: str
    impact_improvements: list[str]
    metrics_added: list[str] = Field(default_factory=list)
    job_aligned_achievements: list[str] = Field(default_factory=list)
    weaknesses_addressed: list[str] = Field(default_factory=list)
    suggested_development_areas: list[str] = Field(default_factory=list)


class KeywordOptimizationReply(ReplyModel):
    ats_optimized_content: str
    keywords_integrated: list[str]
    ats_compatibility_improvements: list[str] = Field(default_factory=list)
    section_headers_optimized: list[str] = Field(default_factory=list)
    keyword_density_optimized: list[str] = Field(default_factory=list)
    exact_match_phrases: list[str] = Field(default_factory=list)


class ProfessionalSummaryReply(ReplyModel):
    professional_summary: str
    brand_positioning: str
    key_differentiators: list[str] = Field(default_factory=list)
    keywords_integrated: list[str] = Field(default_factory=list)
    gaps_addressed: list[str] = Field(default_factory=list)
    value_proposition: str = ""


class EducationCertificationsReply(ReplyModel):
    optimized_education: str
    education_positioning: str
    certification_recommendations: list[str] = Field(default_factory=list)
    relevant_coursework_highlighted: list[str] = Field(default_factory=list)
    continuing_education_suggestions: list[str] = Field(default_factory=list)
    gaps_addressed: list[str] = Field(default_factory=list)


class GapMitigationReply(ReplyModel):
    gap_mitigation_strategies: list[str]
    compensating_strengths: list[str]
    positioning_adjustments: list[str] = Field(default_factory=list)
    content_additions: list[str] = Field(default_factory=list)
    narrative_strategies: list[str] = Field(default_factory=list)
    red_flags_addressed: list[str] = Field(default_factory=list)


class IndustryAlignmentReply(ReplyModel):
    industry_aligned_content: str
    terminology_updates: list[str]
    cultural_alignment: str = ""
    technical_detail_optimization: str = ""
    communication_style_adjustments: list[str] = Field(default_factory=list)
    industry_keywords_added: list[str] = Field(default_factory=list)


class TailoringOrchestrationReply(ReplyModel):
    final_tailored_resume: str = Field(..., min_length=1)
    priority_changes: list[str]
    change_summary: str
    expected_score_improvements: list[str] = Field(default_factory=list)
    conflicts_resolved: list[str] = Field(default_factory=list)
    consistency_improvements: list[str] = Field(default_factory=list)
    readability_enhancements: list[str] = Field(default_factory=list)


# ============================================================================
# EDITING
# ============================================================================

class DocumentEditReply(ReplyModel):
    """Sectioned reply: UPDATED_RESUME / CHANGE_SUMMARY blocks."""

    updated_document: str = Field(..., min_length=1)
    change_summary: str = ""
