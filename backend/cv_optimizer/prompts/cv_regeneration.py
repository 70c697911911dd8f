"""
CV Regeneration Prompt — rewrites an existing CV for stronger ATS optimisation.

The model answers with plain CV text; no JSON envelope, no scores.
Temperature: 0.7 | Max tokens: 1800
"""

PROMPT_TEMPLATE = """\
Please improve and refine this CV to make it even more ATS-friendly and professional:

Current CV:
{current_cv}

Improvements to make:
1. Better keyword optimization
2. Improved formatting for ATS systems
3. Stronger action verbs and quantified achievements
4. Better section organization
5. More compelling professional summary

Return the improved CV maintaining all the original information but with better presentation and optimization.
Respond with the CV as plain text only, without JSON, markdown code fences or commentary.
"""


def build_regeneration_prompt(current_cv: str | None) -> str:
    # Not truncated: the CV's line structure must survive into the rewrite
    return PROMPT_TEMPLATE.format(current_cv=(current_cv or "").strip())
