from __future__ import annotations

EXTRACTION_INSTRUCTION = (
    "Extract all text from this contract/agreement image. "
    "Return the full text as accurately as possible."
)

CLASSIFICATION_PROMPT = """
Analyze this contract text for consumer protection issues. Identify and categorize problems
into the following categories:

CONTRACT TEXT:
{contract_text}

Please identify:
1. Hidden Risks: Unexpected terms, liability limitations, or fine print issues. Rate severity
   as low, medium, or high.
2. Money Traps: Hidden fees, charges, or pricing terms. Include estimated amounts if possible.
3. Auto-Renew Traps: Automatic renewal clauses, subscription traps, or difficult cancellation
   processes. Describe how hard cancellation is.
4. Dangerous Clauses: Unfair liability waivers, mandatory arbitration, non-compete clauses, or
   other predatory legal terms. Describe the legal impact on the consumer.

Focus on identifying predatory terms that harm consumers, automatic renewals, unfair liability
limitations, and hidden fees. Return an empty list for a category with no findings.
"""


def build_classification_prompt(contract_text: str) -> str:
    return CLASSIFICATION_PROMPT.replace("{contract_text}", contract_text).strip()
