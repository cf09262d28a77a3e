"""All prompt templates for generative suggestions."""

SUGGESTION_SYSTEM = """You are an English grammar correction expert.
Rules:
- Only identify grammar, spelling, punctuation, or capitalization mistakes.
- Never rewrite whole sentences and never comment on style or tone.
- Follow the output format exactly; output nothing else."""

SUGGESTION_PROMPT = """Analyze the following text.

Instructions:
- For each issue, output EXACTLY 1 line using this strict format:
  original | correction | explanation
- The "original" must be a word or phrase copied verbatim from the input.
- The "correction" must differ from the original.
- The "explanation" must be brief.
- Do NOT repeat the same word (e.g. "had | had").
- Do NOT return full sentence corrections.
- If there are no mistakes, output nothing.

Example:
Input: she have went to the store yesterday
Output:
have | had | Use "had" for past perfect tense.
went | gone | "Gone" is the correct past participle.

Now correct this:
\"\"\"{text}\"\"\""""

VALIDATION_SYSTEM = """You are a grammar expert reviewing proposed corrections.
Only confirm a correction if it fixes a real mistake and keeps the meaning of the text."""

VALIDATION_PROMPT = """Validate whether the following suggestions are correct for the text.

Text:
{text}

Suggestions:
{suggestions_block}

Return a JSON object:
- "confirmed": list of {{"original": str, "replacement": str}} for every suggestion that is correct, copied exactly as given"""


def format_suggestions_block(text: str, candidates: list) -> str:
    """Format candidate annotations as numbered 'original -> replacement' lines."""
    lines = []
    for i, candidate in enumerate(candidates, 1):
        original = candidate.span_text(text)
        replacement = candidate.replacements[0] if candidate.replacements else "[no suggestion]"
        lines.append(f"{i}. {original} -> {replacement}")
    return "\n".join(lines)
