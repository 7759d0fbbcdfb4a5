from __future__ import annotations

FORMAT_NARRATIVE = "narrative"
FORMAT_STRUCTURED = "structured"
DETAIL_BRIEF = "brief"
DETAIL_DETAILED = "detailed"

FORMATS = (FORMAT_NARRATIVE, FORMAT_STRUCTURED)
DETAILS = (DETAIL_BRIEF, DETAIL_DETAILED)

_FORMAT_INSTRUCTIONS = {
	FORMAT_NARRATIVE: "Narrative/story-based",
	FORMAT_STRUCTURED: "Bullet points and clear structure",
}

_DETAIL_INSTRUCTIONS = {
	DETAIL_BRIEF: "Keep it concise and simple",
	DETAIL_DETAILED: "Provide detailed explanations with examples",
}


def detect_register(understood: str) -> str:
	if "!" in understood or "like" in understood:
		return "casual"
	return "formal"


def build_explanation_prompt(source: str, understood: str, fmt: str, detail: str) -> str:
	if fmt not in _FORMAT_INSTRUCTIONS:
		raise ValueError(f"format must be one of {list(FORMATS)}")
	if detail not in _DETAIL_INSTRUCTIONS:
		raise ValueError(f"detail must be one of {list(DETAILS)}")
	return (
		"You are an expert tutor helping a student understand a concept.\n\n"
		f"STUDENT'S PARTIAL UNDERSTANDING: \"{understood}\"\n\n"
		f"ORIGINAL TEXT: \"{source}\"\n\n"
		"STUDENT'S PREFERENCES:\n"
		f"- Format: {_FORMAT_INSTRUCTIONS[fmt]}\n"
		f"- Detail level: {_DETAIL_INSTRUCTIONS[detail]}\n\n"
		"YOUR TASK:\n"
		"1. Acknowledge what they understood (the threads they've grasped)\n"
		"2. Build outward from their understanding to complete the concept\n"
		"3. Use **bold** for key terms and important concepts\n"
		f"4. Match their communication style (they sound {detect_register(understood)})\n"
		"5. Generate an explanation that connects their understanding to the full picture\n\n"
		"Respond with ONLY the explanation, formatted as requested. Use **bold** for key terms."
	)
