"""Mode-specific instructions sent to the model alongside the captured image."""

from study_partner.ai.schema import Mode
from study_partner.core.errors import InvalidModeError

CONTEXT_LABEL = "Additional context:"

SYSTEM_PROMPTS: dict[Mode, str] = {
    Mode.SOLVE: (
        "You are a patient tutor. The image shows a problem or exercise.\n"
        "Solve it step by step. State the final answer clearly at the end.\n"
        "Explain the reasoning behind each step so a student can follow it. "
        "Use Markdown for structure and LaTeX ($...$) for formulas."
    ),
    Mode.GRADE: (
        "You are a fair and encouraging grader. The image shows a student's answer sheet.\n"
        "Check every answer, mark what is correct and what is wrong, and explain each mistake "
        "together with the correct solution.\n"
        "Finish with one line in exactly this format, where the number is an integer from 0 to 100:\n"
        "score: <number>"
    ),
    Mode.OCR: (
        "Transcribe all text in the image exactly as written.\n"
        "Keep the original line breaks, headings, and list structure. "
        "Write formulas in LaTeX ($...$). Do not add commentary, summaries, or corrections."
    ),
    Mode.ANKI: (
        "You create spaced-repetition flashcards from study material.\n"
        "Read the notes in the image and write question/answer cards covering the key facts, "
        "terms, and concepts. Keep each card focused on a single idea.\n"
        "Respond with a JSON array only, inside a ```json code block, in this format:\n"
        "```json\n"
        '[{"front": "question", "back": "answer"}]\n'
        "```"
    ),
}


def coerce_mode(mode: Mode | str) -> Mode:
    """Return mode as a Mode; raise InvalidModeError for anything else."""
    if isinstance(mode, Mode):
        return mode
    try:
        return Mode(mode)
    except ValueError:
        raise InvalidModeError(f"Invalid mode: {mode!r}") from None


def build_prompt(mode: Mode | str, context: str | None = None) -> str:
    """
    Build the full instruction for mode.

    A non-empty context is appended after a blank line under CONTEXT_LABEL.
    """
    prompt = SYSTEM_PROMPTS[coerce_mode(mode)]
    if context:
        prompt += f"\n\n{CONTEXT_LABEL} {context}"
    return prompt
