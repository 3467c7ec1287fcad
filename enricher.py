"""Mode-specific rewriting of transcripts through a chat-completion model."""

from __future__ import annotations

import logging

from errors import EmptyEnrichmentResponse
from interfaces import ChatProvider
from models import ProcessingMode

logger = logging.getLogger(__name__)

CLIPBOARD_LIMIT = 12000
TEMPERATURE = 0.3
DEFAULT_LANGUAGE_LABEL = "the user's language"

NO_ACTION_ITEMS = "No action items."
EMPTY_CLIPBOARD_MARKER = "(clipboard is empty)"

GLOBAL_GRAMMAR_RULE = (
    "CRITICAL INSTRUCTION: Regardless of the output format, you MUST correct all grammatical "
    "errors in the input. Follow the strict standard grammar of the target language "
    "(for German: 'Hochdeutsch', e.g. Genitive 'wegen des' instead of Dative 'wegen dem'). "
    "Ensure punctuation and sentence structure are perfect."
)

DIRECT_PASTE_RULE = (
    "Output must be ready to paste into another app: no preamble, no meta-commentary, no code fences."
)
RELAXED_RULE = "Be concise and helpful."

SCIENTIFIC_WORK_TASK = """You are an academic editor for a Bachelor's thesis. The user will dictate thoughts via stream-of-consciousness. They may stutter, repeat themselves, or speak colloquially.

YOUR TASK: Extract the core arguments and factual content. Reformulate them into precise, high-level academic prose in the target language (for German: 'Wissenschaftssprache') as if you are the author writing the thesis directly.

PERSPECTIVE: Write directly as the author. Do NOT use phrases like 'The user says', 'The author states', 'The author intends to', or any meta-reference to the speaker. The output must read as the thesis text itself.

CONTEXT AWARENESS: Match the type of content. If the input is an argument or claim, formulate it as the argument. If it is a methodology description, write it as the methodology section. If it is a result or finding, write it as the results section. Adapt structure and register accordingly.

TONE: Maintain a strict academic nominal style ('Nominalstil') and passive voice where appropriate, but ensure the text flows naturally as part of a thesis chapter, not as a summary about the text.

RULES:
1. Use nominal style and passive voice where appropriate for academic texts.
2. Strictly NO filler words.
3. DO NOT invent new facts. Only structure and reformulate the user's thoughts.
4. If the user says 'write this down' or similar, ignore the command and output only the content.
5. Output format: A clean, coherent paragraph ready to be pasted into LaTeX or Word.

EXAMPLE:
- Input: "I asked 50 people."
- Bad: "The author states that 50 people were asked."
- Good: "An empirical survey of 50 subjects was conducted.\""""

TASK_INSTRUCTIONS: dict[ProcessingMode, str] = {
    ProcessingMode.STANDARD: (
        "Task: rewrite the transcription with correct grammar, spelling, and punctuation. "
        "Preserve meaning and tone. Do not add new information."
    ),
    ProcessingMode.CONTEXT_REPLY: (
        "Task: use the clipboard text as context and the voice instruction to produce the appropriate "
        "response or perform the requested transformation. If the user asks to reply, draft the reply. "
        "If the user asks to edit/transform the clipboard, output the transformed text. "
        "Output only the result."
    ),
    ProcessingMode.MEETING_MINUTES: (
        "Task: produce meeting minutes in markdown with clear headings: Summary, "
        "Speakers/Participants (if inferable), Decisions, Action Items (checkbox list), Notes. "
        "Be robust to imperfect transcripts."
    ),
    ProcessingMode.TODO_EXTRACTOR: (
        "Task: extract actionable to-dos and output a markdown checklist. "
        f'If none, output: "{NO_ACTION_ITEMS}"'
    ),
    ProcessingMode.SCIENTIFIC_WORK: SCIENTIFIC_WORK_TASK,
}


def truncate_clipboard(context: str, limit: int = CLIPBOARD_LIMIT) -> str:
    return context[:limit]


def build_system_prompt(mode: ProcessingMode, language_label: str = "", direct_paste: bool = False) -> str:
    label = language_label.strip() or DEFAULT_LANGUAGE_LABEL
    paste_rule = DIRECT_PASTE_RULE if direct_paste else RELAXED_RULE
    return (
        f"{GLOBAL_GRAMMAR_RULE}\n\n"
        f"You are a highly capable productivity assistant who writes naturally in {label}.\n"
        f"{paste_rule}\n"
        f"{TASK_INSTRUCTIONS[mode]}"
    )


def build_user_content(text: str, mode: ProcessingMode, clipboard_context: str = "") -> str:
    if mode != ProcessingMode.CONTEXT_REPLY:
        return text
    clipboard = truncate_clipboard(clipboard_context).strip()
    return (
        f"Here is the text from my clipboard:\n\n{clipboard or EMPTY_CLIPBOARD_MARKER}\n\n"
        f"My voice instruction is:\n\n{text}"
    )


class EnrichmentClient:
    def __init__(self, provider: ChatProvider, model: str = "gpt-4o-mini", temperature: float = TEMPERATURE) -> None:
        self._provider = provider
        self._model = model
        self._temperature = temperature

    def build_messages(
        self,
        text: str,
        mode: ProcessingMode = ProcessingMode.STANDARD,
        language_label: str = "",
        clipboard_context: str = "",
        direct_paste: bool = False,
    ) -> list[dict[str, str]]:
        return [
            {"role": "system", "content": build_system_prompt(mode, language_label, direct_paste)},
            {"role": "user", "content": build_user_content(text, mode, clipboard_context)},
        ]

    def enrich(
        self,
        text: str,
        mode: ProcessingMode = ProcessingMode.STANDARD,
        language_label: str = "",
        clipboard_context: str = "",
        direct_paste: bool = False,
    ) -> str:
        mode = ProcessingMode(mode)
        messages = self.build_messages(text, mode, language_label, clipboard_context, direct_paste)
        logger.debug("Enriching %d chars in %s mode", len(text), mode.value)
        content = self._provider.complete(messages, self._model, self._temperature)
        if not content:
            raise EmptyEnrichmentResponse()
        return content
