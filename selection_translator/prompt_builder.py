
from selection_translator.models import AUTO_LANGUAGE

TRANSLATOR_PREAMBLE = (
    "You are a professional translator. Only output the translated text, nothing else."
)

EXPLAINER_PREAMBLE = (
    "You are a language teacher who explains the meaning and usage of text "
    "to learners, following the requested Markdown format exactly."
)

TRANSLATION_PROMPT = """You are a professional translator. Translate the following text from {source} to {target}.
Only output the translated text, nothing else. Do not include explanations or notes.

Text to translate:
{text}"""

# Headings the explanation may use, in this order
EXPLANATION_SECTIONS = (
    "Summary",
    "Key Vocabulary",
    "Grammar Points",
    "Nuance & Usage",
    "Cultural Notes",
)

# Placeholders the backend must never write in place of real content
FORBIDDEN_PLACEHOLDERS = ("N/A", "None", "Not applicable", "No notes", "なし", "該当なし")

EXPLANATION_PROMPT = """You are a language teacher. Explain the following text, written in {source}, for a learner whose language is {target}.
Write the whole explanation in {target}.

FORMAT RULES
- Use Markdown. Start each section with a level-2 heading ("## ").
- Use only these sections, in this order:
{sections}
- Omit a section entirely (heading included) if you have nothing meaningful to say for it.
- Never write placeholder text such as {placeholders}. Leave the section out instead.
- Do not repeat the original text in full and do not add an introduction or a closing remark.

Text to explain:
{text}"""


def describe_source_lang(source_lang):
    """The 'auto' sentinel is never shown to the model."""
    if source_lang == AUTO_LANGUAGE:
        return "the detected language"
    return source_lang


def build_translation_prompt(text, source_lang, target_lang):
    return TRANSLATION_PROMPT.format(
        source=describe_source_lang(source_lang),
        target=target_lang,
        text=text,
    )


def build_explanation_prompt(text, source_lang, target_lang):
    """
    Builds the explanation instructions. The formatting rules are only
    requests to the backend; nothing here checks the Markdown it returns.
    """
    sections = "\n".join(f"  ## {name}" for name in EXPLANATION_SECTIONS)
    placeholders = ", ".join(f'"{p}"' for p in FORBIDDEN_PLACEHOLDERS)
    return EXPLANATION_PROMPT.format(
        source=describe_source_lang(source_lang),
        target=target_lang,
        sections=sections,
        placeholders=placeholders,
        text=text,
    )
