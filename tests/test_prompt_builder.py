from selection_translator.prompt_builder import (
    EXPLANATION_SECTIONS,
    build_explanation_prompt,
    build_translation_prompt,
)


def test_auto_source_becomes_detected_language():
    prompt = build_translation_prompt("Hello", "auto", "French")

    assert "the detected language" in prompt
    assert "auto" not in prompt


def test_explicit_source_language_is_used():
    prompt = build_translation_prompt("Hello", "English", "French")

    assert "from English to French" in prompt
    assert "the detected language" not in prompt


def test_translation_prompt_ends_with_text():
    prompt = build_translation_prompt("Guten Morgen", "German", "Japanese")

    assert prompt.endswith("Guten Morgen")


def test_prompts_are_deterministic():
    assert build_translation_prompt("x", "auto", "Korean") == build_translation_prompt("x", "auto", "Korean")
    assert build_explanation_prompt("x", "auto", "Korean") == build_explanation_prompt("x", "auto", "Korean")


def test_braces_in_text_are_kept_verbatim():
    prompt = build_translation_prompt("use {style} here", "English", "German")

    assert "use {style} here" in prompt


def test_explanation_prompt_carries_format_rules():
    prompt = build_explanation_prompt("猫が好き", "auto", "English")

    assert "the detected language" in prompt
    assert "auto" not in prompt
    for section in EXPLANATION_SECTIONS:
        assert f"## {section}" in prompt
    assert "N/A" in prompt
    assert "Omit a section" in prompt
    assert prompt.endswith("猫が好き")
