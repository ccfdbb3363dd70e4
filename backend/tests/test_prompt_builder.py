from kurdmed.services.prompt_builder import (
    MEDICATION_RESPONSE_SCHEMA,
    build_chat_instruction,
    build_identification_instruction,
    build_name_prompt,
    default_image_prompt,
    response_format,
)


def test_identification_instruction_english():
    text = build_identification_instruction("en")
    assert "**English**" in text
    assert "single, valid JSON object" in text
    assert "'name' field is an empty string" in text
    assert "educational purposes only" in text
    assert "cannot be omitted" in text


def test_identification_instruction_kurdish():
    text = build_identification_instruction("ku")
    assert "Kurdish (Sorani)" in text
    assert "ڕاوێژی پزیشکیی پیشەیی" in text
    assert "educational purposes only" not in text


def test_chat_instruction_boundaries_english():
    text = build_chat_instruction("en")
    assert "NEVER Diagnose" in text
    assert "I cannot provide medical advice. For a proper diagnosis, please consult a healthcare professional." in text
    assert "NEVER Suggest Treatment" in text
    assert "emergency services" in text


def test_chat_instruction_boundaries_kurdish():
    text = build_chat_instruction("ku")
    assert "هەرگیز دەستنیشانکردنی نەخۆشی مەکە" in text
    assert "هەرگیز چارەسەر پێشنیار مەکە" in text
    assert "فریاکەوتنی خێرا" in text


def test_schema_required_fields():
    assert MEDICATION_RESPONSE_SCHEMA["required"] == ["name", "uses", "sideEffects", "disclaimer"]
    assert set(MEDICATION_RESPONSE_SCHEMA["properties"]) == {
        "name", "description", "activeIngredients", "dosage", "uses", "sideEffects", "disclaimer",
    }
    fmt = response_format()
    assert fmt["type"] == "json_schema"
    assert fmt["json_schema"]["schema"] is MEDICATION_RESPONSE_SCHEMA


def test_request_prompts_are_localized(translator):
    assert "Ibuprofen" in build_name_prompt("  Ibuprofen ", "en", translator)
    assert "{name}" not in build_name_prompt("Ibuprofen", "ku", translator)
    assert default_image_prompt("ku", translator) == translator.translate("packagingScanner.prompt", "ku")
