"""Translation instructions sent as system prompts.

Both instructions tell the model that every ``<paragraph>`` part of the user
message is one paragraph and that exactly one JSON entry per paragraph must
come back, so the caller can check the counts.
"""

PARAGRAPH_OPEN = "<paragraph>"
PARAGRAPH_CLOSE = "</paragraph>"

# OpenAI: JSON object with a "results" array (json_object mode needs an object)
OPENAI_INSTRUCTION_TEMPLATE = (
    "You are an excellent translator. "
    "Translate it into {language}. Please output the following JSON. "
    "A string in `<paragraph>` tag to `</paragraph>` tag is one paragraph. "
    "The value of the `results` Key is an array type. "
    "Please output one line for each paragraph entered. "
    "There are {count} paragraphs of input, please output {count} lines. "
    "The value of `line` Key is a number type. "
    "Please output the number of the input paragraph. "
    "The value of `translated` Key is an array of String type. "
    "If a paragraph of input is translated and a paragraph consists of multiple sentences, "
    "output an array consisting of multiple String. "
    "Please remove `<paragraph>` and `</paragraph>` tags from the translation result."
)

# Gemini: bare JSON list
GEMINI_INSTRUCTION_TEMPLATE = (
    "You are an excellent translator. "
    "Translate it into {language}. Please output the following JSON. "
    "A string in `<paragraph>` tag to `</paragraph>` tag is one paragraph. "
    "If a paragraph of input is translated and a paragraph consists of multiple sentences, "
    "output an array consisting of multiple String. "
    "There are {count} paragraphs of input, please output {count} lines. "
    "Using this JSON schema: "
    'Paragraph = {{"line": number, "text": list[string]}} '
    "Return a `list[Paragraph]` "
    "Please remove `<paragraph>` and `</paragraph>` tags from the translation result."
)


def wrap_paragraph(text: str) -> str:
    """Wrap one input line in paragraph delimiters."""
    return f"{PARAGRAPH_OPEN}{text}{PARAGRAPH_CLOSE}"


def build_instruction(template: str, language: str, count: int) -> str:
    """Render an instruction template for a chunk of ``count`` lines."""
    return template.format(language=language, count=count)
