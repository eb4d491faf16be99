"""
Text clean-up applied to replies before they are spoken on the phone.
"""

import re

REPEATED_PUNCTUATION = [
    (re.compile(r"\.{2,}"), "."),
    (re.compile(r"!{2,}"), "!"),
    (re.compile(r"\?{2,}"), "?"),
]

# Spoken forms for abbreviations that text-to-speech engines read poorly
ABBREVIATIONS = [
    (re.compile(r"\bDr\."), "Doctor"),
    (re.compile(r"\bMrs\."), "Missus"),
    (re.compile(r"\bMr\."), "Mister"),
    (re.compile(r"\bMs\."), "Miss"),
    (re.compile(r"\betc\."), "etcetera"),
    (re.compile(r"\bi\.e\."), "that is"),
    (re.compile(r"\be\.g\."), "for example"),
]

TERMINAL_PUNCTUATION = (".", "!", "?")


def optimize_text_for_phone(text: str) -> str:
    """
    Prepare reply text for speech synthesis.

    Collapses runs of repeated terminal punctuation, expands common abbreviations
    to their spoken form and makes sure the text ends with terminal punctuation.

    Args:
        text: Reply text as generated by the model

    Returns:
        Normalised text, or an empty string for blank input
    """
    if not text:
        return ""

    for pattern, replacement in REPEATED_PUNCTUATION:
        text = pattern.sub(replacement, text)
    for pattern, replacement in ABBREVIATIONS:
        text = pattern.sub(replacement, text)

    text = text.strip()
    if text and not text.endswith(TERMINAL_PUNCTUATION):
        text += "."
    return text
