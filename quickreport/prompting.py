"""Prompt templates for folder classification and file summaries."""

from __future__ import annotations

ANALYSIS_KEY = "analysis_key"

FOLDER_ANALYSIS_PROMPT = (
    "Analyze the following folder names and keep only those that are likely to be "
    "user-written source code directories. Return a JSON object whose only key is "
    "'analysis_key' and whose value is an array of the matching folder names. Do not "
    "add any other keys, explanations, or formatting.\n"
    "Folders:\n{folders}\n{extra_folders}"
)

FILE_SUMMARY_PROMPT = (
    "Write a short functional summary (at most 100 words) of the following source file. "
    "Describe concretely what the code does, in the style of a professional software "
    "engineer, and keep identifiers exactly as they appear in the code.\n{content}"
)

# Completion-style prompts for the local llama.cpp server, which has no chat roles.
COMPLETION_FOLDER_ANALYSIS_PROMPT = (
    "SYSTEM:Analyze the following folder names and keep only those that are likely to be "
    "user-written source code directories. Reply with nothing but a JSON object of the form "
    '{{"analysis_key": [matching folder names]}}, where \'analysis_key\' is the only key.\n'
    "The folder names are listed below.\n\n"
    "USER:{folders}{extra_folders}\nASSISTANT"
)

CHUNK_SUMMARY_PROMPT = (
    "SYSTEM:You are a software analysis engineer. Given source code, describe which "
    "features it implements in about 50 words.\nUSER:{content}\nASSISTANT"
)

CONDENSE_SUMMARY_PROMPT = (
    "SYSTEM:You are a software analysis engineer. The following are summaries of "
    "consecutive fragments of one source file. Merge them into a single description "
    "of about 150 words.\nUSER:{content}\nASSISTANT"
)

HINT_TEMPLATE = ", please also consider {folders}"

EMPTY_FILE_SUMMARY = "File is empty"
FAILED_SUMMARY = "Summary generation failed"


__all__ = [
    "ANALYSIS_KEY",
    "CHUNK_SUMMARY_PROMPT",
    "COMPLETION_FOLDER_ANALYSIS_PROMPT",
    "CONDENSE_SUMMARY_PROMPT",
    "EMPTY_FILE_SUMMARY",
    "FAILED_SUMMARY",
    "FILE_SUMMARY_PROMPT",
    "FOLDER_ANALYSIS_PROMPT",
    "HINT_TEMPLATE",
]
