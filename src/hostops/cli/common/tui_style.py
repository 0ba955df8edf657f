"""Questionary / prompt_toolkit theme for hostops.

Questionary uses prompt_toolkit under the hood. This module defines the
central styles so all interactive prompts (text/select/confirm) look alike.
"""

from __future__ import annotations

from prompt_toolkit.styles import Style

QUESTIONARY_STYLE_INPUT = Style.from_dict(
    {
        "qmark": "bold ansicyan",
        "question": "bold",
        "answer": "bold ansibrightcyan",
        "instruction": "ansibrightblack",
        "error": "bold ansired",
    }
)

QUESTIONARY_STYLE_SELECT = Style.from_dict(
    {
        "qmark": "bold ansicyan",
        "question": "bold",
        "answer": "bold ansibrightcyan",
        "pointer": "bold ansibrightcyan",
        "highlighted": "bold ansibrightcyan",
        "selected": "bold ansibrightcyan",
        "separator": "ansibrightblack",
        "instruction": "ansibrightblack",
        "disabled": "ansibrightblack",
    }
)

QUESTIONARY_STYLE_CONFIRM = Style.from_dict(
    {
        "qmark": "bold ansiyellow",
        "question": "bold",
        "answer": "bold ansibrightyellow",
        "instruction": "ansibrightblack",
        "error": "bold ansired",
    }
)
