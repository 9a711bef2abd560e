"""
Prompt functions for Episode Studio

Each prompt is a function that accepts context and returns a formatted
prompt string. Agent personas (system instructions) live in
episode_studio.agents.
"""
