"""
Model-backed analysis agents.

Each agent builds a prompt, collects the model reply via the LLMClient port,
and parses the JSON answer into a small dataclass.
"""
