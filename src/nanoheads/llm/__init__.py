"""LLM layer: chat-completion client, response normalization, and the prompt steps.

Every step is a single blocking request against an OpenAI-compatible
``/chat/completions`` endpoint. Oversized requests are retried with shorter
input and JSON-mode rejections are retried without ``response_format``.
"""
