"""Core domain package for hubrelay.

Core contains directive parsing, the topic registry, delivery dedup and
dispatch without any Telegram, HTTP or feed-format specific code.
"""
