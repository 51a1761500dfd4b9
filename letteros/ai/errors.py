# letteros/ai/errors.py

class AIServiceError(Exception):
    """The language model call failed or timed out"""

class AIResponseParseError(AIServiceError):
    """The language model answered, but not in the expected shape"""
