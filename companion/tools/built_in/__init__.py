"""Built-in tools for Companion

All tools use the @tool decorator and are discovered automatically by the
tool registry; no manual registration is needed.
"""
