"""DoConnect backend - question/answer platform core.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
