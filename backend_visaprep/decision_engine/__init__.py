"""
Decision engine package: route rubrics, final interview evaluation, session lifecycle.

Turns the ordered per-answer score history and the transcript into one
FinalReport. Modules: rubrics, fallback, engine, session.
"""
