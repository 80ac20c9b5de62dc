"""
Agora: multi-party debate and discussion orchestration.

Language-model actors take turns under either a fixed pro/con debate script
or a moderator model that decides the next step after every utterance.
"""

__version__ = "0.1.0"
