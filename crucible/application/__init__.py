"""Application layer for Crucible of Fate.

Ports describe every external collaborator; services orchestrate the
authority protocol on top of them.
"""
