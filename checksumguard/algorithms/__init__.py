"""
Примитивы дайджеста поверх cryptography.hazmat.primitives.hashes.
"""
