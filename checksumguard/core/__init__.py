"""
Ядро checksumguard: исключения, метаданные алгоритмов, value-типы и реестр.
"""
